import pytest

from orderbot.schemas.models import WebhookRequest
from orderbot.services.dispatcher import INTENT_ALIASES, Intent, resolve_intent


def test_static_intents(say):
    assert say("Default Welcome Intent") == "Hi there!"
    assert say("GetStoreHours") == "Open 9-5."
    assert say("Default Fallback Intent") == "Sorry, I didn’t get that. Can you rephrase?"


def test_order_status(say):
    assert say("CheckOrderStatus", order_id="A-77") == "Order A-77: packed and ready to ship 🚚"
    assert say("CheckOrderStatus") == "Order N/A: packed and ready to ship 🚚"


@pytest.mark.parametrize("alias", sorted(INTENT_ALIASES))
def test_every_alias_resolves(alias):
    assert resolve_intent(alias) is INTENT_ALIASES[alias]
    assert resolve_intent(alias) is not Intent.UNKNOWN


def test_unrecognized_intent_echoes_name_and_leaves_cart(say, store):
    say("AddItem", item="pizza", quantity=2)
    assert say("OrderPizzaTypo", item="pizza") == "No handler for this intent: OrderPizzaTypo."
    assert store.get_or_create("A").lines[0].quantity == 2


def test_missing_intent_name(say, store):
    assert say(None) == "No handler for this intent: (none)."
    assert "A" not in store


def test_add_show_checkout_flow(say):
    assert say("AddItem", item="Pizza") == "Added 1 × Pizza to your cart. Subtotal: $10.99."
    assert say("AddToCart", menu_item="pizza", qty="1") == (
        "Added 1 × Pizza to your cart. You now have 2. Subtotal: $21.98."
    )
    assert say("ShowCart") == "Your cart: 2 × Pizza = $21.98. Subtotal: $21.98."
    assert say("Checkout") == (
        "Order placed for 2 item(s). Subtotal $21.98, tax $1.10, total $23.08. Thank you!"
    )
    assert say("ShowCart") == "Your cart is empty. Tell me what you'd like to order!"


def test_add_unknown_item(say, store):
    reply = say("AddItem", item="sushi", quantity=1)
    assert reply.startswith("Sorry, we don't have 'sushi'.")
    assert "Pizza" in reply
    assert store.get_or_create("A").is_empty()


def test_add_without_item(say):
    assert say("AddItem", quantity=2) == "Which item would you like? Please tell me the item name."


def test_remove_defaults_to_whole_line(say, store):
    say("AddItem", item="pizza", quantity=4)
    say("AddItem", item="soda")
    assert say("RemoveItem", item="pizza") == "Removed Pizza from your cart. Subtotal: $1.99."
    assert [ln.item_key for ln in store.get_or_create("A").lines] == ["soda"]


def test_remove_partial(say):
    say("AddItem", item="pizza", quantity=3)
    assert say("order.remove", item="pizza", quantity=1) == (
        "Removed 1 × Pizza. 2 left in your cart. Subtotal: $21.98."
    )


def test_remove_item_not_in_cart(say):
    assert say("RemoveItem", item="burger") == "Burger isn't in your cart."


def test_clear_cart(say, store):
    assert say("ClearCart") == "Your cart is already empty."
    say("AddItem", item="pizza")
    assert say("EmptyCart") == "Your cart has been cleared."
    assert store.get_or_create("A").is_empty()


def test_checkout_empty(say):
    assert say("Checkout") == "Your cart is empty. Tell me what you'd like to order!"


def test_session_isolation(say, store):
    say("AddItem", session="A", item="pizza", quantity=2)
    say("AddItem", session="B", item="soda")
    say("Checkout", session="B")

    assert store.get_or_create("A").lines[0].quantity == 2
    assert store.get_or_create("B").is_empty()


def test_handle_extracts_session_from_path(dispatcher, store):
    body = WebhookRequest.model_validate({
        "session": "projects/demo/agent/sessions/s-42",
        "queryResult": {"intent": {"displayName": "AddItem"}, "parameters": {"item": "burger"}},
    })
    resp = dispatcher.handle(body)
    assert resp == {"fulfillmentMessages": [{"text": {"text": [
        "Added 1 × Burger to your cart. Subtotal: $8.49."
    ]}}]}
    assert "s-42" in store


def test_handle_without_session_uses_sentinel(dispatcher, store):
    body = WebhookRequest.model_validate({"queryResult": {"intent": {"displayName": "ShowCart"}}})
    dispatcher.handle(body)
    assert "anon" in store


def test_request_keeps_only_fields_the_webhook_reads():
    body = WebhookRequest.model_validate({
        "responseId": "r-1",
        "queryResult": {"queryText": "two pizzas", "intent": {"displayName": "AddItem"},
                        "parameters": {"item": "pizza"}},
    })
    assert set(body.queryResult.model_dump()) == {"intent", "parameters"}
