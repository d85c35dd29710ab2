"""
Intent routing for the Dialogflow webhook.

Alias names are resolved to a canonical Intent before dispatch; names that
match nothing go to the unknown-intent handler, which echoes the name back
so NLU console mismatches are easy to spot.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from orderbot.schemas.models import WebhookRequest
from orderbot.services import cart_engine as engine
from orderbot.services import formatter as fmt
from orderbot.services.cart_engine import CartError
from orderbot.services.catalog import Catalog
from orderbot.utils.common import first_text, normalize_params, session_id_from_path

log = logging.getLogger(__name__)

ADD_DEFAULT_QTY = 1
REMOVE_DEFAULT_QTY = 0  # 0 = take the whole line out


class Intent(str, Enum):
    WELCOME = "Default Welcome Intent"
    STORE_HOURS = "GetStoreHours"
    ORDER_STATUS = "CheckOrderStatus"
    FALLBACK = "Default Fallback Intent"
    ADD_ITEM = "AddItem"
    SHOW_CART = "ShowCart"
    REMOVE_ITEM = "RemoveItem"
    CLEAR_CART = "ClearCart"
    CHECKOUT = "Checkout"
    UNKNOWN = "__unknown__"


INTENT_ALIASES: Dict[str, Intent] = {
    "Welcome": Intent.WELCOME,
    "welcome": Intent.WELCOME,
    "StoreHours": Intent.STORE_HOURS,
    "store.hours": Intent.STORE_HOURS,
    "OrderStatus": Intent.ORDER_STATUS,
    "order.status": Intent.ORDER_STATUS,
    "AddToCart": Intent.ADD_ITEM,
    "order.add": Intent.ADD_ITEM,
    "add_item": Intent.ADD_ITEM,
    "ViewCart": Intent.SHOW_CART,
    "cart.show": Intent.SHOW_CART,
    "show_cart": Intent.SHOW_CART,
    "RemoveFromCart": Intent.REMOVE_ITEM,
    "order.remove": Intent.REMOVE_ITEM,
    "remove_item": Intent.REMOVE_ITEM,
    "EmptyCart": Intent.CLEAR_CART,
    "cart.clear": Intent.CLEAR_CART,
    "clear_cart": Intent.CLEAR_CART,
    "PlaceOrder": Intent.CHECKOUT,
    "order.checkout": Intent.CHECKOUT,
    "checkout": Intent.CHECKOUT,
}

_CANONICAL = {i.value: i for i in Intent if i is not Intent.UNKNOWN}


def resolve_intent(name: Optional[str]) -> Intent:
    if not name:
        return Intent.UNKNOWN
    return _CANONICAL.get(name) or INTENT_ALIASES.get(name) or Intent.UNKNOWN


@dataclass(frozen=True)
class IntentRequest:
    session_id: str
    intent_name: Optional[str]
    parameters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_webhook(cls, req: WebhookRequest, default_session: str) -> "IntentRequest":
        qr = req.queryResult
        return cls(
            session_id=session_id_from_path(req.session, default_session),
            intent_name=qr.intent.displayName,
            parameters=dict(qr.parameters or {}),
        )


class Dispatcher:
    def __init__(
        self,
        store,
        catalog: Catalog,
        currency: fmt.CurrencyFormatter,
        *,
        tax_rate: float,
        item_fields: Iterable[str],
        quantity_fields: Iterable[str],
        welcome_message: str = "Hello! How can I help?",
        store_hours: str = "We are open Mon-Sat, 9 AM to 7 PM.",
        default_session: str = "anon",
    ):
        self.store = store
        self.catalog = catalog
        self.currency = currency
        self.tax_rate = tax_rate
        self.item_fields = tuple(item_fields)
        self.quantity_fields = tuple(quantity_fields)
        self.welcome_message = welcome_message
        self.store_hours = store_hours
        self.default_session = default_session

        self._handlers: Dict[Intent, Callable[[IntentRequest], str]] = {
            Intent.WELCOME: lambda r: self.welcome_message,
            Intent.STORE_HOURS: lambda r: self.store_hours,
            Intent.ORDER_STATUS: self._order_status,
            Intent.FALLBACK: lambda r: fmt.FALLBACK_TEXT,
            Intent.ADD_ITEM: self._add_item,
            Intent.SHOW_CART: self._show_cart,
            Intent.REMOVE_ITEM: self._remove_item,
            Intent.CLEAR_CART: self._clear_cart,
            Intent.CHECKOUT: self._checkout,
            Intent.UNKNOWN: self._unknown,
        }

    # -----------------------------------------------------------------
    # entry points
    # -----------------------------------------------------------------

    def dispatch(self, req: IntentRequest) -> Dict[str, Any]:
        intent = resolve_intent(req.intent_name)
        log.debug("session=%s intent=%r -> %s", req.session_id, req.intent_name, intent.name)
        message = self._handlers[intent](req)
        return fmt.text_response(message)

    def handle(self, body: WebhookRequest) -> Dict[str, Any]:
        return self.dispatch(IntentRequest.from_webhook(body, self.default_session))

    # -----------------------------------------------------------------
    # handlers
    # -----------------------------------------------------------------

    def _unknown(self, req: IntentRequest) -> str:
        log.info("no handler for intent %r (session %s)", req.intent_name, req.session_id)
        return f"No handler for this intent: {req.intent_name or '(none)'}."

    def _order_status(self, req: IntentRequest) -> str:
        order_id = first_text(req.parameters, ("order_id",), "N/A")
        return f"Order {order_id}: packed and ready to ship 🚚"

    def _params(self, req: IntentRequest, default_qty: int):
        return normalize_params(req.parameters, self.item_fields, self.quantity_fields, default_qty)

    def _add_item(self, req: IntentRequest) -> str:
        item_key, qty = self._params(req, ADD_DEFAULT_QTY)
        try:
            with self.store.session(req.session_id) as cart:
                res = engine.add_item(cart, item_key, qty, self.catalog)
        except CartError as e:
            return fmt.cart_error_message(e, self.catalog)
        return fmt.added_message(res, self.catalog, self.currency)

    def _show_cart(self, req: IntentRequest) -> str:
        try:
            with self.store.session(req.session_id) as cart:
                view = engine.show_cart(cart, self.catalog)
        except CartError as e:
            return fmt.cart_error_message(e, self.catalog)
        return fmt.cart_message(view, self.currency)

    def _remove_item(self, req: IntentRequest) -> str:
        item_key, qty = self._params(req, REMOVE_DEFAULT_QTY)
        try:
            with self.store.session(req.session_id) as cart:
                res = engine.remove_item(cart, item_key, qty)
        except CartError as e:
            return fmt.cart_error_message(e, self.catalog)
        return fmt.removed_message(res, self.catalog, self.currency)

    def _clear_cart(self, req: IntentRequest) -> str:
        with self.store.session(req.session_id) as cart:
            dropped = engine.clear_cart(cart)
        return fmt.cleared_message(dropped)

    def _checkout(self, req: IntentRequest) -> str:
        try:
            with self.store.session(req.session_id) as cart:
                receipt = engine.checkout(cart, self.tax_rate)
        except CartError as e:
            return fmt.cart_error_message(e, self.catalog)
        return fmt.receipt_message(receipt, self.currency)
