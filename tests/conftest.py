import pytest

from orderbot.services.cart_engine import Cart
from orderbot.services.cart_store import InMemoryCartStore
from orderbot.services.catalog import build_catalog
from orderbot.services.dispatcher import Dispatcher, IntentRequest
from orderbot.services.formatter import CurrencyFormatter

MENU = [
    {"key": "pizza", "name": "Pizza", "price": "10.99"},
    {"key": "burger", "name": "Burger", "price": "8.49"},
    {"key": "soda", "name": "Soda", "price": "1.99"},
]

ITEM_FIELDS = ("item", "menu_item", "product")
QTY_FIELDS = ("quantity", "qty", "number")


@pytest.fixture
def catalog():
    return build_catalog(MENU)


@pytest.fixture
def cart():
    return Cart(session_id="test")


@pytest.fixture
def store():
    return InMemoryCartStore()


@pytest.fixture
def currency():
    # no locale -> deterministic "$1,234.56" rendering
    return CurrencyFormatter(locale_name="", symbol="$")


@pytest.fixture
def dispatcher(store, catalog, currency):
    return Dispatcher(
        store,
        catalog,
        currency,
        tax_rate=0.05,
        item_fields=ITEM_FIELDS,
        quantity_fields=QTY_FIELDS,
        welcome_message="Hi there!",
        store_hours="Open 9-5.",
    )


@pytest.fixture
def say(dispatcher):
    """Dispatch an intent and return the reply text."""
    def _say(intent, session="A", **params):
        resp = dispatcher.dispatch(IntentRequest(session_id=session, intent_name=intent, parameters=params))
        return resp["fulfillmentMessages"][0]["text"]["text"][0]
    return _say
