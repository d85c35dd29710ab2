import locale
import logging
import threading
from decimal import Decimal
from typing import Any, Dict

from orderbot.services.cart_engine import (
    AddResult, CartError, CartView, EmptyCart, InvalidQuantity, ItemNotInCart,
    MissingItem, Receipt, RemoveResult, UnknownItem,
)
from orderbot.services.catalog import Catalog
from orderbot.utils.common import money

log = logging.getLogger(__name__)

APOLOGY = "Sorry, something went wrong on our side. Please try again."
FALLBACK_TEXT = "Sorry, I didn’t get that. Can you rephrase?"


def text_response(message: Any) -> Dict[str, Any]:
    """Dialogflow ES reply envelope carrying a single text segment."""
    return {"fulfillmentMessages": [{"text": {"text": [str(message)]}}]}


# LC_MONETARY is process-global; every switch happens under this lock
_LOCALE_LOCK = threading.Lock()


class CurrencyFormatter:
    """
    Locale-aware money rendering. If the locale cannot be activated in this
    runtime, amounts are rendered as symbol + two decimals instead.

    Each call activates this formatter's own LC_MONETARY and restores the
    previous one afterwards, so formatters with different locales do not
    change each other's output.
    """

    def __init__(self, locale_name: str = "en_US.UTF-8", symbol: str = "$"):
        self.symbol = symbol
        self.locale_name = locale_name
        self.locale_ok = False
        if locale_name:
            try:
                self._render(Decimal("0"))
                self.locale_ok = True
            except (locale.Error, ValueError):
                log.info("locale %s unavailable, using %s fallback for prices", locale_name, symbol)

    def _render(self, value: Decimal) -> str:
        with _LOCALE_LOCK:
            previous = locale.setlocale(locale.LC_MONETARY)
            locale.setlocale(locale.LC_MONETARY, self.locale_name)
            try:
                # ValueError here means the locale has no currency info ('C')
                return locale.currency(value, symbol=True, grouping=True)
            finally:
                locale.setlocale(locale.LC_MONETARY, previous)

    def fallback(self, amount) -> str:
        return f"{self.symbol}{money(amount):,.2f}"

    def format(self, amount) -> str:
        value = money(amount)
        if self.locale_ok:
            try:
                return self._render(value)
            except (locale.Error, ValueError):
                log.warning("locale %s stopped working, using fallback", self.locale_name)
                self.locale_ok = False
        return self.fallback(value)

    __call__ = format


# ---------------------------------------------------------------------
# MESSAGES
# ---------------------------------------------------------------------

def _qty_name(quantity: int, name: str) -> str:
    return f"{quantity} × {name}"


def added_message(res: AddResult, catalog: Catalog, fmt: CurrencyFormatter) -> str:
    name = catalog.display_name(res.item_key)
    msg = f"Added {_qty_name(res.added, name)} to your cart."
    if res.quantity != res.added:
        msg += f" You now have {res.quantity}."
    return f"{msg} Subtotal: {fmt(res.subtotal)}."


def cart_message(view: CartView, fmt: CurrencyFormatter) -> str:
    rows = [f"{_qty_name(ln.quantity, ln.name)} = {fmt(ln.line_total)}" for ln in view.lines]
    return "Your cart: " + "; ".join(rows) + f". Subtotal: {fmt(view.subtotal)}."


def removed_message(res: RemoveResult, catalog: Catalog, fmt: CurrencyFormatter) -> str:
    name = catalog.display_name(res.item_key)
    if res.remaining:
        msg = f"Removed {_qty_name(res.removed, name)}. {res.remaining} left in your cart."
    else:
        msg = f"Removed {name} from your cart."
    return f"{msg} Subtotal: {fmt(res.subtotal)}."


def cleared_message(dropped: int) -> str:
    if not dropped:
        return "Your cart is already empty."
    return "Your cart has been cleared."


def receipt_message(receipt: Receipt, fmt: CurrencyFormatter) -> str:
    return (
        f"Order placed for {receipt.item_count} item(s). "
        f"Subtotal {fmt(receipt.subtotal)}, tax {fmt(receipt.tax)}, "
        f"total {fmt(receipt.total)}. Thank you!"
    )


def cart_error_message(err: CartError, catalog: Catalog) -> str:
    if isinstance(err, MissingItem):
        return "Which item would you like? Please tell me the item name."
    if isinstance(err, UnknownItem):
        menu = ", ".join(catalog.display_name(k) for k in catalog.keys())
        return f"Sorry, we don't have '{err.item_key}'. We have: {menu}."
    if isinstance(err, InvalidQuantity):
        return "Please tell me a quantity of at least 1."
    if isinstance(err, ItemNotInCart):
        return f"{catalog.display_name(err.item_key)} isn't in your cart."
    if isinstance(err, EmptyCart):
        return "Your cart is empty. Tell me what you'd like to order!"
    return FALLBACK_TEXT
