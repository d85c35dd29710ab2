"""
Cart state machine for one session.

Every mutating operation recomputes `cart.subtotal` before it returns.
Expected outcomes (unknown item, empty cart, ...) are raised as CartError
subclasses and leave the cart untouched.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from orderbot.services.catalog import Catalog
from orderbot.utils.common import money

ZERO = Decimal("0")


# ---------------------------------------------------------------------
# OUTCOMES
# ---------------------------------------------------------------------

class CartError(Exception):
    """Base for user-facing cart outcomes. Never a system failure."""


class MissingItem(CartError):
    pass


class UnknownItem(CartError):
    def __init__(self, item_key: str):
        super().__init__(item_key)
        self.item_key = item_key


class InvalidQuantity(CartError):
    def __init__(self, quantity):
        super().__init__(quantity)
        self.quantity = quantity


class ItemNotInCart(CartError):
    def __init__(self, item_key: str):
        super().__init__(item_key)
        self.item_key = item_key


class EmptyCart(CartError):
    pass


# ---------------------------------------------------------------------
# STATE
# ---------------------------------------------------------------------

@dataclass
class CartLine:
    item_key: str
    quantity: int
    unit_price: Decimal  # snapshot taken when the line was first added

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    session_id: str
    lines: List[CartLine] = field(default_factory=list)
    subtotal: Decimal = ZERO

    def find(self, item_key: str) -> Optional[CartLine]:
        return next((ln for ln in self.lines if ln.item_key == item_key), None)

    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class AddResult:
    item_key: str
    added: int
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class LineView:
    item_key: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class CartView:
    lines: List[LineView]
    subtotal: Decimal


@dataclass(frozen=True)
class RemoveResult:
    item_key: str
    removed: int
    remaining: int
    subtotal: Decimal


@dataclass(frozen=True)
class Receipt:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int


def recompute(cart: Cart) -> Decimal:
    cart.subtotal = sum((ln.line_total for ln in cart.lines), ZERO)
    return cart.subtotal


# ---------------------------------------------------------------------
# OPERATIONS
# ---------------------------------------------------------------------

def add_item(cart: Cart, item_key: Optional[str], quantity: int, catalog: Catalog) -> AddResult:
    if not item_key:
        raise MissingItem()
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise InvalidQuantity(quantity)
    entry = catalog.lookup(item_key)
    if entry is None:
        raise UnknownItem(item_key)

    line = cart.find(item_key)
    if line:
        line.quantity += quantity
    else:
        line = CartLine(item_key=item_key, quantity=quantity, unit_price=entry.unit_price)
        cart.lines.append(line)

    subtotal = recompute(cart)
    return AddResult(item_key=item_key, added=quantity, quantity=line.quantity, subtotal=subtotal)


def show_cart(cart: Cart, catalog: Catalog) -> CartView:
    if cart.is_empty():
        raise EmptyCart()
    views = [
        LineView(
            item_key=ln.item_key,
            name=catalog.display_name(ln.item_key),
            quantity=ln.quantity,
            unit_price=ln.unit_price,
            line_total=ln.line_total,
        )
        for ln in cart.lines
    ]
    return CartView(lines=views, subtotal=cart.subtotal)


def remove_item(cart: Cart, item_key: Optional[str], quantity: int) -> RemoveResult:
    """
    quantity > 0 takes that many off the line; quantity <= 0 drops the
    whole line regardless of how many are in it.
    """
    if not item_key:
        raise MissingItem()
    line = cart.find(item_key)
    if line is None:
        raise ItemNotInCart(item_key)

    if quantity > 0 and quantity < line.quantity:
        line.quantity -= quantity
        removed, remaining = quantity, line.quantity
    else:
        cart.lines.remove(line)
        removed, remaining = line.quantity, 0

    subtotal = recompute(cart)
    return RemoveResult(item_key=item_key, removed=removed, remaining=remaining, subtotal=subtotal)


def clear_cart(cart: Cart) -> int:
    dropped = len(cart.lines)
    cart.lines = []
    cart.subtotal = ZERO
    return dropped


def checkout(cart: Cart, tax_rate) -> Receipt:
    if cart.is_empty():
        raise EmptyCart()
    subtotal = money(recompute(cart))
    tax = money(subtotal * Decimal(str(tax_rate)))
    total = money(subtotal + tax)
    item_count = sum(ln.quantity for ln in cart.lines)
    clear_cart(cart)
    return Receipt(subtotal=subtotal, tax=tax, total=total, item_count=item_count)
