import logging
import threading
import time
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Iterator, List

from orderbot.services.cart_engine import Cart, CartLine, clear_cart, recompute

log = logging.getLogger(__name__)


class _SessionLocks:
    """
    One lock per session id; different sessions never contend. An entry only
    exists while some thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}  # session_id -> [lock, users]

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[session_id]

    def __len__(self) -> int:
        return len(self._locks)


class InMemoryCartStore:
    """Process-wide session -> Cart map. Carts live until the process exits."""

    name = "memory"

    def __init__(self) -> None:
        self._carts: Dict[str, Cart] = {}
        self._locks = _SessionLocks()

    def _get_or_create(self, session_id: str) -> Cart:
        cart = self._carts.get(session_id)
        if cart is None:
            cart = self._carts[session_id] = Cart(session_id=session_id)
            log.debug("created cart for session %s", session_id)
        return cart

    @contextmanager
    def session(self, session_id: str) -> Iterator[Cart]:
        """Hold the session's lock for the whole read-modify-write."""
        with self._locks.hold(session_id):
            yield self._get_or_create(session_id)

    def get_or_create(self, session_id: str) -> Cart:
        with self._locks.hold(session_id):
            return self._get_or_create(session_id)

    def reset(self, session_id: str) -> None:
        with self.session(session_id) as cart:
            clear_cart(cart)

    def __contains__(self, session_id) -> bool:
        return session_id in self._carts

    def __len__(self) -> int:
        return len(self._carts)


def _cart_to_doc(cart: Cart) -> dict:
    return {
        "session_id": cart.session_id,
        "lines": [
            {"item_key": ln.item_key, "quantity": ln.quantity, "unit_price": str(ln.unit_price)}
            for ln in cart.lines
        ],
        "updated_at": time.time(),
    }


def _line_state(cart: Cart) -> list:
    return [(ln.item_key, ln.quantity, ln.unit_price) for ln in cart.lines]


def _cart_from_doc(session_id: str, doc: dict | None) -> Cart:
    cart = Cart(session_id=session_id)
    for raw in (doc or {}).get("lines") or []:
        try:
            cart.lines.append(CartLine(
                item_key=str(raw["item_key"]),
                quantity=int(raw["quantity"]),
                unit_price=Decimal(str(raw["unit_price"])),
            ))
        except (KeyError, TypeError, ValueError, ArithmeticError):
            log.warning("dropping malformed cart line for session %s: %r", session_id, raw)
    recompute(cart)
    return cart


class MongoCartStore:
    """
    Durable variant: the cart document is loaded at the start of a session
    block and written back at the end if it changed. Locking is per process
    only.
    """

    name = "mongo"

    def __init__(self, collection) -> None:
        self._coll = collection
        self._locks = _SessionLocks()

    def _load(self, session_id: str) -> Cart:
        doc = self._coll.find_one({"session_id": session_id}, {"_id": 0})
        return _cart_from_doc(session_id, doc)

    def _save(self, cart: Cart) -> None:
        self._coll.replace_one({"session_id": cart.session_id}, _cart_to_doc(cart), upsert=True)

    @contextmanager
    def session(self, session_id: str) -> Iterator[Cart]:
        with self._locks.hold(session_id):
            cart = self._load(session_id)
            before = _line_state(cart)
            yield cart
            if _line_state(cart) != before:
                self._save(cart)

    def get_or_create(self, session_id: str) -> Cart:
        with self.session(session_id) as cart:
            return cart

    def reset(self, session_id: str) -> None:
        with self.session(session_id) as cart:
            clear_cart(cart)


def build_cart_store(kind: str = "memory"):
    if kind == "mongo":
        from orderbot.db.mongo import carts_collection
        return MongoCartStore(carts_collection())
    if kind != "memory":
        log.warning("unknown CART_STORE %r, using in-memory store", kind)
    return InMemoryCartStore()
