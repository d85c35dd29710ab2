import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, Optional


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    display_name: str
    unit_price: Decimal


DEFAULT_MENU = [
    {"key": "pizza",  "name": "Pizza",        "price": "10.99"},
    {"key": "burger", "name": "Burger",       "price": "8.49"},
    {"key": "fries",  "name": "French Fries", "price": "3.49"},
    {"key": "salad",  "name": "Garden Salad", "price": "7.25"},
    {"key": "pasta",  "name": "Pasta",        "price": "12.50"},
    {"key": "soda",   "name": "Soda",         "price": "1.99"},
]


class Catalog:
    """Fixed item menu. Keys arrive already lowercased and trimmed."""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries: Dict[str, CatalogEntry] = {}
        for e in entries:
            if e.key in self._entries:
                raise ValueError(f"Duplicate catalog key '{e.key}'")
            if not e.unit_price.is_finite():
                raise ValueError(f"Price for '{e.key}' is not a finite number")
            if e.unit_price < 0:
                raise ValueError(f"Negative price for '{e.key}'")
            self._entries[e.key] = e

    def lookup(self, key: str) -> Optional[CatalogEntry]:
        return self._entries.get(key)

    def display_name(self, key: str) -> str:
        entry = self._entries.get(key)
        return entry.display_name if entry else key

    def keys(self):
        return list(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _entry_from_raw(raw: dict, key=None) -> CatalogEntry:
    if not isinstance(raw, dict):
        raise ValueError(f"Catalog entry is not an object: {raw!r}")
    if key is None:
        key = raw.get("key", raw.get("id"))
    k = "" if key is None else str(key).strip().lower()
    if not k:
        raise ValueError(f"Catalog entry without a key: {raw!r}")
    try:
        price = Decimal(str(raw.get("price", 0)))
    except InvalidOperation:
        raise ValueError(f"Bad price for '{k}': {raw.get('price')!r}") from None
    return CatalogEntry(
        key=k,
        display_name=str(raw.get("name") or k.title()),
        unit_price=price,
    )


def build_catalog(raw_items) -> Catalog:
    """
    Accepts either a list of {"key"/"id", "name", "price"} dicts or a
    mapping of key -> {"name", "price"}.
    """
    if isinstance(raw_items, dict):
        entries = [_entry_from_raw(v if v is not None else {}, key=k) for k, v in raw_items.items()]
    else:
        entries = [_entry_from_raw(it) for it in raw_items or []]
    return Catalog(entries)


def load_catalog(path: Optional[str] = None) -> Catalog:
    if not path:
        return build_catalog(DEFAULT_MENU)
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return build_catalog(data)
