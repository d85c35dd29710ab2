import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Tuple

CENT = Decimal("0.01")
SESSION_SEPARATOR = "/sessions/"


def money(n) -> Decimal:
    # half away from zero, 2dp
    return Decimal(str(n)).quantize(CENT, rounding=ROUND_HALF_UP)


def _is_blank(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str) and not v.strip():
        return True
    if isinstance(v, (list, tuple, dict)) and not v:
        return True
    return False


def _unwrap(v: Any, dict_keys: Tuple[str, ...]) -> Any:
    # Dialogflow list params (is_list) and composite entities like @sys.unit-*
    if isinstance(v, (list, tuple)):
        v = next((x for x in v if not _is_blank(x)), None)
    if isinstance(v, dict):
        v = next((v[k] for k in dict_keys if not _is_blank(v.get(k))), None)
    return v


def _first_present(params: Any, candidates: Iterable[str]) -> Any:
    if not isinstance(params, Mapping):
        return None
    for name in candidates:
        v = params.get(name)
        if not _is_blank(v):
            return v
    return None


def extract_item_key(params: Any, candidates: Iterable[str]) -> Optional[str]:
    """Item key from the first non-empty candidate field, or None when absent."""
    v = _unwrap(_first_present(params, candidates), ("name", "value", "original"))
    if v is None:
        return None
    try:
        key = str(v).strip().lower()
    except Exception:
        return None
    return key or None


def _to_number(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError, OverflowError):
        return None


def extract_quantity(params: Any, candidates: Iterable[str], default: int) -> int:
    """
    Positive integer quantity from the first non-empty candidate field.
    Anything unparseable, non-finite or not positive yields `default`.
    """
    v = _unwrap(_first_present(params, candidates), ("amount", "number", "value"))
    n = _to_number(v)
    if n is None or not math.isfinite(n) or n <= 0:
        return default
    q = int(n)
    return q if q > 0 else default


def normalize_params(params: Any, item_fields: Iterable[str], qty_fields: Iterable[str],
                     default_qty: int) -> Tuple[Optional[str], int]:
    return (
        extract_item_key(params, item_fields),
        extract_quantity(params, qty_fields, default_qty),
    )


def first_text(params: Any, candidates: Iterable[str], default: str) -> str:
    v = _unwrap(_first_present(params, candidates), ("name", "value"))
    if v is None:
        return default
    s = str(v).strip()
    return s or default


def session_id_from_path(session: Any, default: str) -> str:
    """
    'projects/p/agent/sessions/abc' -> 'abc'. A bare id is used as is;
    anything missing or empty falls back to `default`.
    """
    if not isinstance(session, str):
        return default
    s = session.strip()
    if SESSION_SEPARATOR in s:
        s = s.split(SESSION_SEPARATOR, 1)[1].strip()
    return s or default
