"""Safe numeric and string coercion shared by all normalizers.

Upstream payloads may carry ``null``, missing or non-finite values; nothing
here raises, every helper falls back to a default instead.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")


def safe_number(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def safe_int(value: Any, default: int = 0) -> int:
    number = safe_number(value, float("nan"))
    if math.isnan(number):
        return default
    return int(number)


def safe_string(value: Any, default: str = "") -> str:
    return value.strip() if isinstance(value, str) and value.strip() else default


def optional_string(value: Any) -> str | None:
    return safe_string(value) or None


def sanitize_text(value: Any) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def finite_series(values: Any) -> tuple[float, ...]:
    """Keep the finite numeric entries of a list; anything else yields ()."""
    if not isinstance(values, Iterable) or isinstance(values, (str, bytes, dict)):
        return ()
    series = (safe_number(v, math.nan) if isinstance(v, (int, float)) else math.nan for v in values)
    return tuple(v for v in series if not math.isnan(v))


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
