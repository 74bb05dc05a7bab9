# stack_utils.py
from __future__ import annotations

from typing import Any, Mapping, Optional
import math
import re

DEFAULT_CPK = 1.33

_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_leading_float(value: Any) -> Optional[float]:
    """Parse a number from the start of a string, ignoring trailing text.

    Mirrors spreadsheet-style entry: ``"0.2mm"`` reads as ``0.2``,
    ``"abc"`` reads as nothing. Real numbers pass through unchanged.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return f if math.isfinite(f) else None
    m = _LEADING_FLOAT.match(str(value))
    if not m:
        return None
    f = float(m.group(1))
    return f if math.isfinite(f) else None


def coerce_float(value: Any, default: float = 0.0) -> float:
    parsed = parse_leading_float(value)
    return default if parsed is None else parsed


def optional_float(value: Any) -> Optional[float]:
    """Blank cells and unparseable text become ``None``."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return parse_leading_float(value)


def effective_cpk(cpk: Any) -> float:
    """Capability used as a divisor: absent, zero or unparseable means 1.33."""
    parsed = parse_leading_float(cpk)
    if parsed is None or parsed == 0.0:
        return DEFAULT_CPK
    return parsed


def contributor_variance(tol_adj: float, cpk: Any) -> float:
    """Variance of one contributor: its half-width taken as 3*Cpk sigma."""
    sigma = tol_adj / (3.0 * effective_cpk(cpk))
    return sigma ** 2


def direction_sign(direction: Any) -> int:
    return -1 if str(direction).strip() == "-" else 1


def row_value(row: Any, name: str, default: Any = None) -> Any:
    """Read a contributor field from a dataclass or a JSON-style mapping."""
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)
