"""General utilities for sglife

Contents
--------
- Validation helper (finite numbers)
- Rounding for display-stable snapshots
- Currency / percentage / large-number formatters
"""

from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np

from .exceptions import ValidationError

__all__ = [
    # Validation
    "check_finite",
    # Rounding
    "round_currency",
    # Formatting
    "is_valid_number",
    "ensure_valid_number",
    "format_currency",
    "format_percentage",
    "format_large_number",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_finite(name: str, value: Any) -> float:
    """Return *value* as float, raising ValidationError if missing or not finite."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is required and must be a number (got {value!r}).")
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number (got {value!r}).") from exc
    if not math.isfinite(v):
        raise ValidationError(f"{name} must be finite (got {v}).")
    return v


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_currency(value: float) -> int:
    """Round half away from zero to whole currency units.

    Python's round() is banker's rounding; snapshots follow the
    half-up convention so 0.5 always rounds toward the larger magnitude.
    """
    return int(np.sign(value) * np.floor(abs(value) + 0.5))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def is_valid_number(value: Any) -> bool:
    """True for finite int/float values (bools excluded)."""
    return (
        isinstance(value, (int, float, np.integer, np.floating))
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def ensure_valid_number(value: Any, fallback: float = 0.0) -> float:
    return float(value) if is_valid_number(value) else fallback


def format_currency(value: Any, decimals: int = 0, symbol: str = "$",
                    fallback: float = 0.0) -> str:
    """Format as currency with thousands separators, e.g. ``$1,234``.

    Negative values render as ``-$1,234``. Invalid numbers use *fallback*.
    """
    v = ensure_valid_number(value, fallback)
    sign = "-" if v < 0 else ""
    return f"{sign}{symbol}{abs(v):,.{decimals}f}"


def format_percentage(value: Any, decimals: int = 1, fallback: float = 0.0) -> str:
    v = ensure_valid_number(value, fallback)
    return f"{v:.{decimals}f}%"


def format_large_number(value: Any, decimals: int = 1,
                        fallback: float = 0.0, prefix: Optional[str] = None) -> str:
    """Abbreviate with k / M / B suffixes (``1.5M``)."""
    v = ensure_valid_number(value, fallback)
    p = prefix or ""
    a = abs(v)
    if a >= 1e9:
        return f"{p}{v / 1e9:.{decimals}f}B"
    if a >= 1e6:
        return f"{p}{v / 1e6:.{decimals}f}M"
    if a >= 1e3:
        return f"{p}{v / 1e3:.{decimals}f}k"
    return f"{p}{v:.{decimals}f}"
