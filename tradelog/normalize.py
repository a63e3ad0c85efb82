"""Numeric normalization for journal records.

Every numeric field that reaches the analytics layer passes through
:func:`to_finite_number` exactly once, so the zero-default policy for
missing or malformed values lives here and nowhere else.
"""

import math
from typing import Any, Optional


def to_finite_number(value: Any, fallback: float = 0.0) -> float:
    """Coerce a value to a finite float.

    Args:
        value: Raw value (number, numeric string, None, or junk).
        fallback: Value returned when coercion is impossible.

    Returns:
        The value as a float, or ``fallback`` for None, non-numeric,
        NaN and infinite inputs.
    """
    if value is None:
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return number


def to_optional_number(value: Any) -> Optional[float]:
    """Coerce a value to a float, keeping absence distinct from zero.

    None and blank strings mean "unknown" and stay None. Anything else is
    normalized with :func:`to_finite_number`, so junk becomes 0.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return to_finite_number(value)
