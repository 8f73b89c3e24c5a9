"""
Correction helpers for untrusted numeric input.

The engine never halts on a bad number: these helpers log a warning and hand
back a safe value so the idle loop keeps running.
"""

import math
from typing import Any, Optional

from catchery import log_warning


def is_finite_number(value: Any) -> bool:
    """Returns True for ints and floats that are neither NaN nor infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def ensure_finite_number(
    value: Any,
    param_name: str,
    default: float = 0,
    context: Optional[dict[str, Any]] = None,
) -> float:
    """
    Ensures a value is a finite number, substituting the default if needed.
    Logs a warning for invalid values but continues execution.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        default: Value used when the input is missing, NaN or infinite
        context: Additional context for logging

    Returns:
        float: The value or the default
    """
    if is_finite_number(value):
        return value
    log_warning(
        f"{param_name} must be a finite number, got: {value}, correcting to {default}",
        {
            **(context or {}),
            "param_name": param_name,
            "value": value,
            "corrected_to": default,
        },
    )
    return default


def ensure_int_in_range(
    value: Any,
    param_name: str,
    min_val: int,
    max_val: Optional[int] = None,
    default: Optional[int] = None,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """
    Ensures a value is an integer within the specified range, correcting if needed.
    Logs a warning for out-of-range values but continues execution.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive), None for no maximum
        default: Default value if correction is needed, uses min_val if None
        context: Additional context for logging

    Returns:
        int: The corrected integer value
    """
    if default is None:
        default = min_val

    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or value < min_val
        or (max_val is not None and value > max_val)
    ):
        range_desc = (
            f">= {min_val}" if max_val is None else f"between {min_val} and {max_val}"
        )
        log_warning(
            f"{param_name} must be integer {range_desc}, got: {value}, correcting",
            {
                **(context or {}),
                "param_name": param_name,
                "value": value,
                "min_val": min_val,
                "max_val": max_val,
            },
        )
        # Try to convert and clamp
        converted = int(value) if is_finite_number(value) else default
        if converted < min_val:
            return min_val
        if max_val is not None and converted > max_val:
            return max_val
        return converted
    return value


def floor_at_least(value: Any, minimum: int, param_name: str, default: int) -> int:
    """
    Floors a numeric value to an integer no lower than `minimum`.

    Non-finite input is replaced by `default` before flooring.

    Args:
        value: The raw numeric value
        minimum: Lowest value returned
        param_name: Human-readable parameter name for error messages
        default: Value used when the input is not a finite number

    Returns:
        int: The floored and clamped value
    """
    number = ensure_finite_number(value, param_name, default)
    return max(minimum, math.floor(number))
