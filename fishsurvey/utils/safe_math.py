"""
Division and rounding helpers shared by every metrics calculator.

Field data is routinely incomplete mid-survey, so no metric may produce
NaN, Infinity or raise on a zero denominator. Each calculator picks one of
the sentinels below instead:

- ``0`` for percentages and means when the total is zero or nothing was measured
- ``NO_RANGE`` (``"-"``) for ranges and condition means with no measurements
- ``NOT_AVAILABLE`` (``"N/A"``) for every CPUE whose total effort is zero
"""
import math
from typing import Optional, Union

NOT_AVAILABLE = "N/A"
NO_RANGE = "-"

# Per-set CPUE divides by one hour when a set has neither effort nor soak time.
EFFORT_FALLBACK_HOURS = 1.0

Number = Union[int, float]


def is_measured(value: Optional[Number]) -> bool:
    """Return True for a finite, positive measurement."""
    if value is None:
        return False
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def safe_divide(
    numerator: Number,
    denominator: Optional[Number],
    default: Union[Number, str, None] = 0,
) -> Union[float, str, None]:
    """
    Divide, returning ``default`` instead of a non-finite result.

    Args:
        numerator: Dividend
        denominator: Divisor; None, zero and NaN all yield ``default``
        default: Sentinel returned when the division is undefined

    Returns:
        The quotient, or ``default``
    """
    if denominator is None or not math.isfinite(denominator) or denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


def safe_percent(part: Number, total: Number, digits: int = 1) -> float:
    """Share of ``part`` in ``total`` as a rounded percentage, 0 if total is 0."""
    share = safe_divide(part * 100, total, default=0)
    return round(share, digits)


def rounded_or(value: Union[float, str, None], digits: int) -> Union[float, str, None]:
    """Round numeric values, pass sentinels through untouched."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return round(value, digits)
    return value


def format_number(value: float) -> str:
    """
    Render a measurement the way field sheets show it.

    Whole numbers lose their trailing ``.0`` (``300.0`` -> ``"300"``).
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_range(values, digits: Optional[int] = None) -> str:
    """
    Render ``"min-max"`` over the values, or ``NO_RANGE`` when empty.

    Args:
        values: Measurements to summarise
        digits: Fixed decimals for both ends; raw values when None
    """
    if len(values) == 0:
        return NO_RANGE
    low, high = min(values), max(values)
    if digits is None:
        return f"{format_number(low)}-{format_number(high)}"
    return f"{low:.{digits}f}-{high:.{digits}f}"
