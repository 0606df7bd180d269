"""
Unit conversion helpers used by the metrics calculators and report assembly.
"""
from typing import Optional

MM_PER_INCH = 25.4
GRAMS_PER_POUND = 453.592
SECONDS_PER_HOUR = 3600


def mm_to_inches(length_mm: float) -> float:
    """Convert a length in millimetres to inches."""
    return length_mm / MM_PER_INCH


def grams_to_pounds(weight_g: float) -> float:
    """Convert a weight in grams to pounds."""
    return weight_g / GRAMS_PER_POUND


def grams_to_kilograms(weight_g: float) -> float:
    return weight_g / 1000


def seconds_to_hours(seconds: float) -> float:
    return seconds / SECONDS_PER_HOUR


def celsius_to_fahrenheit(temp_c: Optional[float]) -> Optional[float]:
    """
    Convert a water temperature to Fahrenheit.

    Args:
        temp_c: Temperature in degrees Celsius, or None if not measured

    Returns:
        Temperature in degrees Fahrenheit, or None
    """
    if temp_c is None:
        return None
    return temp_c * 9 / 5 + 32
