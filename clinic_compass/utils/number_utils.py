"""Numeric helpers shared by the analysis engine"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (2.5 → 3, -2.5 → -2)"""
    # value - floor(value) is exact, value + 0.5 is not
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def safe_ratio_percent(numerator: float, denominator: float) -> int:
    """numerator / denominator as a rounded percentage, 0 when denominator is not positive"""
    if denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100)


def format_won(amount: float) -> str:
    """Format an amount with thousands separators (1234567 → '1,234,567')"""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.1f}"


def format_number(value: float) -> str:
    """Compact display for inputs that may be int or float (37.0 → '37', 37.5 → '37.5')"""
    return f"{value:g}"
