"""
formatting.py
--------------
Display helpers for report output. Locale is fixed to US conventions.
"""

import math
from decimal import Decimal, ROUND_HALF_UP


def format_currency(value: float) -> str:
    """Whole-dollar USD string, e.g. 1234.5 → "$1,235", -50 → "-$50"."""
    # Half-away-from-zero, not Python's banker's rounding
    dollars = math.floor(abs(value) + 0.5)
    if value < 0 and dollars > 0:
        return f"-${dollars:,}"
    return f"${dollars:,}"


def format_percentage(value: float) -> str:
    """Fraction to a one-decimal percentage, e.g. 0.35 → "35.0%", 0.0125 → "1.3%"."""
    # repr() keeps the shortest decimal form, so 0.0125 stays exactly 1.25%
    percent = (Decimal(repr(float(value))) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent:,.1f}%"
