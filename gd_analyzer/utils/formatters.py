"""Number and currency formatting utilities for GD Analyzer.

Currency uses Brazilian conventions: "R$" prefix, "." as the thousands
separator and "," as the decimal separator.
"""

import math
from typing import Optional


def _to_brazilian(text: str) -> str:
    """Swap US separators for Brazilian ones ("1,234.5" -> "1.234,5")."""
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float, decimals: int = 0, prefix: str = "R$ ") -> str:
    """Format a number as an abbreviated currency string.

    Args:
        value: The numeric value to format.
        decimals: Number of decimal places.
        prefix: Currency symbol prefix.

    Returns:
        Formatted currency string (e.g., "R$ 1,2M").
    """
    if not math.isfinite(value):
        return "N/A"
    if abs(value) >= 1e9:
        return f"{prefix}{_to_brazilian(f'{value / 1e9:,.{decimals}f}')}B"
    if abs(value) >= 1e6:
        return f"{prefix}{_to_brazilian(f'{value / 1e6:,.{decimals}f}')}M"
    if abs(value) >= 1e3:
        return f"{prefix}{_to_brazilian(f'{value / 1e3:,.{decimals}f}')}K"
    return f"{prefix}{_to_brazilian(f'{value:,.{decimals}f}')}"


def format_currency_exact(value: float, decimals: int = 2, prefix: str = "R$ ") -> str:
    """Format a number as exact currency string without abbreviation.

    Returns:
        Formatted currency string (e.g., "R$ 1.234.567,89").
    """
    if not math.isfinite(value):
        return "N/A"
    return f"{prefix}{_to_brazilian(f'{value:,.{decimals}f}')}"


def format_percent(value: float, decimals: int = 2) -> str:
    """Format a value that is already a percentage.

    Args:
        value: Percentage value (e.g., 12.5 for 12.5%).
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string (e.g., "12,50%").
    """
    if value is None or not math.isfinite(value):
        return "N/A"
    return f"{_to_brazilian(f'{value:,.{decimals}f}')}%"


def format_number(value: float, decimals: int = 1) -> str:
    """Format a number with Brazilian separators (e.g., "1.234,5")."""
    if not math.isfinite(value):
        return "N/A"
    return _to_brazilian(f"{value:,.{decimals}f}")


def format_energy(value: float, decimals: int = 2) -> str:
    return f"{format_number(value, decimals)} MWh"


def format_payback(payback_year: Optional[int], achieved: bool = True) -> str:
    """Format the payback year.

    Args:
        payback_year: Payback year, or None if not calculable.
        achieved: False when the accumulated cash flow never covered the
            investment within the projection.

    Returns:
        Formatted string (e.g., "7 years" or "Beyond analysis period").
    """
    if payback_year is None or not achieved:
        return "Beyond analysis period"
    return f"{payback_year} year" if payback_year == 1 else f"{payback_year} years"
