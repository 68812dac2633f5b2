"""
Display formatting helpers for dashboard payloads (es-MX conventions)
"""

from datetime import date, datetime
from typing import Optional, Union

SHORT_MONTHS_ES = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic"]

def format_short_date(value: Optional[Union[date, datetime]]) -> Optional[str]:
    """Format a date like `1 feb 2024`"""
    if value is None:
        return None
    return f"{value.day} {SHORT_MONTHS_ES[value.month - 1]} {value.year}"

def format_time(value: datetime) -> str:
    """24-hour `HH:MM`"""
    return value.strftime("%H:%M")

def format_currency(amount: float, decimals: int = 2) -> str:
    """Format an amount in Mexican pesos, e.g. `$1,250.00`"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{decimals}f}"

def format_percent(value: float) -> str:
    return f"{value:.1f}%"

def percent_change(current: float, previous: float) -> float:
    """Relative change in percent rounded to one decimal, 0 when there is no baseline"""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)

def change_type(change: float) -> str:
    return "increase" if change >= 0 else "decrease"
