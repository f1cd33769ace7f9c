"""Helpers for coercing loose Airtable field values and formatting numbers for display."""

import math
from datetime import date, datetime
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Coerce a field value to a float.

    Numbers and numeric strings convert; booleans, NaN/inf and everything else
    become None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime string; None if it can't be read.

    Airtable writes UTC timestamps with a trailing "Z", which older
    interpreters don't accept in fromisoformat.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    moment = parse_datetime(value)
    return moment.date() if moment else None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


# ===== DISPLAY FORMATTING =====

def format_currency(value: Optional[float]) -> str:
    """Format an amount as pounds sterling, e.g. £1,234.50."""
    if value is None:
        return "n/a"
    sign = "-" if value < 0 else ""
    return f"{sign}£{abs(value):,.2f}"


def format_percentage(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.1f}%"


def format_date(value: Any) -> str:
    """Format a date as dd/mm/yyyy, returning the input unchanged if it can't be parsed."""
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%d/%m/%Y")
