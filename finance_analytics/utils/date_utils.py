"""Calendar helpers for month, quarter and year buckets"""

import calendar
from datetime import date
from typing import List

from finance_analytics.domain.models import DateRange

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_ABBREVIATIONS = [name[:3] for name in MONTH_NAMES]


def month_key(day: date) -> str:
    """"YYYY-MM" bucket key"""
    return f"{day.year:04d}-{day.month:02d}"


def quarter_key(day: date) -> str:
    """"YYYY-Qn" bucket key"""
    return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"


def year_key(day: date) -> str:
    return f"{day.year:04d}"


def month_index(key: str) -> int:
    """Month-of-year (0-11) from a "YYYY-MM" key"""
    return int(key.split("-")[1]) - 1


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length"""
    total = day.year * 12 + (day.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_range(day: date) -> DateRange:
    """Calendar month containing day"""
    start = day.replace(day=1)
    end = day.replace(day=calendar.monthrange(day.year, day.month)[1])
    return DateRange(start, end)


def quarter_range(day: date) -> DateRange:
    """Calendar quarter containing day"""
    first_month = (day.month - 1) // 3 * 3 + 1
    start = date(day.year, first_month, 1)
    end = month_range(date(day.year, first_month + 2, 1)).end
    return DateRange(start, end)


def year_range(day: date) -> DateRange:
    return DateRange(date(day.year, 1, 1), date(day.year, 12, 31))


def trailing_months(reference: date, count: int) -> List[DateRange]:
    """
    Calendar months ending with the month containing reference.

    Returned oldest first; count=12 in June 2025 yields July 2024 .. June 2025.
    """
    first_of_month = reference.replace(day=1)
    return [month_range(add_months(first_of_month, -offset)) for offset in range(count - 1, -1, -1)]


def lookback_range(reference: date, months: int) -> DateRange:
    """From the same day `months` months ago up to reference (inclusive)"""
    return DateRange(add_months(reference, -months), reference)
