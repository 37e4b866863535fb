"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import List, Optional


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of shorter months"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_monthly_dates(start: date, count: int) -> List[date]:
    """Generate `count` due dates one calendar month apart, starting at start"""
    return [add_months(start, i) for i in range(count)]


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD, returning None for blank or malformed input"""
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
