"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Optional


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def first_day_of_month_offset(from_date: date, months: int) -> date:
    """First day of the month `months` after from_date's month"""
    return add_months(from_date.replace(day=1), months)


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def calculate_period_start(period: Optional[str] = None, reference: Optional[date] = None) -> date:
    """
    Start date of a tariff analysis window.

    "trimestre" -> 3 months back, "ano" -> 12 months back, anything else -> 1 month back.
    """
    reference = reference or date.today()
    if period == "ano":
        return add_months(reference, -12)
    if period == "trimestre":
        return add_months(reference, -3)
    return add_months(reference, -1)


def parse_iso_date(value: str) -> date:
    """Parse the date part of an ISO-8601 date or datetime string"""
    return date.fromisoformat(value[:10])
