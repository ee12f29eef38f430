"""
Month arithmetic for the plan timeline.

Months are integer offsets from the plan start date; calendar dates are only
derived for labelling.
"""
import calendar
from datetime import date

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
)


def add_months(start: date, months: int) -> date:
    """
    Shift a date by a number of months.

    The day of month is kept where possible and clamped to the last day of the
    target month otherwise (Jan 31 + 1 month -> Feb 28/29).
    """
    total = start.year * 12 + (start.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def format_month(value: date) -> str:
    """Locale independent month label, e.g. 'Mar 2026'."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def month_label(start: date, month_index: int) -> str:
    return format_month(add_months(start, month_index))
