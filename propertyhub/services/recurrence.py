"""Recurrence date arithmetic for recurring invoices."""

import calendar
from datetime import date

from propertyhub.models import RecurrenceFrequency

MONTHS_PER_PERIOD = {
    RecurrenceFrequency.MONTHLY: 1,
    RecurrenceFrequency.QUARTERLY: 3,
    RecurrenceFrequency.YEARLY: 12,
}


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's end.

    Example: 2025-01-31 + 1 month -> 2025-02-28
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_recurrence_date(issue_date: date, frequency: RecurrenceFrequency) -> date:
    """Date the next occurrence of a recurring invoice should be issued."""
    return add_months(issue_date, MONTHS_PER_PERIOD[RecurrenceFrequency(frequency)])


__all__ = ["add_months", "next_recurrence_date"]
