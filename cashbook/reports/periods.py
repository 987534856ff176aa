"""
Period Resolution

Turns a period selector and a reference day into an inclusive
[start, end] day range, and moves the reference for prev/next navigation.

DESIGN DECISION: Everything works on whole days (datetime.date).
Transactions carry no meaningful time of day, so an inclusive day range
is equivalent to the "00:00:00 to 23:59:59" window of the reports view.

Weeks start on Monday. date.isoweekday() already gives Monday=1 ... Sunday=7.
"""

import calendar
from datetime import date, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from cashbook.models.ledger import Transaction
from cashbook.models.report import CustomRange, Period, PeriodRange


# Periods that offer prev/next navigation
NAVIGABLE_PERIODS = frozenset({
    Period.TODAY,
    Period.THIS_WEEK,
    Period.THIS_MONTH,
    Period.LAST_MONTH,
    Period.THIS_YEAR,
})


def parse_day(value: Optional[str]) -> Optional[date]:
    """
    Parse the day part of an ISO date string.

    Accepts "YYYY-MM-DD" and full ISO timestamps (only the first ten
    characters are read). Returns None for anything unreadable.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def transaction_day(transaction: Transaction) -> Optional[date]:
    """The calendar day of a transaction, or None if missing/malformed."""
    return parse_day(transaction.date)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month (leap years included)."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.isoweekday() - 1)


def resolve_range(
    period: Period,
    reference: Optional[date] = None,
    custom_range: Optional[Union[CustomRange, dict]] = None,
) -> PeriodRange:
    """
    Resolve a period to an inclusive day range.

    Args:
        period: The selected window
        reference: The day the window is anchored on (defaults to today)
        custom_range: Explicit bounds, only used for CUSTOM

    Never raises. Reversed custom bounds are swapped; unreadable custom
    bounds give an empty range.
    """
    period = Period(period)
    reference = reference or date.today()

    if period == Period.TODAY:
        return PeriodRange(period=period, reference=reference,
                           start=reference, end=reference)

    if period == Period.THIS_WEEK:
        start = week_start(reference)
        return PeriodRange(period=period, reference=reference,
                           start=start, end=start + timedelta(days=6))

    if period == Period.THIS_MONTH:
        start, end = month_bounds(reference.year, reference.month)
        return PeriodRange(period=period, reference=reference, start=start, end=end)

    if period == Period.LAST_MONTH:
        previous = reference.replace(day=1) - timedelta(days=1)
        start, end = month_bounds(previous.year, previous.month)
        return PeriodRange(period=period, reference=reference, start=start, end=end)

    if period == Period.THIS_YEAR:
        return PeriodRange(period=period, reference=reference,
                           start=date(reference.year, 1, 1),
                           end=date(reference.year, 12, 31))

    if period == Period.CUSTOM:
        return _resolve_custom(reference, custom_range)

    return PeriodRange(period=Period.ALL, reference=reference)


def _resolve_custom(
    reference: date,
    custom_range: Optional[Union[CustomRange, dict]],
) -> PeriodRange:
    if custom_range is None:
        # Same default as the report view: first of the month through today
        return PeriodRange(period=Period.CUSTOM, reference=reference,
                           start=reference.replace(day=1), end=reference)

    if isinstance(custom_range, dict):
        start_raw = custom_range.get("start")
        end_raw = custom_range.get("end")
    else:
        start_raw, end_raw = custom_range.start, custom_range.end

    start = parse_day(start_raw)
    end = parse_day(end_raw)
    if start is None or end is None:
        return PeriodRange(period=Period.CUSTOM, reference=reference, is_empty=True)

    if end < start:
        start, end = end, start
    return PeriodRange(period=Period.CUSTOM, reference=reference, start=start, end=end)


def can_navigate(period: Period) -> bool:
    """Whether prev/next navigation applies to this period."""
    return Period(period) in NAVIGABLE_PERIODS


def shift_reference(period: Period, reference: date, step: int) -> date:
    """
    Move the reference day by `step` windows (negative = back).

    Weeks move by exactly 7 days so Monday stays the anchor.
    Months and years move by calendar units; day-of-month is kept when
    possible and clamped otherwise (Jan 31 + 1 month = Feb 28/29).
    CUSTOM and ALL do not navigate and return the reference unchanged.
    """
    period = Period(period)
    if period == Period.TODAY:
        return reference + timedelta(days=step)
    if period == Period.THIS_WEEK:
        return reference + timedelta(days=7 * step)
    if period in (Period.THIS_MONTH, Period.LAST_MONTH):
        return reference + relativedelta(months=step)
    if period == Period.THIS_YEAR:
        return reference + relativedelta(years=step)
    return reference


def describe_period(period_range: PeriodRange) -> str:
    """Human-readable label of a resolved range (e.g. "March 2024")."""
    period = period_range.period
    if period_range.is_empty:
        return "No period"
    if period_range.is_unbounded:
        return "All time"

    start, end = period_range.start, period_range.end
    if period == Period.TODAY:
        return _long_day(start)
    if period == Period.THIS_WEEK:
        return f"{start.day} {start.strftime('%b')} - {_long_day(end)}"
    if period in (Period.THIS_MONTH, Period.LAST_MONTH):
        return start.strftime("%B %Y")
    if period == Period.THIS_YEAR:
        return str(start.year)
    return f"{_long_day(start)} - {_long_day(end)}"


def _long_day(day: date) -> str:
    return f"{day.day} {day.strftime('%b %Y')}"
