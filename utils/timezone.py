"""UTC-everywhere time handling. Calendar dates are UTC dates."""

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """
    Current calendar date in UTC.

    Invoice issue/due dates and payment dates carry no time component;
    "today" for overdue checks is always the UTC date.
    """
    return now_utc().date()


def add_months(day: date, months: int) -> date:
    """
    Shift a date by whole calendar months, clamping the day of month.

    add_months(date(2024, 3, 31), -1) -> date(2024, 2, 29)
    """
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1

    # Clamp to last day of the target month
    if month == 12:
        next_month_first = date(year + 1, 1, 1)
    else:
        next_month_first = date(year, month + 1, 1)
    last_day = (next_month_first - date(year, month, 1)).days

    return date(year, month, min(day.day, last_day))
