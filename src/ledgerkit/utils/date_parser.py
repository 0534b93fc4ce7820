"""Date parsing and reporting-period utilities."""

from datetime import date, datetime, timedelta
from typing import Optional, Union
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ledgerkit.domain.entities import PeriodKey, PeriodRange


def to_local_naive(moment: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def parse_date(date_str: str) -> datetime:
    """Parse a date string into a naive datetime.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "2024-01-15T10:30", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow" (at midnight)

    Args:
        date_str: Date string in various formats

    Returns:
        Naive datetime in local time (offsets are converted, then dropped)

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = datetime.combine(date.today(), datetime.min.time())

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
    return to_local_naive(dt)


def coerce_datetime(value: object) -> Optional[datetime]:
    """Best-effort conversion of a stored value into a datetime.

    Accepts datetime, date and string values; returns None for anything that
    cannot be interpreted as a point in time.
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str) and value.strip():
        try:
            return to_local_naive(date_parser.parse(value))
        except (ValueError, TypeError, OverflowError):
            return None
    return None


def _quarter_start(moment: datetime) -> datetime:
    first_month = ((moment.month - 1) // 3) * 3 + 1
    return datetime(moment.year, first_month, 1)


def _month_span(start: datetime, end: datetime) -> str:
    last_day = end - timedelta(microseconds=1)
    return f"{start.strftime('%b')} - {last_day.strftime('%b %Y')}"


def get_period_range(
    period: Union[PeriodKey, str], reference: Optional[datetime] = None
) -> PeriodRange:
    """Get the closed-open range ``[start, end)`` for a reporting period.

    Args:
        period: Period key (current-month, last-month, current-quarter,
            last-quarter, year-to-date, last-year, all-time)
        reference: Moment the period is relative to (defaults to now, local time)

    Returns:
        PeriodRange with start, exclusive end and a display label

    Raises:
        ValueError: If period string is not recognized
    """
    try:
        key = PeriodKey(period.strip().lower() if isinstance(period, str) else period)
    except ValueError:
        supported = ", ".join(item.value for item in PeriodKey)
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {supported}")

    now = reference or datetime.now()
    month_start = datetime(now.year, now.month, 1)
    year_start = datetime(now.year, 1, 1)

    if key == PeriodKey.CURRENT_MONTH:
        start = month_start
        end = start + relativedelta(months=1)
        label = f"Current Month ({start.strftime('%B %Y')})"
    elif key == PeriodKey.LAST_MONTH:
        start = month_start - relativedelta(months=1)
        end = month_start
        label = f"Last Month ({start.strftime('%b %Y')})"
    elif key == PeriodKey.CURRENT_QUARTER:
        start = _quarter_start(now)
        end = start + relativedelta(months=3)
        label = f"Current Quarter ({_month_span(start, end)})"
    elif key == PeriodKey.LAST_QUARTER:
        end = _quarter_start(now)
        start = end - relativedelta(months=3)
        label = f"Last Quarter ({_month_span(start, end)})"
    elif key == PeriodKey.YEAR_TO_DATE:
        start = year_start
        end = year_start + relativedelta(years=1)
        label = f"Year to Date ({now.year})"
    elif key == PeriodKey.LAST_YEAR:
        start = year_start - relativedelta(years=1)
        end = year_start
        label = f"Last Year ({now.year - 1})"
    else:
        start = datetime.min
        end = datetime.max
        label = "All Time"

    return PeriodRange(key=key, start=start, end=end, label=label)
