"""Tests for date parsing and reporting periods."""

import pytest
from datetime import date, datetime, timedelta, timezone

from ledgerkit.domain.entities import PeriodKey
from ledgerkit.utils.date_parser import coerce_datetime, get_period_range, parse_date

REFERENCE = datetime(2026, 5, 15, 12, 0)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == datetime(2024, 1, 15)


def test_parse_date_converts_offset_to_local_time(utc_plus_seven):
    """Test that offsets are converted to local time before being dropped."""
    assert parse_date("2024-01-15T10:30:00+07:00") == datetime(2024, 1, 15, 10, 30)
    assert parse_date("2026-04-30T20:00:00+00:00") == datetime(2026, 5, 1, 3, 0)


def test_coerce_datetime_converts_aware_values(utc_plus_seven):
    """Test that aware datetimes and offset strings land on the local calendar."""
    aware = datetime(2026, 4, 30, 20, 0, tzinfo=timezone.utc)
    assert coerce_datetime(aware) == datetime(2026, 5, 1, 3, 0)
    assert coerce_datetime("2026-04-30T20:00:00Z") == datetime(2026, 5, 1, 3, 0)
    assert coerce_datetime(datetime(2026, 4, 30, 20, 0)) == datetime(2026, 4, 30, 20, 0)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == datetime.combine(date.today(), datetime.min.time())


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    expected = datetime.combine(date.today() - timedelta(days=1), datetime.min.time())
    assert parse_date(" Yesterday ") == expected


def test_parse_invalid_date():
    """Test parsing invalid date."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not-a-date")


def test_coerce_datetime():
    """Test best-effort conversion of stored values."""
    assert coerce_datetime(datetime(2026, 5, 1, 9)) == datetime(2026, 5, 1, 9)
    assert coerce_datetime(date(2026, 5, 1)) == datetime(2026, 5, 1)
    assert coerce_datetime("2026-05-01") == datetime(2026, 5, 1)
    assert coerce_datetime("garbage") is None
    assert coerce_datetime("") is None
    assert coerce_datetime(None) is None
    assert coerce_datetime(20260501) is None


@pytest.mark.parametrize(
    "period,start,end,label",
    [
        ("current-month", datetime(2026, 5, 1), datetime(2026, 6, 1), "Current Month (May 2026)"),
        ("last-month", datetime(2026, 4, 1), datetime(2026, 5, 1), "Last Month (Apr 2026)"),
        ("current-quarter", datetime(2026, 4, 1), datetime(2026, 7, 1), "Current Quarter (Apr - Jun 2026)"),
        ("last-quarter", datetime(2026, 1, 1), datetime(2026, 4, 1), "Last Quarter (Jan - Mar 2026)"),
        ("year-to-date", datetime(2026, 1, 1), datetime(2027, 1, 1), "Year to Date (2026)"),
        ("last-year", datetime(2025, 1, 1), datetime(2026, 1, 1), "Last Year (2025)"),
    ],
)
def test_period_ranges(period, start, end, label):
    """Test closed-open ranges for every period key."""
    result = get_period_range(period, REFERENCE)
    assert result.key == PeriodKey(period)
    assert (result.start, result.end, result.label) == (start, end, label)


def test_all_time_contains_everything():
    """Test the unbounded period."""
    result = get_period_range(PeriodKey.ALL_TIME, REFERENCE)
    assert result.label == "All Time"
    assert result.contains(datetime(1900, 1, 1))
    assert result.contains(datetime(2100, 1, 1))


def test_period_end_is_exclusive():
    """Test that the first moment of the next period is excluded."""
    result = get_period_range("current-month", REFERENCE)
    assert result.contains(datetime(2026, 5, 1))
    assert result.contains(datetime(2026, 5, 31, 23, 59, 59))
    assert not result.contains(datetime(2026, 6, 1))


def test_last_month_across_year_boundary():
    """Test last month in January."""
    result = get_period_range("last-month", datetime(2026, 1, 10))
    assert (result.start, result.end) == (datetime(2025, 12, 1), datetime(2026, 1, 1))


def test_last_quarter_across_year_boundary():
    """Test last quarter in the first quarter."""
    result = get_period_range("last-quarter", datetime(2026, 2, 10))
    assert (result.start, result.end) == (datetime(2025, 10, 1), datetime(2026, 1, 1))
    assert result.label == "Last Quarter (Oct - Dec 2025)"


def test_unknown_period():
    """Test that unknown periods are rejected."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_period_range("fortnight", REFERENCE)
