# backend/tests/test_time_utils.py
# Unit tests for month bucketing and relative time

from datetime import datetime, timedelta, timezone

from transit.utils.time_utils import group_by_month, month_from_timestamp, time_ago, to_utc

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def test_to_utc_accepts_strings_and_naive_datetimes():
    assert to_utc("2025-06-15T12:00:00Z") == NOW
    assert to_utc("2025-06-15T17:30:00+05:30") == NOW
    assert to_utc(datetime(2025, 6, 15, 12, 0, 0)) == NOW


def test_month_uses_india_time():
    """19:00 UTC on Jan 31 is already Feb 1 in Asia/Kolkata."""
    month = month_from_timestamp("2024-01-31T19:00:00Z")
    assert month["month_key"] == "2024-02"
    assert month["month_label"] == "February"


def test_group_by_month_orders_chronologically():
    timestamps = [
        "2025-03-02T10:00:00Z",
        "2024-12-20T10:00:00Z",
        "2025-03-05T10:00:00Z",
        datetime(2025, 1, 10, tzinfo=timezone.utc),
    ]
    grouped = group_by_month(timestamps)
    assert [g["month_key"] for g in grouped] == ["2024-12", "2025-01", "2025-03"]
    assert [g["count"] for g in grouped] == [1, 1, 2]
    assert grouped[0]["month_label"] == "December"


def test_group_by_month_empty():
    assert group_by_month([]) == []


def test_time_ago_units():
    assert time_ago(NOW - timedelta(seconds=2), now=NOW) == "just now"
    assert time_ago(NOW - timedelta(seconds=42), now=NOW) == "42s ago"
    assert time_ago(NOW - timedelta(seconds=60), now=NOW) == "1m ago"
    assert time_ago(NOW - timedelta(minutes=59), now=NOW) == "59m ago"
    assert time_ago(NOW - timedelta(hours=3), now=NOW) == "3h ago"
    assert time_ago(NOW - timedelta(hours=24), now=NOW) == "1d ago"
    assert time_ago(NOW - timedelta(days=29), now=NOW) == "29d ago"
    assert time_ago(NOW - timedelta(days=30), now=NOW) == "1 month ago"
    assert time_ago(NOW - timedelta(days=95), now=NOW) == "3 months ago"
    assert time_ago(NOW - timedelta(days=360), now=NOW) == "1 year ago"
    assert time_ago(NOW - timedelta(days=800), now=NOW) == "2 years ago"


def test_time_ago_future_clamps_to_now():
    assert time_ago(NOW + timedelta(hours=1), now=NOW) == "just now"
