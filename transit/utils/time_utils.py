# backend/transit/utils/time_utils.py
# Month bucketing and relative-time helpers for dashboard alerts

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from dateutil import parser, tz

from transit.utils.constants import ALERT_TIMEZONE, MONTH_LABELS

Timestamp = Union[datetime, str]


def to_utc(ts: Timestamp) -> datetime:
    """Parse an ISO string or datetime into an aware UTC datetime.

    Naive values are treated as UTC, which is how pymongo returns stored dates.
    """
    if isinstance(ts, str):
        ts = parser.isoparse(ts)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def month_from_timestamp(ts: Timestamp, tz_name: str = ALERT_TIMEZONE) -> Dict:
    local = to_utc(ts).astimezone(tz.gettz(tz_name))
    return {
        "year": local.year,
        "month": local.month,
        "month_key": f"{local.year}-{local.month:02d}",
        "month_label": MONTH_LABELS[local.month - 1],
    }


def group_by_month(timestamps: Iterable[Timestamp], tz_name: str = ALERT_TIMEZONE) -> List[Dict]:
    """Count timestamps per calendar month, ordered by month key."""
    buckets: Dict[str, Dict] = {}
    for ts in timestamps:
        month = month_from_timestamp(ts, tz_name)
        row = buckets.get(month["month_key"])
        if row:
            row["count"] += 1
        else:
            buckets[month["month_key"]] = {
                "month_key": month["month_key"],
                "month_label": month["month_label"],
                "count": 1,
            }
    return [buckets[key] for key in sorted(buckets)]


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def time_ago(ts: Timestamp, now: Optional[datetime] = None) -> str:
    """Render a short relative time, e.g. "5m ago" or "3 months ago"."""
    now = to_utc(now) if now else datetime.now(timezone.utc)
    seconds = max(0, int((now - to_utc(ts)).total_seconds()))
    if seconds < 5:
        return "just now"
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    months = days // 30
    if months < 12:
        return _plural(months, "month")
    return _plural(months // 12, "year")
