# backend/transit/services/alert_service.py
# Dashboard alert aggregation: critical alert feed and suspicious activity trend

import logging
import re
from typing import Dict, List, Optional

import pymongo
from pymongo.database import Database

from transit.exceptions import NotFoundError, UnknownStatusError
from transit.utils.constants import (
    CRITICAL_STATUS_LABELS,
    CRITICAL_STATUS_SYNONYMS,
    CriticalAlertType,
)
from transit.utils.time_utils import group_by_month, time_ago

logger = logging.getLogger(__name__)


def normalize_status(value: Optional[str]) -> Optional[CriticalAlertType]:
    """Map free-text status input to an alert type, or None if unrecognized."""
    if not value:
        return None
    key = re.sub(r"\s+", "_", value.strip().lower())
    return CRITICAL_STATUS_SYNONYMS.get(key)


def status_label(alert_type: str) -> str:
    try:
        return CRITICAL_STATUS_LABELS[CriticalAlertType(alert_type)]
    except ValueError:
        return alert_type


def get_organisation_trucks(db: Database, org_id: str) -> Dict[str, dict]:
    """Trucks owned by an organisation, keyed by truck_id."""
    trucks = db.trucks.find(
        {"organisation_id": org_id},
        {"_id": 0, "truck_id": 1, "truck_number": 1, "organisation_id": 1},
    )
    return {t["truck_id"]: t for t in trucks}


def build_monthly_trend(timestamps: List) -> Dict:
    """Bucket timestamps per month and compare the last two buckets."""
    grouped = group_by_month(timestamps)
    data = [
        {"month_key": g["month_key"], "month": g["month_label"], "count": g["count"]}
        for g in grouped
    ]

    change = 0
    trend = "no change"
    if len(data) > 1:
        change = data[-1]["count"] - data[-2]["count"]
        if change > 0:
            trend = "increase"
        elif change < 0:
            trend = "decrease"

    return {"data": data, "change": change, "trend": trend}


def monthly_suspicious_activity(db: Database, org_id: str) -> Dict:
    """Monthly counts of suspicious-activity alerts for an organisation's trucks."""
    organisation = db.organisations.find_one({"organisation_id": org_id}, {"_id": 0})
    if not organisation:
        raise NotFoundError("Organisation not found")

    trucks = get_organisation_trucks(db, org_id)
    rows = db.truck_critical_alerts.find(
        {
            "truck_id": {"$in": list(trucks)},
            "alert_type": CriticalAlertType.SUSPICIOUS_ACTIVITY_DETECTED.value,
        },
        {"_id": 0, "alert_time": 1},
    )
    timestamps = [r["alert_time"] for r in rows if r.get("alert_time")]
    logger.info(f"Found {len(timestamps)} suspicious alerts for organisation {org_id}")
    return build_monthly_trend(timestamps)


def unresolved_critical_alerts(db: Database, org_id: str, status: Optional[str] = None) -> Dict:
    """Unresolved alerts for an organisation's trucks, newest first."""
    alert_type = normalize_status(status)
    if status and status.strip() and not alert_type:
        raise UnknownStatusError(status)

    trucks = get_organisation_trucks(db, org_id)
    query = {"resolved": False, "truck_id": {"$in": list(trucks)}}
    if alert_type:
        query["alert_type"] = alert_type.value

    cursor = db.truck_critical_alerts.find(
        query,
        {"_id": 0, "alert_id": 1, "alert_time": 1, "alert_type": 1, "truck_id": 1},
    ).sort("alert_time", pymongo.DESCENDING)

    rows = []
    for alert in cursor:
        truck = trucks.get(alert.get("truck_id")) or {}
        alert_time = alert.get("alert_time")
        rows.append(
            {
                "alert_id": alert.get("alert_id"),
                "truck_no": truck.get("truck_number") or "Unknown",
                "critical_status": status_label(alert.get("alert_type")),
                "time_elapsed": time_ago(alert_time) if alert_time else "Unknown",
            }
        )
    return {"data": rows, "count": len(rows)}
