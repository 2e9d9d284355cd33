# backend/transit/utils/validators.py
# Validation functions for input data

import math
import re
from typing import Any, Optional

from transit.utils.constants import MATERIAL_TYPE_OPTIONS, TRIP_TYPE_OPTIONS, WeightUnit


def validate_phone(phone: Optional[str]) -> bool:
    """Validate phone number format if provided."""
    if not phone:
        return True
    # Phone should be 7-15 digits, optionally starting with +
    # First digit (after +) should be 1-9, followed by 6-14 more digits
    pattern = r"^\+?[1-9]\d{6,14}$"
    return bool(re.match(pattern, phone))


def is_valid_coordinate(value: Any) -> bool:
    """True for finite ints/floats; bools and numeric strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_location(location: Optional[dict]) -> bool:
    """Validate that a location point carries finite latitude and longitude."""
    if not location:
        return False
    return is_valid_coordinate(location.get("latitude")) and is_valid_coordinate(
        location.get("longitude")
    )


def validate_material_type(material_type: Optional[str]) -> bool:
    """Validate material type against the fixed enumeration."""
    if not material_type:
        return False
    return material_type in MATERIAL_TYPE_OPTIONS


def validate_material_weight(material_weight: Optional[dict]) -> bool:
    """Validate a {value, unit} weight block."""
    if not material_weight:
        return False
    value = material_weight.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return material_weight.get("unit") in {u.value for u in WeightUnit}


def validate_trip_type(trip_type: Optional[str]) -> bool:
    """Validate trip type (case sensitive: Leased or Owned)."""
    if not trip_type:
        return False
    return trip_type in TRIP_TYPE_OPTIONS


def normalize_departure_date(value: str) -> str:
    """Expand a bare YYYY-MM-DD date to midnight UTC; leave timestamps as given."""
    if re.match(r"^\d{4}-\d{2}-\d{2}$", value):
        return f"{value}T00:00:00.000Z"
    return value
