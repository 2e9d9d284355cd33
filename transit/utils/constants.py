# backend/transit/utils/constants.py
# Closed enumerations for alerts, materials, weights and trips

from enum import Enum


# Enum for currency codes
class CurrencyCode(str, Enum):
    """Enum for supported currency codes."""
    INR = "INR"


# Trips are always billed in rupees
TRIP_CURRENCY = CurrencyCode.INR


class CriticalAlertType(str, Enum):
    """Alert types stored on truck_critical_alerts.alert_type."""
    BREAKDOWN = "breakdown"
    DELAY = "delay"
    OVERDUE = "overdue"
    LOW_MILEAGE = "low_mileage"
    SUSPICIOUS_ACTIVITY_DETECTED = "suspicious_activity_detected"


# Normalized user input -> alert type
CRITICAL_STATUS_SYNONYMS = {
    "breakdown": CriticalAlertType.BREAKDOWN,
    "delay": CriticalAlertType.DELAY,
    "overdue": CriticalAlertType.OVERDUE,
    "low_mileage": CriticalAlertType.LOW_MILEAGE,
    "suspicious": CriticalAlertType.SUSPICIOUS_ACTIVITY_DETECTED,
    "suspicious_activity_detected": CriticalAlertType.SUSPICIOUS_ACTIVITY_DETECTED,
}

CRITICAL_STATUS_LABELS = {
    CriticalAlertType.BREAKDOWN: "Breakdown",
    CriticalAlertType.DELAY: "Delay",
    CriticalAlertType.OVERDUE: "Overdue",
    CriticalAlertType.LOW_MILEAGE: "Low Mileage",
    CriticalAlertType.SUSPICIOUS_ACTIVITY_DETECTED: "Suspicious",
}


class MaterialType(str, Enum):
    """Material categories accepted in trip step 2."""
    CONSTRUCTIONAL_MATERIAL = "constructional_material"
    AGRICULTURAL_PRODUCTS = "agricultural_products"
    INDUSTRIAL_GOODS = "industrial_goods"
    MINING_BULK_MATERIALS = "mining_bulk_materials"
    CONSUMER_GOODS = "consumer_goods"
    LOGISTICS_PACKAGING = "logistics_packaging"
    AUTOMOTIVE_FUEL = "automotive_fuel"
    REFRIGERATED_PERISHABLE_ITEMS = "refrigerated_perishable_items"
    LIQUIDS_TANKER_LOADS = "liquids_tanker_loads"
    WASTE_RECYCLABLES = "waste_recyclables"
    OTHERS = "others"
    SPECIALIZED_HAZARDOUS_GOODS = "specialized_hazardous_goods"
    INFRASTRUCTURE_UTILITY_EQUIPMENT = "infrastructure_utility_equipment"


MATERIAL_TYPE_OPTIONS = [m.value for m in MaterialType]


class WeightUnit(str, Enum):
    TON = "ton"
    KG = "kg"
    LB = "lb"


KG_PER_TON = 1000
TONS_PER_LB = 0.000453592


class TripType(str, Enum):
    LEASED = "Leased"
    OWNED = "Owned"


TRIP_TYPE_OPTIONS = [t.value for t in TripType]

# Alert month buckets are reported in Indian Standard Time
ALERT_TIMEZONE = "Asia/Kolkata"

MONTH_LABELS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

EARTH_RADIUS_KM = 6371.0088
