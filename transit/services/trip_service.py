# backend/transit/services/trip_service.py
# Three-step trip creation: stage route basics, pick truck, finalize with customer

import logging
import math
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from transit.exceptions import (
    CustomerNotFoundError,
    InvalidBodyError,
    NotFoundError,
    StepIncompleteError,
    TripAlreadyCreatedError,
    TruckNotAvailableError,
)
from transit.utils.constants import (
    EARTH_RADIUS_KM,
    KG_PER_TON,
    TONS_PER_LB,
    TRIP_CURRENCY,
    WeightUnit,
)
from transit.utils.validators import (
    normalize_departure_date,
    validate_location,
    validate_material_type,
    validate_material_weight,
    validate_phone,
    validate_trip_type,
)

logger = logging.getLogger(__name__)

AVERAGE_TRUCK_SPEED_KMPH = float(os.getenv("AVERAGE_TRUCK_SPEED_KMPH", "50"))


def haversine_km(origin: dict, destination: dict) -> float:
    """Great-circle distance between two {latitude, longitude} points."""
    lat1, lon1 = math.radians(origin["latitude"]), math.radians(origin["longitude"])
    lat2, lon2 = math.radians(destination["latitude"]), math.radians(destination["longitude"])
    a = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def estimate_route(points: List[dict]) -> Dict:
    """Straight-line route estimate through the given points.

    Not road routing: distance is the sum of great-circle legs and duration
    assumes AVERAGE_TRUCK_SPEED_KMPH throughout.
    """
    distance = sum(haversine_km(a, b) for a, b in zip(points, points[1:]))
    duration = int(round(distance / AVERAGE_TRUCK_SPEED_KMPH * 60))
    return {"route_distance": round(distance, 2), "route_duration": duration}


def convert_to_tons(value: float, unit: str) -> float:
    """Convert a weight to metric tons; unknown units are taken as tons."""
    unit = (unit or "").lower()
    if unit == WeightUnit.KG.value:
        return value / KG_PER_TON
    if unit == WeightUnit.LB.value:
        return value * TONS_PER_LB
    return value


def is_promotable(staged: dict) -> bool:
    """A staged trip can become a trip once step 2 has filled it in."""
    return bool(
        staged.get("loading_location")
        and staged.get("unloading_location")
        and staged.get("driver_1_id")
        and staged.get("selected_truck_id")
        and (staged.get("material_weight") or {}).get("value")
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_staged_trip(db: Database, org_id: str, temp_trip_id: str) -> Optional[dict]:
    return db.temp_trips.find_one({"temp_trip_id": temp_trip_id, "org_id": org_id}, {"_id": 0})


def stage_trip(
    db: Database,
    org_id: str,
    loading_location: Optional[dict],
    unloading_location: Optional[dict],
    stops: Optional[List[dict]],
    departure_date: str,
    trip_amount: float,
) -> Dict:
    """Step 1: validate route basics and persist a new staged trip."""
    if not validate_location(unloading_location):
        raise InvalidBodyError("Missing unloading location coordinates")
    if not validate_location(loading_location):
        raise InvalidBodyError("Missing loading location coordinates")
    if not org_id:
        raise InvalidBodyError("org_id is required")

    waypoints = [loading_location]
    for index, stop in enumerate(stops or []):
        # Malformed stops are stored as sent but left out of the estimate
        if validate_location(stop):
            waypoints.append(stop)
        else:
            logger.warning(f"Ignoring stop {index} with invalid coordinates")
    waypoints.append(unloading_location)
    route = estimate_route(waypoints)

    temp_trip_id = str(uuid.uuid4())
    now = _now()
    db.temp_trips.insert_one(
        {
            "temp_trip_id": temp_trip_id,
            "org_id": org_id,
            "loading_location": loading_location,
            "unloading_location": unloading_location,
            "stops": stops,
            "departure_date": normalize_departure_date(departure_date),
            "trip_amount": trip_amount,
            "route_distance": route["route_distance"],
            "route_duration": route["route_duration"],
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info(f"Staged trip {temp_trip_id} for organisation {org_id}")
    return {"temp_trip_id": temp_trip_id, **route}


def _recommendation(truck: dict, capacity_tons: float, loading_location: Optional[dict]) -> Dict:
    position = truck.get("current_location")
    proximity = None
    if validate_location(position) and validate_location(loading_location):
        proximity = round(haversine_km(position, loading_location), 1)
    return {
        "truck_id": truck["truck_id"],
        "truck_number": truck.get("truck_number"),
        "capacity": capacity_tons,
        "proximity_km": proximity,
    }


def recommend_trucks(
    db: Database,
    org_id: str,
    temp_trip_id: str,
    material_type: Optional[str],
    material_weight: Optional[dict],
    truck_type: Optional[str],
    selected_truck_id: Optional[str] = None,
    driver_1_id: Optional[str] = None,
    driver_2_id: Optional[str] = None,
) -> List[Dict]:
    """Step 2: list trucks able to carry the load and record the selection."""
    if not org_id:
        raise InvalidBodyError("org_id is required")
    if not temp_trip_id:
        raise InvalidBodyError("temp_trip_id is required")
    if not validate_material_type(material_type) or not validate_material_weight(material_weight):
        raise InvalidBodyError("Invalid material unit or missing weight or material type")

    staged = get_staged_trip(db, org_id, temp_trip_id)
    if not staged:
        raise NotFoundError("Temp trip not found")
    # The truck and drivers are frozen once a trip has been created from it
    if staged.get("promoted_trip_id"):
        raise TripAlreadyCreatedError()

    required_tons = convert_to_tons(material_weight["value"], material_weight["unit"])
    trucks = db.trucks.find(
        {"organisation_id": org_id, "truck_type": truck_type},
        {"_id": 0, "truck_id": 1, "truck_number": 1, "maximum_load": 1,
         "weight_unit": 1, "current_location": 1},
    )

    recommended = []
    for truck in trucks:
        capacity = convert_to_tons(truck.get("maximum_load") or 0, truck.get("weight_unit"))
        if capacity >= required_tons:
            recommended.append(_recommendation(truck, capacity, staged.get("loading_location")))

    # Nearest first; trucks without a reported position go last
    recommended.sort(key=lambda t: (t["proximity_km"] is None, t["proximity_km"] or 0))
    logger.info(
        f"{len(recommended)} trucks of type {truck_type} can carry {required_tons:.3f}t "
        f"for temp trip {temp_trip_id}"
    )

    if selected_truck_id and not any(t["truck_id"] == selected_truck_id for t in recommended):
        raise TruckNotAvailableError()

    result = db.temp_trips.update_one(
        {
            "temp_trip_id": temp_trip_id,
            "org_id": org_id,
            "promoted_trip_id": {"$exists": False},
        },
        {
            "$set": {
                "material_type": material_type,
                "material_weight": material_weight,
                "truck_type": truck_type,
                "selected_truck_id": selected_truck_id,
                "driver_1_id": driver_1_id,
                "driver_2_id": driver_2_id,
                "updated_at": _now(),
            }
        },
    )
    if result.matched_count == 0:
        raise TripAlreadyCreatedError()
    return recommended


def _missing_step2_field(staged: dict) -> Optional[str]:
    if not staged.get("driver_1_id"):
        return "Driver assignment missing (step2 incomplete)"
    if not staged.get("selected_truck_id"):
        return "Truck not selected (step2 incomplete)"
    if not (staged.get("material_weight") or {}).get("value"):
        return "Material weight missing in step2"
    return None


def finalize_trip(
    db: Database,
    org_id: str,
    temp_trip_id: str,
    trip_type: Optional[str],
    customer: Optional[dict],
    loader: Optional[dict] = None,
    unloader: Optional[dict] = None,
) -> str:
    """Step 3: promote a completed staged trip into a permanent trip."""
    if not org_id:
        raise InvalidBodyError("org_id is required")
    if not temp_trip_id:
        raise InvalidBodyError("temp_trip_id is required")
    customer = customer or {}
    if not customer.get("name") or not customer.get("phone_number"):
        raise InvalidBodyError("Missing customer name or phone number")
    if not validate_phone(customer["phone_number"]):
        raise InvalidBodyError("Invalid customer phone number format")
    if not validate_trip_type(trip_type):
        raise InvalidBodyError("trip_type is required")

    staged = get_staged_trip(db, org_id, temp_trip_id)
    if not staged:
        raise NotFoundError("Temp trip not found")
    if staged.get("promoted_trip_id"):
        raise TripAlreadyCreatedError()

    if not is_promotable(staged):
        raise StepIncompleteError(_missing_step2_field(staged) or "Route details missing (step1 incomplete)")

    customer_row = db.users.find_one({"phone_number": customer["phone_number"]}, {"_id": 0, "id": 1})
    if not customer_row:
        raise CustomerNotFoundError()

    trip_id = str(uuid.uuid4())
    now = _now()
    # Claim the staged trip so that only one concurrent finalize can insert
    claimed = db.temp_trips.find_one_and_update(
        {
            "temp_trip_id": temp_trip_id,
            "org_id": org_id,
            "promoted_trip_id": {"$exists": False},
        },
        {"$set": {"promoted_trip_id": trip_id, "promoted_at": now}},
        projection={"_id": 0, "temp_trip_id": 1},
    )
    if not claimed:
        raise TripAlreadyCreatedError()

    weight = staged["material_weight"]
    try:
        db.trips.insert_one(
            {
                "id": trip_id,
                "org_id": org_id,
                "departure_date": staged.get("departure_date"),
                "amount": staged.get("trip_amount"),
                "currency_code": TRIP_CURRENCY.value,
                "material_type": staged.get("material_type"),
                "truck_tonnage": weight.get("value"),
                "weight_unit": weight.get("unit"),
                "trip_type": trip_type,
                "truck_id": staged["selected_truck_id"],
                "driver_id": staged["driver_1_id"],
                "customer_id": customer_row["id"],
                "created_at": now,
            }
        )
    except PyMongoError:
        logger.error(f"Trip insert failed, releasing temp trip {temp_trip_id}")
        db.temp_trips.update_one(
            {"temp_trip_id": temp_trip_id, "org_id": org_id, "promoted_trip_id": trip_id},
            {"$unset": {"promoted_trip_id": "", "promoted_at": ""}},
        )
        raise

    db.temp_trips.update_one(
        {"temp_trip_id": temp_trip_id, "org_id": org_id},
        {
            "$set": {
                "customer": customer,
                "loader": loader,
                "unloader": unloader,
                "updated_at": _now(),
            }
        },
    )
    logger.info(f"Trip {trip_id} created from temp trip {temp_trip_id}")
    return trip_id
