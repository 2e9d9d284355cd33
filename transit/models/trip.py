# backend/transit/models/trip.py
# Pydantic models for the three-step trip creation wizard

from pydantic import BaseModel, Field
from typing import Any, List, Optional


class LocationPoint(BaseModel):
    """A named point; coordinates are validated by the trip service."""

    name: Optional[str] = None
    latitude: Any = None
    longitude: Any = None


class MaterialWeight(BaseModel):
    value: Any = None
    unit: Optional[str] = None


class ContactDetails(BaseModel):
    """Customer, loader or unloader contact block."""

    name: Optional[str] = None
    phone_number: Optional[str] = None


class BasicTripInfo(BaseModel):
    """Step 1: route basics."""

    org_id: str = Field(..., min_length=1)
    loading_location: Optional[LocationPoint] = None
    unloading_location: Optional[LocationPoint] = None
    stops: Optional[List[LocationPoint]] = None
    departure_date: str = Field(..., min_length=1)
    trip_amount: float


class TruckSelection(BaseModel):
    """Step 2: material, truck and driver selection."""

    org_id: str = Field(..., min_length=1)
    temp_trip_id: str = Field(..., min_length=1)
    material_type: Optional[str] = None
    material_weight: Optional[MaterialWeight] = None
    truck_type: Optional[str] = None
    selected_truck_id: Optional[str] = None
    driver_1_id: Optional[str] = None
    driver_2_id: Optional[str] = None


class CustomerDetails(BaseModel):
    """Step 3: customer details and finalization."""

    org_id: str = Field(..., min_length=1)
    temp_trip_id: str = Field(..., min_length=1)
    trip_type: Optional[str] = None
    customer: Optional[ContactDetails] = None
    loader: Optional[ContactDetails] = None
    unloader: Optional[ContactDetails] = None
