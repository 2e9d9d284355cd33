# backend/tests/test_trip_routes.py
# Route tests for the three-step trip wizard

import pytest


@pytest.fixture
def seeded(fake_db):
    fake_db.trucks.insert_one(
        {
            "truck_id": "t-1",
            "truck_number": "MH12AB0002",
            "organisation_id": "org-1",
            "truck_type": "container",
            "maximum_load": 1,
            "weight_unit": "ton",
        }
    )
    fake_db.users.insert_one({"id": "cust-1", "email": "buyer@example.com", "phone_number": "9876543210"})
    return fake_db


STEP1 = {
    "org_id": "org-1",
    "loading_location": {"name": "Pune", "latitude": 18.5204, "longitude": 73.8567},
    "unloading_location": {"name": "Mumbai", "latitude": 19.076, "longitude": 72.8777},
    "stops": [],
    "departure_date": "2025-07-01",
    "trip_amount": 45000,
}


def _step2(temp_trip_id, **overrides):
    body = {
        "org_id": "org-1",
        "temp_trip_id": temp_trip_id,
        "material_type": "consumer_goods",
        "material_weight": {"value": 500, "unit": "kg"},
        "truck_type": "container",
        "selected_truck_id": "t-1",
        "driver_1_id": "drv-1",
    }
    body.update(overrides)
    return body


def test_full_wizard(client, seeded):
    res = client.post("/api/trip/step1", json=STEP1)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["route_distance"] > 0
    temp_trip_id = body["temp_trip_id"]

    res = client.post("/api/trip/step2", json=_step2(temp_trip_id))
    assert res.status_code == 200
    trucks = res.json()["recommended_trucks"]
    assert [t["truck_id"] for t in trucks] == ["t-1"]
    assert trucks[0]["capacity"] == 1

    res = client.post(
        "/api/trip/step3",
        json={
            "org_id": "org-1",
            "temp_trip_id": temp_trip_id,
            "trip_type": "Owned",
            "customer": {"name": "Buyer", "phone_number": "9876543210"},
        },
    )
    assert res.status_code == 200
    trip_id = res.json()["trip_id"]
    assert seeded.trips.find_one({"id": trip_id})["customer_id"] == "cust-1"

    res = client.post(
        "/api/trip/step3",
        json={
            "org_id": "org-1",
            "temp_trip_id": temp_trip_id,
            "trip_type": "Owned",
            "customer": {"name": "Buyer", "phone_number": "9876543210"},
        },
    )
    assert res.status_code == 409

    res = client.post("/api/trip/step2", json=_step2(temp_trip_id, driver_1_id="drv-2"))
    assert res.status_code == 409
    assert res.json()["error"] == "ALREADY_EXISTS"


def test_step2_accepts_get_for_compatibility(client, seeded):
    temp_trip_id = client.post("/api/trip/step1", json=STEP1).json()["temp_trip_id"]
    res = client.request("GET", "/api/trip/step2", json=_step2(temp_trip_id))
    assert res.status_code == 200
    assert res.json()["message"] == "Trucks recommended successfully"


def test_step1_missing_coordinates(client, seeded):
    body = {**STEP1, "unloading_location": {"name": "Mumbai"}}
    res = client.post("/api/trip/step1", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == "Missing unloading location coordinates"


def test_step1_missing_org(client, seeded):
    body = {k: v for k, v in STEP1.items() if k != "org_id"}
    res = client.post("/api/trip/step1", json=body)
    assert res.status_code == 400
    assert res.json()["error"] == "INVALID_BODY"


def test_step2_truck_not_available(client, seeded):
    temp_trip_id = client.post("/api/trip/step1", json=STEP1).json()["temp_trip_id"]
    res = client.post(
        "/api/trip/step2",
        json=_step2(temp_trip_id, material_weight={"value": 2, "unit": "ton"}),
    )
    assert res.status_code == 404
    assert res.json()["error"] == "TRUCK_NOT_AVAILABLE"


def test_step3_before_truck_selected(client, seeded):
    temp_trip_id = client.post("/api/trip/step1", json=STEP1).json()["temp_trip_id"]
    client.post("/api/trip/step2", json=_step2(temp_trip_id, selected_truck_id=None))
    res = client.post(
        "/api/trip/step3",
        json={
            "org_id": "org-1",
            "temp_trip_id": temp_trip_id,
            "trip_type": "Leased",
            "customer": {"name": "Buyer", "phone_number": "9876543210"},
        },
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Truck not selected (step2 incomplete)"
    assert seeded.trips.find_one({}) is None


def test_step3_unknown_customer(client, seeded):
    temp_trip_id = client.post("/api/trip/step1", json=STEP1).json()["temp_trip_id"]
    client.post("/api/trip/step2", json=_step2(temp_trip_id))
    res = client.post(
        "/api/trip/step3",
        json={
            "org_id": "org-1",
            "temp_trip_id": temp_trip_id,
            "trip_type": "Leased",
            "customer": {"name": "Nobody", "phone_number": "9000000000"},
        },
    )
    assert res.status_code == 404
    assert res.json()["error"] == "CUSTOMER_NOT_FOUND"
