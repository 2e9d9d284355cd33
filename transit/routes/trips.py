# backend/transit/routes/trips.py
# Trip creation wizard routes (step1 -> step2 -> step3)

import logging
from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import PyMongoError
from transit.exceptions import AppError, DatabaseError, ServerError
from transit.models.trip import BasicTripInfo, CustomerDetails, TruckSelection
from transit.services import trip_service
from transit.utils.db_setup import get_database

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(model):
    return model.model_dump() if model is not None else None


@router.post("/step1")
async def basic_trip_info(body: BasicTripInfo, db: Database = Depends(get_database)):
    """Stage route basics and return the temp trip id with a route estimate."""
    logger.info(f"Received POST /step1 for organisation {body.org_id}")
    try:
        staged = trip_service.stage_trip(
            db,
            body.org_id,
            _dump(body.loading_location),
            _dump(body.unloading_location),
            [s.model_dump() for s in body.stops] if body.stops is not None else None,
            body.departure_date,
            body.trip_amount,
        )
    except AppError:
        raise
    except PyMongoError as e:
        logger.error(f"Error staging trip: {str(e)}")
        raise DatabaseError("DB insert failed")
    except Exception as e:
        logger.error(f"Error staging trip: {str(e)}")
        raise ServerError()
    return {"success": True, "message": "Trip created successfully", **staged}


# GET stays registered for older clients that call step2 with a read verb
@router.api_route("/step2", methods=["POST", "GET"])
async def recommend_trucks(body: TruckSelection, db: Database = Depends(get_database)):
    """Recommend trucks for the load and store the material/truck/driver choice."""
    logger.info(f"Received /step2 for temp trip {body.temp_trip_id}")
    try:
        recommended = trip_service.recommend_trucks(
            db,
            body.org_id,
            body.temp_trip_id,
            body.material_type,
            _dump(body.material_weight),
            body.truck_type,
            body.selected_truck_id,
            body.driver_1_id,
            body.driver_2_id,
        )
    except AppError:
        raise
    except PyMongoError as e:
        logger.error(f"Error recommending trucks: {str(e)}")
        raise DatabaseError("DB update failed")
    except Exception as e:
        logger.error(f"Error recommending trucks: {str(e)}")
        raise ServerError()
    return {
        "success": True,
        "message": "Trucks recommended successfully",
        "recommended_trucks": recommended,
    }


@router.post("/step3")
async def add_customer_details(body: CustomerDetails, db: Database = Depends(get_database)):
    """Attach the customer and create the permanent trip."""
    logger.info(f"Received POST /step3 for temp trip {body.temp_trip_id}")
    try:
        trip_id = trip_service.finalize_trip(
            db,
            body.org_id,
            body.temp_trip_id,
            body.trip_type,
            _dump(body.customer),
            _dump(body.loader),
            _dump(body.unloader),
        )
    except AppError:
        raise
    except PyMongoError as e:
        logger.error(f"Error creating trip: {str(e)}")
        raise DatabaseError("Trip insert failed")
    except Exception as e:
        logger.error(f"Error creating trip: {str(e)}")
        raise ServerError()
    return {"success": True, "message": "Trip created successfully", "trip_id": trip_id}
