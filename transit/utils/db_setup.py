# Database client and index setup

import logging
import os
from functools import lru_cache

import pymongo
from pymongo.database import Database

# Configure logging
logger = logging.getLogger(__name__)

DB_NAME = os.getenv("MONGO_DB_NAME", "e2e_transit")


@lru_cache(maxsize=1)
def get_client() -> pymongo.MongoClient:
    """Create the process-wide MongoDB client on first use."""
    client = pymongo.MongoClient(os.getenv("MONGO_URI"), tz_aware=True)
    logger.info("MongoDB client created")
    return client


def get_database() -> Database:
    """FastAPI dependency yielding the application database.

    Route handlers receive the database through Depends(get_database) so tests
    can swap in another implementation with app.dependency_overrides.
    """
    return get_client()[DB_NAME]


def setup_db_indexes(db: Database) -> None:
    """
    Set up necessary database indexes for the application.
    This should be called during application startup.
    """
    try:
        db.users.create_index([("email", pymongo.ASCENDING)], name="email_1", unique=True)
        db.users.create_index([("id", pymongo.ASCENDING)], name="id_1")
        db.users.create_index([("phone_number", pymongo.ASCENDING)], name="phone_number_1")
        logger.info("Created users indexes")

        db.temp_trips.create_index(
            [("temp_trip_id", pymongo.ASCENDING)], name="temp_trip_id_1", unique=True
        )
        db.temp_trips.create_index([("org_id", pymongo.ASCENDING)], name="org_id_1")
        db.temp_trips.create_index(
            [("departure_date", pymongo.ASCENDING)], name="departure_date_1"
        )
        logger.info("Created temp_trips indexes")

        db.trucks.create_index(
            [("organisation_id", pymongo.ASCENDING), ("truck_type", pymongo.ASCENDING)],
            name="organisation_id_1_truck_type_1",
        )
        db.truck_critical_alerts.create_index(
            [("truck_id", pymongo.ASCENDING), ("alert_time", pymongo.DESCENDING)],
            name="truck_id_1_alert_time_-1",
        )
        logger.info("Database indexes set up successfully")
    except Exception as e:
        logger.error(f"Failed to set up database indexes: {e}")
        raise
