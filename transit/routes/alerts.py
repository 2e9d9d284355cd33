# backend/transit/routes/alerts.py
# Dashboard alert routes

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from pymongo.errors import PyMongoError
from transit.exceptions import AppError, DatabaseError, ServerError
from transit.services import alert_service
from transit.utils.db_setup import get_database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/critical")
async def critical_alerts(
    org_id: str = Query(..., min_length=1),
    status: Optional[str] = None,
    db: Database = Depends(get_database),
):
    """Unresolved critical alerts for an organisation, optionally by status."""
    logger.info(f"Received GET /critical for organisation {org_id}, status: {status}")
    try:
        response = alert_service.unresolved_critical_alerts(db, org_id, status)
    except AppError:
        raise
    except PyMongoError as e:
        logger.error(f"Error fetching critical alerts: {str(e)}")
        raise DatabaseError("Error fetching critical alerts")
    except Exception as e:
        logger.error(f"Error fetching critical alerts: {str(e)}")
        raise ServerError()
    return {"success": True, "data": response}


@router.get("/suspicious")
async def suspicious_alerts(
    org_id: str = Query(..., min_length=1),
    db: Database = Depends(get_database),
):
    """Month-by-month suspicious activity counts with the latest trend."""
    logger.info(f"Received GET /suspicious for organisation {org_id}")
    try:
        response = alert_service.monthly_suspicious_activity(db, org_id)
    except AppError:
        raise
    except PyMongoError as e:
        logger.error(f"Error fetching suspicious alerts: {str(e)}")
        raise DatabaseError("Error fetching suspicious alerts")
    except Exception as e:
        logger.error(f"Error fetching suspicious alerts: {str(e)}")
        raise ServerError()
    return {"success": True, "data": response}
