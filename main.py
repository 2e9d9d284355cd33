# backend/main.py
# Entry point for the FastAPI application

import logging
import os
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from pymongo.database import Database

# Load environment variables before the modules that read them at import time
load_dotenv()

from transit.exceptions import AppError, InvalidBodyError
from transit.routes import alerts, auth, trips
from transit.utils.db_setup import get_database, setup_db_indexes

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s: %(message)s",
    handlers=[logging.FileHandler("backend.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# Suppress pymongo debug logs
logging.getLogger("pymongo").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Validate required environment variables
    required_env_vars = ["MONGO_URI"]
    missing_vars = [var for var in required_env_vars if not os.getenv(var)]
    if missing_vars:
        logger.error(f"Missing required environment variables: {missing_vars}")
        raise Exception(f"Missing required environment variables: {missing_vars}")

    # Validate optional but important environment variables
    optional_vars = [
        "JWT_SECRET_KEY",
        "SMTP_HOST",
        "SMTP_USER",
        "SMTP_PASS",
        "AUTH_PROVIDER_URL",
    ]
    missing_optional = [var for var in optional_vars if not os.getenv(var)]
    if missing_optional:
        logger.warning(
            f"Missing optional environment variables (some features may not work): {missing_optional}"
        )

    db = get_database()
    try:
        db.client.server_info()  # Test connection
        logger.info("Successfully connected to MongoDB")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {str(e)}")
        raise Exception(f"MongoDB connection failed: {str(e)}")
    setup_db_indexes(db)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="E2E Transit Solutions API",
    description="Authentication, dashboard alerts and trip creation for fleet operators",
    version="1.0.0",
    docs_url="/docs" if os.getenv("ENVIRONMENT") == "development" else None,
    redoc_url="/redoc" if os.getenv("ENVIRONMENT") == "development" else None,
    lifespan=lifespan,
)

# Add security middleware
if os.getenv("ENVIRONMENT") == "production":
    # Add trusted host middleware for production
    allowed_hosts = (
        os.getenv("ALLOWED_HOSTS", "").split(",")
        if os.getenv("ALLOWED_HOSTS")
        else ["*"]
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)


# Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    if os.getenv("ENVIRONMENT") == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render typed errors as {"error", "message"}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "message": exc.detail},
        background=getattr(exc, "background", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are reported as INVALID_BODY (400)."""
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    logger.warning(f"Rejected request to {request.url.path}: invalid {fields}")
    error = InvalidBodyError(f"Missing or invalid field(s): {', '.join(fields)}")
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.error_code, "message": error.detail},
    )


# Include API routes
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(alerts.router, prefix="/api/dashboard/alerts", tags=["alerts"])
app.include_router(trips.router, prefix="/api/trip", tags=["trips"])
logger.info("API routes included")


# Health check endpoint
@app.get("/")
async def root(db: Database = Depends(get_database)):
    """Return a basic health check message."""
    logger.info("Health check endpoint accessed")
    try:
        db.client.server_info()  # Verify MongoDB connection
        return {"message": "E2E Transit Solutions API is running"}
    except Exception as e:
        logger.error(f"MongoDB health check failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Database connection error")
