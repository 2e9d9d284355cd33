# backend/transit/routes/auth.py
# Authentication routes: signup, OTP verification, password login, OAuth sync

import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from transit.exceptions import AppError, DatabaseError, InvalidBodyError, OAuthExchangeError, ServerError
from transit.models.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SyncUserRequest,
    SyncUserResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from transit.services import oauth_service, user_service
from transit.utils.db_setup import get_database

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_unexpected(action: str, e: Exception) -> AppError:
    if isinstance(e, PyMongoError):
        logger.error(f"Database error during {action}: {str(e)}")
        return DatabaseError()
    logger.error(f"Error during {action}: {str(e)}")
    return ServerError()


@router.post("/signup")
async def signup(
    request: SignupRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_database),
):
    """Register a user and email an OTP; resends the OTP for unverified accounts."""
    logger.info(f"Signup attempt for email: {request.email}")
    try:
        created, message = user_service.signup(
            db, background_tasks, request.email, request.password
        )
    except AppError:
        raise
    except Exception as e:
        raise _handle_unexpected("signup", e)

    status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return JSONResponse(
        status_code=status_code, content={"message": message}, background=background_tasks
    )


@router.post("/verify", response_model=VerifyOTPResponse)
async def verify(request: VerifyOTPRequest, db: Database = Depends(get_database)):
    """Verify an OTP; with newPassword this completes a password reset."""
    logger.info(f"OTP verification attempt for email: {request.email}")
    try:
        return user_service.verify_otp(db, request.email, request.otp, request.newPassword)
    except AppError:
        raise
    except Exception as e:
        raise _handle_unexpected("OTP verification", e)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_database),
):
    """Authenticate with email and password."""
    logger.info(f"Login attempt for email: {request.email}")
    try:
        return user_service.login(db, background_tasks, request.email, request.password)
    except AppError as e:
        # The OTP reissued for unverified accounts must still go out
        e.background = background_tasks
        raise
    except Exception as e:
        raise _handle_unexpected("login", e)


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_database),
):
    """Send a password reset OTP; the reset itself goes through /verify."""
    logger.info(f"Password reset requested for email: {request.email}")
    try:
        message = user_service.forgot_password(db, background_tasks, request.email)
    except AppError:
        raise
    except Exception as e:
        raise _handle_unexpected("forgot password", e)
    return {"message": message}


@router.post("/syncuser", response_model=SyncUserResponse)
async def sync_user(request: SyncUserRequest, db: Database = Depends(get_database)):
    """Create or update the local user for an OAuth identity."""
    logger.info(f"OAuth sync for email: {request.email}, provider: {request.provider}")
    try:
        return user_service.sync_oauth_user(
            db, request.id, request.email, request.provider, request.provider_id
        )
    except AppError:
        raise
    except Exception as e:
        raise _handle_unexpected("OAuth user sync", e)


@router.get("/callback")
async def oauth_callback(
    code: Optional[str] = None,
    code_verifier: Optional[str] = None,
    db: Database = Depends(get_database),
):
    """Exchange the provider's authorization code and sync the user."""
    if not code:
        raise InvalidBodyError.missing(["code"])

    session = oauth_service.exchange_code_for_session(code, code_verifier)
    if not session:
        raise OAuthExchangeError()

    identity = oauth_service.identity_from_session(session)
    if not identity["id"] or not identity["email"]:
        logger.warning("OAuth session is missing the user id or email")
        raise OAuthExchangeError("Auth provider returned an incomplete user")

    try:
        synced = user_service.sync_oauth_user(
            db, identity["id"], identity["email"], identity["provider"], identity["provider_id"]
        )
    except AppError:
        raise
    except Exception as e:
        raise _handle_unexpected("OAuth callback", e)

    return {
        "accessToken": session.get("access_token"),
        "refreshToken": session.get("refresh_token"),
        **synced,
    }
