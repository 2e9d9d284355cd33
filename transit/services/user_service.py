# backend/transit/services/user_service.py
# Signup, OTP verification, password login and OAuth user sync

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from fastapi import BackgroundTasks
from pymongo.database import Database

from transit.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NoOtpError,
    NoPasswordError,
    NotFoundError,
    NotVerifiedError,
    OtpExpiredError,
    OtpInvalidError,
)
from transit.services.email_service import OTP_SUBJECT, SIGNUP_OTP_SUBJECT, send_otp_email
from transit.utils.auth import (
    OTP_TTL_MIN,
    generate_otp,
    generate_tokens,
    get_password_hash,
    hash_otp,
    hash_refresh_token,
    otp_expiry,
    verify_otp_hash,
    verify_password,
)
from transit.utils.time_utils import to_utc

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_user_by_email(db: Database, email: str) -> Optional[dict]:
    """Get user from database by email."""
    return db.users.find_one({"email": email}, {"_id": 0})


def update_user(db: Database, email: str, patch: dict) -> Optional[dict]:
    """Apply a partial update and return the updated user."""
    db.users.update_one(
        {"email": email}, {"$set": {**patch, "updated_at": _now()}}
    )
    return get_user_by_email(db, email)


def queue_otp_email(tasks: BackgroundTasks, email: str, otp: str, subject: str) -> None:
    """Send the OTP after the response; delivery failures are only logged."""
    tasks.add_task(send_otp_email, email, otp, subject, OTP_TTL_MIN)


def reissue_otp(db: Database, tasks: BackgroundTasks, email: str, subject: str = OTP_SUBJECT) -> None:
    """Overwrite the user's OTP hash and expiry, then mail the new code."""
    otp = generate_otp()
    db.users.update_one(
        {"email": email},
        {
            "$set": {
                "otp": hash_otp(otp),
                "otp_expires_at": otp_expiry(),
                "updated_at": _now(),
            }
        },
    )
    queue_otp_email(tasks, email, otp, subject)
    logger.info(f"OTP reissued for {email}")


def create_user(db: Database, tasks: BackgroundTasks, email: str, password: str) -> dict:
    otp = generate_otp()
    now = _now()
    user = {
        "id": str(uuid.uuid4()),
        "email": email,
        "password_hash": get_password_hash(password),
        "is_verified": False,
        "otp": hash_otp(otp),
        "otp_expires_at": otp_expiry(now),
        "provider": "email",
        "provider_id": None,
        "refresh_token_hash": None,
        "created_at": now,
        "updated_at": now,
    }
    db.users.insert_one(dict(user))
    queue_otp_email(tasks, email, otp, SIGNUP_OTP_SUBJECT)
    logger.info(f"Created user {user['id']} for {email}")
    return user


def signup(db: Database, tasks: BackgroundTasks, email: str, password: str) -> Tuple[bool, str]:
    """Create an account, or resend the OTP for an unverified one.

    Returns (created, message).
    """
    existing = get_user_by_email(db, email)
    if existing:
        if existing.get("is_verified"):
            raise AlreadyExistsError()
        reissue_otp(db, tasks, email)
        return False, "User exists but not verified. OTP re-sent."

    create_user(db, tasks, email, password)
    return True, "Signup successful. OTP sent to email."


def verify_otp(db: Database, email: str, otp: str, new_password: Optional[str] = None) -> Dict:
    """Check an OTP and apply the signup, password-reset or re-verification outcome."""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError()

    if not user.get("otp") or not user.get("otp_expires_at"):
        raise NoOtpError()

    if to_utc(user["otp_expires_at"]) < _now():
        raise OtpExpiredError()

    if not verify_otp_hash(otp, user["otp"]):
        logger.warning(f"Incorrect OTP submitted for {email}")
        raise OtpInvalidError()

    patch = {"otp": None, "otp_expires_at": None}
    was_verified = bool(user.get("is_verified"))
    if new_password:
        patch["password_hash"] = get_password_hash(new_password)
        # Proving email ownership also verifies the account
        patch["is_verified"] = True
        message = "Password reset successful."
    elif not was_verified:
        patch["is_verified"] = True
        message = "Verification successful."
    else:
        message = "OTP accepted."

    updated = update_user(db, email, patch)
    logger.info(f"OTP verified for {email}: {message}")
    return {"message": message, "isVerified": bool(updated and updated.get("is_verified"))}


def store_refresh_token(db: Database, user_id: str, refresh_token: str) -> None:
    db.users.update_one(
        {"id": user_id},
        {"$set": {"refresh_token_hash": hash_refresh_token(refresh_token), "updated_at": _now()}},
    )


def login(db: Database, tasks: BackgroundTasks, email: str, password: str) -> Dict:
    """Password login; unverified accounts get a fresh OTP and a 403."""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError()

    if not user.get("is_verified"):
        reissue_otp(db, tasks, email)
        raise NotVerifiedError()

    if not user.get("password_hash"):
        raise NoPasswordError()

    if not verify_password(password, user["password_hash"]):
        logger.warning(f"Invalid password for {email}")
        raise InvalidCredentialsError()

    access_token, refresh_token = generate_tokens(user["id"])
    store_refresh_token(db, user["id"], refresh_token)
    logger.info(f"User logged in successfully: {email}")
    return {
        "accessToken": access_token,
        "refreshToken": refresh_token,
        "user": {"id": user["id"], "email": user["email"]},
    }


def forgot_password(db: Database, tasks: BackgroundTasks, email: str) -> str:
    """Issue a reset OTP; the new password is set through verify_otp."""
    user = get_user_by_email(db, email)
    if not user:
        return "If that email exists, an OTP has been sent."
    reissue_otp(db, tasks, email)
    return "Reset OTP sent to email."


def _public_user(user: dict) -> dict:
    hidden = {"password_hash", "otp", "refresh_token_hash"}
    return {k: v for k, v in user.items() if k not in hidden}


def sync_oauth_user(
    db: Database,
    user_id: str,
    email: str,
    provider: Optional[str] = None,
    provider_id: Optional[str] = None,
) -> Dict:
    """Mirror a hosted-auth identity into the users collection."""
    existing = get_user_by_email(db, email)
    if existing:
        if existing.get("id") == user_id:
            return {
                "message": "User already exists. Login successful.",
                "created": False,
                "user": _public_user(existing),
            }

        # Same email under a new identity: adopt the provider's id
        updated = update_user(
            db,
            email,
            {"id": user_id, "provider": provider, "provider_id": provider_id, "is_verified": True},
        )
        logger.info(f"User {email} migrated from id {existing.get('id')} to {user_id}")
        return {
            "message": "User updated with new ID.",
            "created": False,
            "user": _public_user(updated or {}),
        }

    now = _now()
    user = {
        "id": user_id,
        "email": email,
        "password_hash": None,
        "provider": provider,
        "provider_id": provider_id,
        "is_verified": True,
        "otp": None,
        "otp_expires_at": None,
        "refresh_token_hash": None,
        "created_at": now,
        "updated_at": now,
    }
    db.users.insert_one(dict(user))
    logger.info(f"Created OAuth user {user_id} for {email}")
    return {"message": "User created (first login).", "created": True, "user": _public_user(user)}
