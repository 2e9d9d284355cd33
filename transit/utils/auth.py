# backend/transit/utils/auth.py
# Password/OTP hashing and JWT issuance

import os
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
OTP_TTL_MIN = int(os.getenv("OTP_TTL_MIN", "10"))
OTP_LENGTH = 6

# Passwords and OTPs
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

# Refresh tokens are longer than bcrypt's 72-byte input limit
token_context = CryptContext(
    schemes=["sha256_crypt"], deprecated="auto", sha256_crypt__default_rounds=5000
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_otp() -> str:
    """Generate a 6-digit OTP."""
    return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))


def hash_otp(otp: str) -> str:
    return pwd_context.hash(otp)


def verify_otp_hash(otp: str, otp_hash: str) -> bool:
    return pwd_context.verify(otp, otp_hash)


def hash_refresh_token(refresh_token: str) -> str:
    return token_context.hash(refresh_token)


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry timestamp for an OTP issued now."""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=OTP_TTL_MIN)


def create_token(user_id: str, token_type: str, expires_delta: timedelta) -> str:
    """Create a signed JWT bound to a user id."""
    issued_at = datetime.now(timezone.utc)
    to_encode = {
        "userId": user_id,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def generate_tokens(user_id: str) -> Tuple[str, str]:
    """Issue a short-lived access token and a long-lived refresh token."""
    access_token = create_token(
        user_id, "access", timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    refresh_token = create_token(
        user_id, "refresh", timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    )
    logger.info(f"Issued access and refresh tokens for user {user_id}")
    return access_token, refresh_token
