# backend/transit/exceptions.py
# Typed HTTP errors shared by the auth, alert and trip services

from typing import List, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """HTTPException carrying a machine-readable error code."""

    error_code = "SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=message or self.default_message,
        )


class InvalidBodyError(AppError):
    error_code = "INVALID_BODY"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request body"

    @classmethod
    def missing(cls, fields: List[str]) -> "InvalidBodyError":
        return cls(f"Missing required field(s): {', '.join(fields)}")


class NotFoundError(AppError):
    error_code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class AlreadyExistsError(AppError):
    error_code = "ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Account already exists and is verified. Please log in."


class NotVerifiedError(AppError):
    error_code = "NOT_VERIFIED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account not verified. OTP re-sent."


class NoPasswordError(AppError):
    error_code = "NO_PASSWORD"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Account created via OAuth. Use social login."


class InvalidCredentialsError(AppError):
    error_code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password."


class NoOtpError(AppError):
    error_code = "NO_OTP"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No active OTP. Please initiate signup or password reset."


class OtpExpiredError(AppError):
    error_code = "OTP_EXPIRED"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "OTP expired. Request a new one."


class OtpInvalidError(AppError):
    error_code = "OTP_INVALID"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Incorrect OTP."


class UnknownStatusError(AppError):
    error_code = "UNKNOWN_STATUS"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown status: {value}")


class StepIncompleteError(AppError):
    error_code = "STEP_INCOMPLETE"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Previous step incomplete"


class TruckNotAvailableError(AppError):
    error_code = "TRUCK_NOT_AVAILABLE"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Truck not available"


class CustomerNotFoundError(AppError):
    error_code = "CUSTOMER_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Customer not found"


class TripAlreadyCreatedError(AppError):
    error_code = "ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Trip already created from this temp trip"


class OAuthExchangeError(AppError):
    error_code = "OAUTH_EXCHANGE_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Could not exchange authorization code"


class DatabaseError(AppError):
    error_code = "DB_ERROR"
    default_message = "Database error"


class ServerError(AppError):
    pass
