# backend/transit/services/email_service.py
# SMTP email service for OTP delivery

import smtplib
import ssl
from email.message import EmailMessage
import os
import logging

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
EMAIL_SENDER = os.getenv("EMAIL_SENDER") or SMTP_USER

SIGNUP_OTP_SUBJECT = "Your Signup OTP"
OTP_SUBJECT = "Your OTP from E2E Transit Solutions"


def send_email(to_email: str, subject: str, body: str) -> bool:
    """Send a plain-text email via SMTP."""
    try:
        msg = EmailMessage()
        msg["From"] = EMAIL_SENDER
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        context = ssl.create_default_context()
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as server:
            server.starttls(context=context)
            server.login(SMTP_USER, SMTP_PASS)
            server.send_message(msg)
        logger.info(f"Email '{subject}' sent to {to_email}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def send_otp_email(to_email: str, otp: str, subject: str, ttl_minutes: int) -> bool:
    """Send OTP via email.

    Runs as a background task after the response has been returned, so the
    result is only logged.
    """
    body = f"Your OTP is: {otp} (valid {ttl_minutes} min)"
    return send_email(to_email, subject, body)
