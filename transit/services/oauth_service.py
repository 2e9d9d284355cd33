# backend/transit/services/oauth_service.py
# Authorization-code exchange against the hosted auth provider

import logging
import os
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

AUTH_PROVIDER_URL = os.getenv("AUTH_PROVIDER_URL", "")
AUTH_PROVIDER_KEY = os.getenv("AUTH_PROVIDER_KEY", "")


def exchange_code_for_session(code: str, code_verifier: Optional[str] = None) -> Optional[Dict]:
    """Exchange an OAuth authorization code for a provider session."""
    if not AUTH_PROVIDER_URL:
        logger.error("AUTH_PROVIDER_URL not configured; cannot exchange OAuth code")
        return None

    payload = {"auth_code": code}
    if code_verifier:
        payload["code_verifier"] = code_verifier

    try:
        response = requests.post(
            f"{AUTH_PROVIDER_URL.rstrip('/')}/auth/v1/token",
            params={"grant_type": "pkce"},
            json=payload,
            headers={"apikey": AUTH_PROVIDER_KEY, "User-Agent": "E2ETransit/1.0"},
            timeout=10,
        )
        response.raise_for_status()
        session = response.json()
    except requests.exceptions.Timeout:
        logger.error("Timeout occurred while exchanging OAuth code")
        return None
    except requests.exceptions.RequestException as e:
        logger.error(f"OAuth code exchange failed: {e}")
        return None
    except ValueError as e:
        logger.error(f"Invalid response format from auth provider: {e}")
        return None

    if not isinstance(session, dict) or not session.get("user"):
        logger.warning("Auth provider session carried no user")
        return None
    return session


def identity_from_session(session: Dict) -> Dict:
    """Pull id, email, provider and provider_id out of a provider session."""
    user = session.get("user") or {}
    app_metadata = user.get("app_metadata") or {}
    user_metadata = user.get("user_metadata") or {}
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "provider": app_metadata.get("provider"),
        "provider_id": user_metadata.get("provider_id") or user_metadata.get("sub"),
    }
