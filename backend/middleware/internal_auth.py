"""
Internal Service Authentication

API key authentication for service callers, such as the asset host pushing
icon URL overrides. User JWTs are never accepted here.

Environment Variables:
    INTERNAL_API_KEY: Primary API key for internal services
    INTERNAL_API_KEYS: Comma-separated list of valid keys (for key rotation)

Headers:
    X-Internal-Api-Key: <api_key>
    X-Service-Name: <service_name> (optional, for logging)
"""

import secrets
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from config import get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Internal-Api-Key"
SERVICE_NAME_HEADER = "X-Service-Name"


@dataclass
class InternalService:
    """An authenticated internal caller"""
    name: str
    api_key_hash: str  # Last 8 chars of key for logging


def validate_internal_key(api_key: str) -> bool:
    """Constant-time check of api_key against the configured keys."""
    if not api_key:
        return False

    valid_keys = get_settings().internal_api_keys
    if not valid_keys:
        logger.warning("No internal API keys configured - internal endpoints disabled")
        return False

    return any(secrets.compare_digest(api_key, key) for key in valid_keys)


api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_internal_service(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header)
) -> InternalService:
    """
    FastAPI dependency for internal endpoints.
    Raises 401 when the key is missing or not configured.
    """
    service_name = request.headers.get(SERVICE_NAME_HEADER, "unknown")

    if not api_key:
        logger.warning(f"Missing API key from service: {service_name}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing internal API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    if not validate_internal_key(api_key):
        logger.warning(f"Invalid API key from service: {service_name}, key ending: ...{api_key[-8:]}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid internal API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    logger.info(f"Internal service authenticated: {service_name}")
    return InternalService(name=service_name, api_key_hash=f"...{api_key[-8:]}")
