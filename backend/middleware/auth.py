"""
Authentication Dependencies

Provides:
- get_current_user_required: Extract and validate user from JWT token (401 otherwise)
- get_optional_user: Same, but anonymous requests get None
"""

from typing import Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from logging_config import set_request_context
from sentry_integration import set_user
from services.auth import decode_token, AuthUser

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def _user_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[AuthUser]:
    if not credentials:
        return None

    token_data = decode_token(credentials.credentials)
    if not token_data or token_data.token_type != "access":
        return None

    user = AuthUser(id=token_data.user_id, email=token_data.email)
    set_request_context(user_id=user.id)
    set_user(user.id, user.email)
    return user


# ==================== DEPENDENCIES ====================

async def get_current_user_required(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract current user from JWT token.
    Raises 401 if no token or invalid token.
    """
    if not credentials:
        raise _unauthorized("Not authenticated")

    user = _user_from_credentials(credentials)
    if not user:
        raise _unauthorized("Invalid or expired token")

    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Optional[AuthUser]:
    """
    Get current user if token provided, otherwise return None.
    Anonymous users can render and upload; saving requires a user.
    """
    return _user_from_credentials(credentials)
