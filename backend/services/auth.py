"""
Authentication Service for Signature Studio

Signatures are owned by users of the surrounding platform, which issues the
JWTs. This service only verifies them:
- HS256 bearer tokens signed with JWT_SECRET_KEY
- `sub` is the user id, `email` the user's address
- Only access tokens are accepted
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import JWTError, jwt
from pydantic import BaseModel

from config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = 60  # 1 hour


# ==================== MODELS ====================

class TokenData(BaseModel):
    """Data extracted from JWT token"""
    user_id: str
    email: Optional[str] = None
    exp: Optional[datetime] = None
    token_type: str = "access"  # "access" or "refresh"


class AuthUser(BaseModel):
    """Authenticated user context"""
    id: str
    email: Optional[str] = None


# ==================== JWT ====================

def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token (used by local tooling and tests)"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": user_id,
        "email": email,
        "type": "access",
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[TokenData]:
    """Decode and validate a JWT token"""
    settings = get_settings()
    if not settings.JWT_SECRET_KEY:
        logger.warning("JWT_SECRET_KEY not configured; rejecting bearer token")
        return None

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    exp = payload.get("exp")
    return TokenData(
        user_id=str(user_id),
        email=payload.get("email"),
        token_type=payload.get("type", "access"),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )
