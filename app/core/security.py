"""Password hashing and signed bearer tokens."""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class CurrentUser(BaseModel):
    """Identity resolved from a bearer token. Opaque to the matching core."""
    user_id: uuid.UUID
    role: str


# ========================
# Passwords
# ========================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        return pwd_context.verify(password, stored_hash)
    except (TypeError, ValueError):
        # Unknown or malformed hash
        return False


# ========================
# Tokens
# ========================

def create_access_token(user_id: uuid.UUID, role: str, ttl_hours: Optional[int] = None) -> str:
    ttl = ttl_hours if ttl_hours is not None else settings.TOKEN_TTL_HOURS
    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=ttl),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Validate signature and expiry. Returns the payload or None."""
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidSignatureError:
        logger.warning("Bearer token signature mismatch")
        return None
    except jwt.PyJWTError:
        return None


def authenticate(token: str) -> Optional[CurrentUser]:
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        return CurrentUser(user_id=uuid.UUID(payload["sub"]), role=payload["role"])
    except (KeyError, TypeError, ValueError):
        return None
