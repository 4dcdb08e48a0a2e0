from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import bcrypt
from jose import JWTError, jwt

from app.config import settings

logger = logging.getLogger(__name__)


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    ).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def access_token_expiry() -> Optional[datetime]:
    if settings.ACCESS_TOKEN_EXPIRE_MINUTES is None:
        return None
    return datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(data: Dict[str, Any], expires_at: Optional[datetime] = None) -> str:
    """Sign a bearer token. ``data`` must carry ``sub`` and ``jti``."""
    to_encode = data.copy()
    to_encode["iat"] = datetime.now(timezone.utc)
    if expires_at is not None:
        to_encode["exp"] = expires_at
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the signature, expiry or claims are bad."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
    if not payload.get("sub") or not payload.get("jti"):
        logger.info("Rejected bearer token: missing sub or jti claim")
        return None
    return payload


_dummy_password_hash: Optional[str] = None


def dummy_password_hash() -> str:
    """Bcrypt hash checked against when no user matched the phone."""
    global _dummy_password_hash
    if _dummy_password_hash is None:
        _dummy_password_hash = get_password_hash("dummy-password")
    return _dummy_password_hash
