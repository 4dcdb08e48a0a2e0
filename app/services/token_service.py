# app/services/token_service.py
"""
Token store: server-side records behind the bearer tokens.

A bearer token is a signed JWT whose ``jti`` names an ``AccessToken`` row.
The row carries the token label (the device id), so every token issued for
one device can be revoked with a single delete.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
import logging
import uuid

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, decode_token, access_token_expiry
from app.models import User, AccessToken

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedSession:
    """The caller identity resolved from a bearer token."""
    user: User
    token: AccessToken

    @property
    def device_id(self) -> str:
        return self.token.name


def issue_token(db: AsyncSession, user: User, label: str) -> str:
    """Stage a new token row for ``user`` labelled ``label`` and return the bearer string.

    The row is added to the session only; the caller commits.
    """
    jti = str(uuid.uuid4())
    expires_at = access_token_expiry()
    db.add(AccessToken(id=jti, user_id=user.id, name=label, expires_at=expires_at))
    return create_access_token({"sub": user.id, "jti": jti, "device": label}, expires_at)


async def revoke_tokens_with_label(db: AsyncSession, user_id: str, label: str) -> int:
    result = await db.execute(
        delete(AccessToken).where(AccessToken.user_id == user_id, AccessToken.name == label)
    )
    if result.rowcount:
        logger.info(f"Revoked {result.rowcount} token(s) for user {user_id} on device {label}")
    return result.rowcount


async def purge_expired_tokens(db: AsyncSession, user_id: str) -> int:
    """Delete the user's token rows whose expiry has passed."""
    result = await db.execute(
        delete(AccessToken).where(
            AccessToken.user_id == user_id,
            AccessToken.expires_at.isnot(None),
            AccessToken.expires_at < datetime.now(timezone.utc),
        ).execution_options(synchronize_session="fetch")
    )
    if result.rowcount:
        logger.info(f"Purged {result.rowcount} expired token(s) for user {user_id}")
    return result.rowcount


async def resolve_token(db: AsyncSession, bearer: str) -> Optional[AuthenticatedSession]:
    payload = decode_token(bearer)
    if payload is None:
        return None

    result = await db.execute(
        select(AccessToken).where(
            AccessToken.id == payload["jti"],
            AccessToken.user_id == payload["sub"],
        )
    )
    token = result.scalar_one_or_none()
    if token is None:
        # Revoked or superseded by a later login on the same device
        return None

    user_result = await db.execute(select(User).where(User.id == token.user_id))
    user = user_result.scalar_one_or_none()
    if user is None:
        return None

    token.last_used_at = datetime.now(timezone.utc)
    await db.commit()
    return AuthenticatedSession(user=user, token=token)
