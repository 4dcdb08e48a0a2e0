from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..services.audit import AuditLogger, audit_logger
from ..services.token_service import AuthenticatedSession, resolve_token

bearer_scheme = HTTPBearer(auto_error=False)

def unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthenticated.",
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedSession:
    """Resolve the bearer token to its user and device, or reject with 401"""
    if credentials is None or not credentials.credentials:
        raise unauthenticated()

    session = await resolve_token(db, credentials.credentials)
    if session is None:
        raise unauthenticated()
    return session

def get_current_user(session: AuthenticatedSession = Depends(get_current_session)) -> User:
    return session.user

def get_audit_logger() -> AuditLogger:
    return audit_logger

async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[AuthenticatedSession]:
    """Like get_current_session, but yields None instead of rejecting"""
    if credentials is None or not credentials.credentials:
        return None
    return await resolve_token(db, credentials.credentials)
