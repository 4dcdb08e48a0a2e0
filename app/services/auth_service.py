from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from dataclasses import dataclass
from typing import Optional
import logging
import uuid

from ..models import User, DeviceRegistration, DEFAULT_DEVICE_TYPE
from ..core.errors import AuthError, AuthResult
from ..core.security import get_password_hash, verify_password, dummy_password_hash
from ..schemas.auth import UserRegister, UserLogin
from .audit import AuditLogger, RequestContext, audit_logger
from .token_service import AuthenticatedSession, issue_token, revoke_tokens_with_label, purge_expired_tokens
from .user_service import create_user, get_user_by_phone, upsert_device, mark_device_logged_out

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
PHONE_TAKEN = {"phone": ["The phone has already been taken."]}


@dataclass
class IssuedSession:
    user: User
    token: str
    device_id: str


class AuthService:
    """Multi-device registration, login and logout for phone-number accounts.

    Each user owns an ordered registry of devices (one entry per device_id)
    and at most one live bearer token per device. Expected failures come back
    as ``AuthResult`` errors; nothing here raises to the caller.
    """

    def __init__(self, db: AsyncSession, audit: Optional[AuditLogger] = None):
        self.db = db
        self.audit = audit or audit_logger

    async def register_user(self, user_data: UserRegister, context: RequestContext) -> AuthResult[IssuedSession]:
        """Create the account, its first device entry and that device's token."""
        try:
            if await get_user_by_phone(self.db, user_data.phone) is not None:
                return AuthResult.failure(AuthError.validation(PHONE_TAKEN))

            device_id = user_data.device_id or str(uuid.uuid4())
            user = create_user(
                self.db,
                name=user_data.name,
                phone=user_data.phone,
                password_hash=get_password_hash(user_data.password),
                devices=[
                    DeviceRegistration(
                        device_id=device_id,
                        device_type=user_data.device_type or DEFAULT_DEVICE_TYPE,
                        push_token=user_data.fcm_token,
                        logged_in=True,
                    )
                ],
            )
            token = issue_token(self.db, user, device_id)
            await self.db.commit()
        except IntegrityError:
            # Another request registered the same phone between check and commit
            await self.db.rollback()
            logger.warning(f"Registration raced on phone {user_data.phone}")
            return AuthResult.failure(AuthError.validation(PHONE_TAKEN))
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Registration Error: {e}")
            return AuthResult.failure(AuthError.persistence("Registration failed. Please try again."))

        self.audit.auth_activity(user, "Registration", context)
        return AuthResult.success(IssuedSession(user=user, token=token, device_id=device_id))

    async def authenticate_user(self, login_data: UserLogin, context: RequestContext) -> AuthResult[IssuedSession]:
        """Verify credentials, reconcile the device registry and rotate the device token."""
        try:
            user = await get_user_by_phone(self.db, login_data.phone)

            # Same answer and same bcrypt cost for unknown phone and wrong password
            password_hash = user.password_hash if user else dummy_password_hash()
            if not verify_password(login_data.password, password_hash) or not user:
                return AuthResult.failure(AuthError.authentication(INVALID_CREDENTIALS))

            device_id = login_data.device_id or str(uuid.uuid4())
            upsert_device(user, device_id, login_data.fcm_token, login_data.device_type)

            # One live token per device: drop the old ones before issuing
            await revoke_tokens_with_label(self.db, user.id, device_id)
            await purge_expired_tokens(self.db, user.id)
            token = issue_token(self.db, user, device_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Login Error: {e}")
            return AuthResult.failure(AuthError.persistence("Login failed. Please try again."))

        self.audit.auth_activity(user, "Login", context)
        return AuthResult.success(IssuedSession(user=user, token=token, device_id=device_id))

    async def logout_user(
        self,
        session: Optional[AuthenticatedSession],
        device_id: Optional[str],
        context: RequestContext,
    ) -> AuthResult[None]:
        """Mark the device logged out and revoke its tokens. The registry entry is kept."""
        if session is None:
            return AuthResult.failure(AuthError.authentication("No authenticated user"))

        user = session.user
        device_id = device_id or session.device_id
        try:
            if mark_device_logged_out(user, device_id) is None:
                logger.info(f"Logout for unregistered device {device_id} of user {user.id}")
            await revoke_tokens_with_label(self.db, user.id, device_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Logout Error: {e}")
            return AuthResult.failure(AuthError.persistence("Logout failed. Please try again."))

        self.audit.logout(user, device_id, context)
        return AuthResult.success()
