from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ..database import get_db
from ..schemas.auth import UserRegister, UserLogin, LogoutRequest, AuthSession
from ..schemas.user import UserResponse, DeviceRegistrationResponse
from ..services.audit import AuditLogger, RequestContext
from ..services.auth_service import AuthService, IssuedSession
from ..services.token_service import AuthenticatedSession
from ..core.dependencies import get_optional_session, get_current_user, get_audit_logger
from ..models.user import User
from ..utils.responses import success_response, auth_error_response

router = APIRouter()

def session_payload(issued: IssuedSession) -> dict:
    return AuthSession(
        user=UserResponse.model_validate(issued.user),
        token=issued.token,
        device_id=issued.device_id,
    ).model_dump()

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Register a new user and log in the requesting device"""
    auth_service = AuthService(db, audit)
    result = await auth_service.register_user(user_data, RequestContext.from_request(request))
    if not result.ok:
        return auth_error_response(result.error)
    return success_response(session_payload(result.value), "User registered successfully", status.HTTP_201_CREATED)

@router.post("/login")
async def login(
    login_data: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Login user on a device and return a token bound to that device"""
    auth_service = AuthService(db, audit)
    result = await auth_service.authenticate_user(login_data, RequestContext.from_request(request))
    if not result.ok:
        return auth_error_response(result.error)
    return success_response(session_payload(result.value), "Login successful")

@router.post("/logout")
async def logout(
    request: Request,
    logout_data: Optional[LogoutRequest] = None,
    session: Optional[AuthenticatedSession] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger)
):
    """Logout the given device (defaults to the device of the presented token)"""
    auth_service = AuthService(db, audit)
    device_id = logout_data.device_id if logout_data else None
    result = await auth_service.logout_user(session, device_id, RequestContext.from_request(request))
    if not result.ok:
        return auth_error_response(result.error)
    return success_response([], "Logged out successfully")

@router.get("/me")
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile with its device registry"""
    return success_response(UserResponse.model_validate(current_user).model_dump())

@router.get("/devices")
async def list_devices(
    logged_in: Optional[bool] = Query(None, description="Only devices in this login state"),
    current_user: User = Depends(get_current_user)
):
    """List the devices registered to the current user"""
    devices = [
        DeviceRegistrationResponse.model_validate(device).model_dump()
        for device in current_user.devices
        if logged_in is None or device.logged_in == logged_in
    ]
    return success_response(devices)

@router.get("/push-tokens")
async def list_push_tokens(current_user: User = Depends(get_current_user)):
    """Push tokens of the devices currently logged in"""
    return success_response(current_user.active_push_tokens())
