from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import uuid

from app.models import User, DeviceRegistration, DEFAULT_DEVICE_TYPE

# User store lookups
async def get_user_by_phone(db: AsyncSession, phone: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.phone == phone))
    return result.scalars().first()


def create_user(
    db: AsyncSession,
    name: str,
    phone: str,
    password_hash: str,
    devices: List[DeviceRegistration],
) -> User:
    """Stage a new user with its initial device registry. The caller commits."""
    user = User(
        id=str(uuid.uuid4()),
        name=name,
        phone=phone,
        password_hash=password_hash,
        devices=devices,
    )
    db.add(user)
    return user


def upsert_device(
    user: User,
    device_id: str,
    push_token: Optional[str],
    device_type: Optional[str] = None,
) -> DeviceRegistration:
    """Mark ``device_id`` logged in on ``user``, updating its entry or appending a new one.

    Matching is by exact device_id only. An existing entry keeps its
    device_type unless a new one is given; the push token is always replaced.
    """
    device = user.find_device(device_id)
    if device is not None:
        device.push_token = push_token
        if device_type:
            device.device_type = device_type
        device.logged_in = True
        return device

    device = DeviceRegistration(
        device_id=device_id,
        device_type=device_type or DEFAULT_DEVICE_TYPE,
        push_token=push_token,
        logged_in=True,
    )
    user.devices.append(device)
    return device


def mark_device_logged_out(user: User, device_id: str) -> Optional[DeviceRegistration]:
    device = user.find_device(device_id)
    if device is not None:
        device.logged_in = False
    return device
