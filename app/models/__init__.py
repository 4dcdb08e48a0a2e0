from app.models.user import User, AccessToken
from app.models.device import DeviceRegistration, DEFAULT_DEVICE_TYPE

__all__ = [
    "User", "AccessToken",
    "DeviceRegistration", "DEFAULT_DEVICE_TYPE",
]
