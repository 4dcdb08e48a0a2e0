from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

# Entry of a user's device registry; wire names follow the mobile clients ("fcm_token")
class DeviceRegistrationResponse(BaseModel):
    device_id: str
    device_type: str
    fcm_token: Optional[str] = Field(None, validation_alias="push_token")
    logged_in: bool

    class Config:
        from_attributes = True

class UserResponse(BaseModel):
    id: str
    name: str
    phone: str
    fcm_tokens: List[DeviceRegistrationResponse] = Field(default_factory=list, validation_alias="devices")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
