from pydantic import BaseModel, Field
from typing import Optional

from .user import UserResponse

PHONE_PATTERN = r"^01[0-9]{9}$"

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=11, max_length=11, pattern=PHONE_PATTERN, description="11 digits starting with 01")
    password: str = Field(..., min_length=4, description="Password must be at least 4 characters")
    device_id: Optional[str] = Field(None, max_length=255, description="Generated when omitted")
    device_type: Optional[str] = Field(None, max_length=50)
    fcm_token: Optional[str] = Field(None, max_length=500)

class UserLogin(BaseModel):
    phone: str = Field(..., min_length=11, max_length=11, pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=1)
    device_id: Optional[str] = Field(None, max_length=255)
    device_type: Optional[str] = Field(None, max_length=50)
    fcm_token: Optional[str] = Field(None, max_length=500)

class LogoutRequest(BaseModel):
    device_id: Optional[str] = Field(None, max_length=255, description="Defaults to the device of the presented token")

class AuthSession(BaseModel):
    user: UserResponse
    token: str
    device_id: str
