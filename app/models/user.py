from sqlalchemy import Column, ForeignKey, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base
import uuid


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(11), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    devices = relationship(
        "DeviceRegistration",
        back_populates="user",
        order_by="DeviceRegistration.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    access_tokens = relationship("AccessToken", back_populates="user", cascade="all, delete-orphan")

    def find_device(self, device_id: str):
        """Return the registration whose device_id matches exactly, or None."""
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    def active_push_tokens(self):
        return [d.push_token for d in self.devices if d.logged_in and d.push_token]


class AccessToken(Base):
    __tablename__ = "access_tokens"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))  # JWT ID
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)  # token label = device_id
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="access_tokens")
