from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from .user import utcnow

DEFAULT_DEVICE_TYPE = "unknown"

class DeviceRegistration(Base):
    __tablename__ = "device_registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_device_registrations_user_device"),
    )

    # Autoincrement id keeps the registry in insertion order
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(255), nullable=False)
    device_type = Column(String(50), nullable=False, default=DEFAULT_DEVICE_TYPE)
    push_token = Column(String(500), nullable=True)  # FCM token
    logged_in = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="devices")
