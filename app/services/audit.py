# app/services/audit.py
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from fastapi import Request

logger = logging.getLogger("app.audit")


@dataclass
class RequestContext:
    """Request details recorded alongside authentication events."""
    ip: Optional[str] = None
    host: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        return cls(
            ip=request.client.host if request.client else None,
            host=request.url.hostname,
            user_agent=request.headers.get("user-agent"),
        )


class AuditLogger:
    """Audit sink for authentication events, written to the ``app.audit`` logger."""

    def __init__(self, sink: logging.Logger = logger):
        self.sink = sink

    def log(self, level: int, message: str, fields: Dict[str, Any]):
        rendered = ", ".join(f"{key}={value}" for key, value in fields.items())
        self.sink.log(level, f"{message} [{rendered}]", extra={"audit": dict(fields)})

    def auth_activity(self, user, action: str, context: RequestContext):
        self.log(logging.INFO, f"{action} Success Through API", {
            "user_id": user.id,
            "name": user.name,
            "ip": context.ip,
            "host": context.host,
            "user_agent": context.user_agent,
        })

    def logout(self, user, device_id: str, context: RequestContext):
        self.log(logging.INFO, "Logout Success", {
            "user_id": user.id,
            "phone": user.phone,
            "device_id": device_id,
            "ip": context.ip,
        })


audit_logger = AuditLogger()
