"""
Error kinds returned by the authentication operations.

Operations in ``app.services.auth_service`` do not raise for expected
failures; they return an ``AuthResult`` that carries either a value or an
``AuthError``. Callers branch on ``result.ok`` and map ``error.status_code``
to the HTTP response.
"""
from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, TypeVar
import enum

from fastapi import status

T = TypeVar("T")


class AuthErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PERSISTENCE = "persistence"


STATUS_CODES = {
    AuthErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AuthErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass
class AuthError:
    kind: AuthErrorKind
    message: str
    errors: Optional[Dict[str, List[str]]] = None

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @classmethod
    def validation(cls, errors: Dict[str, List[str]], message: str = "Validation failed") -> "AuthError":
        return cls(AuthErrorKind.VALIDATION, message, errors)

    @classmethod
    def authentication(cls, message: str) -> "AuthError":
        return cls(AuthErrorKind.AUTHENTICATION, message)

    @classmethod
    def persistence(cls, message: str) -> "AuthError":
        return cls(AuthErrorKind.PERSISTENCE, message)


@dataclass
class AuthResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[AuthError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "AuthResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> "AuthResult[T]":
        return cls(error=error)
