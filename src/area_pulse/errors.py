from __future__ import annotations

from dataclasses import dataclass


class AreaPulseError(Exception):
    """Base client exception."""


class InvalidCredentialsError(AreaPulseError):
    """Raised when the login endpoint rejects the credentials."""


class EmailTakenError(AreaPulseError):
    """Raised when registration hits an already registered email."""


class ValidationError(AreaPulseError):
    """Raised when the backend rejects a registration payload."""


class SessionExpiredError(AreaPulseError):
    """Raised when credentials cannot be recovered by a token refresh."""


class DecodingError(AreaPulseError):
    """Raised when an upstream payload does not match the expected schema."""


@dataclass
class ServerError(AreaPulseError):
    status_code: int
    body: str

    def __str__(self) -> str:
        return f"upstream returned status={self.status_code}"


class NetworkError(AreaPulseError):
    """Raised on transport failure or timeout."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
