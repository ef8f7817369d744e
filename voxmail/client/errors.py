"""Client error taxonomy.

Nothing here is fatal: pages catch these, show a dismissible banner,
speak the message when voice is active and roll back optimistic state.
"""

from __future__ import annotations

from typing import Any


class VoxmailError(Exception):
    """Base class for client-side failures."""

    code = "VOXMAIL_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class CapabilityUnavailable(VoxmailError):
    """Speech recognition or synthesis is missing on this platform."""

    code = "CAPABILITY_UNAVAILABLE"


class NetworkFailure(VoxmailError):
    """An API call failed (transport error or non-success response)."""

    code = "NETWORK_FAILURE"


class AuthFailure(VoxmailError):
    """The server rejected the session (401)."""

    code = "AUTH_FAILURE"


class ValidationFailure(VoxmailError):
    """A form is missing required input. ``spoken`` is the voice prompt."""

    code = "VALIDATION_FAILURE"

    def __init__(self, message: str, spoken: str | None = None, *, field: str | None = None):
        super().__init__(message)
        self.spoken = spoken or message
        self.field = field


__all__ = [
    "AuthFailure",
    "CapabilityUnavailable",
    "NetworkFailure",
    "ValidationFailure",
    "VoxmailError",
]
