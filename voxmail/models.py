"""
Shared pydantic models for the VoxMail REST API.

Both the FastAPI backend and the client library use these types, so the
JSON wire format is defined once. Field names are snake_case in Python
and camelCase on the wire (``isRead``, ``fontSize``); the email
addresses keep the ``from`` / ``to`` keys.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model: camelCase aliases, populate by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Enums
# =============================================================================


class EmailStatus(str, Enum):
    """Lifecycle status of an email record."""

    DRAFT = "draft"
    SENT = "sent"
    RECEIVED = "received"
    DELETED = "deleted"


class Folder(str, Enum):
    """Mailbox views served by GET /api/emails."""

    INBOX = "inbox"
    STARRED = "starred"
    SENT = "sent"


class FontSize(str, Enum):
    """Font size categories for the display layer."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


# =============================================================================
# Users
# =============================================================================

MIN_VOICE_SPEED = 0.5
MAX_VOICE_SPEED = 2.0
DEFAULT_VOICE_SPEED = 1.0


class UserPreferences(WireModel):
    """Accessibility preferences stored on the user record."""

    font_size: FontSize = Field(default=FontSize.MEDIUM, description="Font size category")
    high_contrast: bool = Field(default=False, description="High contrast display")
    voice_speed: float = Field(
        default=DEFAULT_VOICE_SPEED,
        ge=MIN_VOICE_SPEED,
        le=MAX_VOICE_SPEED,
        description="Speech rate multiplier",
    )


class UserProfile(WireModel):
    """Authenticated user as returned by /api/auth/me."""

    id: str
    name: str
    email: str
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    created_at: datetime | None = None


class AuthResponse(WireModel):
    """Login/register response: bearer token plus profile."""

    token: str
    user: UserProfile


class PreferencesPayload(WireModel):
    """Body and response of PUT /api/auth/preferences."""

    preferences: UserPreferences


# =============================================================================
# Emails
# =============================================================================


class Attachment(WireModel):
    """File attached to an email."""

    filename: str
    content_type: str = "application/octet-stream"
    size: int = 0


class Email(WireModel):
    """Email record. Lists and detail views share this shape."""

    id: str
    sender: str = Field(..., alias="from")
    recipient: str = Field(..., alias="to")
    subject: str = ""
    body: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
    status: EmailStatus = EmailStatus.RECEIVED
    is_read: bool = False
    is_starred: bool = False
    labels: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over sender, subject and body."""
        needle = query.strip().lower()
        if not needle:
            return True
        return any(needle in value.lower() for value in (self.sender, self.subject, self.body))


class LabelsPayload(WireModel):
    """Body of PUT /api/emails/{id}/labels."""

    labels: list[str] = Field(default_factory=list)


class MessageResponse(WireModel):
    """Plain acknowledgement body."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    code: str = Field(default="INTERNAL_ERROR", description="Error code")
    details: dict[str, Any] | None = Field(None, description="Additional details")


__all__ = [
    "Attachment",
    "AuthResponse",
    "DEFAULT_VOICE_SPEED",
    "Email",
    "EmailStatus",
    "ErrorResponse",
    "Folder",
    "FontSize",
    "LabelsPayload",
    "MAX_VOICE_SPEED",
    "MIN_VOICE_SPEED",
    "MessageResponse",
    "PreferencesPayload",
    "UserPreferences",
    "UserProfile",
    "WireModel",
]
