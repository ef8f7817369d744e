"""Voice interface data models.

Defines focus contexts, intents and result types for the voice command
pipeline:
    Transcript → Intent → page handler → CommandResult → spoken reply
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class FocusContext(str, Enum):
    """Which page or field currently receives voice dictation."""

    # Page identities
    INBOX = "inbox"
    COMPOSE = "compose"
    EMAIL_VIEW = "email_view"
    SETTINGS = "settings"
    LOGIN = "login"
    REGISTER = "register"

    # Fields
    RECIPIENT = "recipient"
    SUBJECT = "subject"
    BODY = "body"
    SEARCH = "search"
    NAME = "name"
    EMAIL = "email"
    PASSWORD = "password"

    @property
    def is_field(self) -> bool:
        return self in FIELD_KINDS

    @property
    def kind(self) -> FieldKind | None:
        return FIELD_KINDS.get(self)


class PageName(str, Enum):
    """Mountable pages. Each page identity is also a FocusContext."""

    INBOX = "inbox"
    COMPOSE = "compose"
    EMAIL_VIEW = "email_view"
    SETTINGS = "settings"
    LOGIN = "login"
    REGISTER = "register"

    @property
    def focus(self) -> FocusContext:
        return FocusContext(self.value)


class FieldKind(str, Enum):
    """Dictation policy of a field."""

    EMAIL_ADDRESS = "email_address"  # spoken punctuation, no whitespace, replace
    SINGLE_LINE = "single_line"      # replace
    MULTI_LINE = "multi_line"        # append with a space


FIELD_KINDS: dict[FocusContext, FieldKind] = {
    FocusContext.RECIPIENT: FieldKind.EMAIL_ADDRESS,
    FocusContext.SUBJECT: FieldKind.SINGLE_LINE,
    FocusContext.BODY: FieldKind.MULTI_LINE,
    FocusContext.SEARCH: FieldKind.SINGLE_LINE,
    FocusContext.NAME: FieldKind.SINGLE_LINE,
    FocusContext.EMAIL: FieldKind.EMAIL_ADDRESS,
    FocusContext.PASSWORD: FieldKind.SINGLE_LINE,
}

# Dictated values never written to logs or voice history
SECRET_FIELDS = frozenset({FocusContext.PASSWORD})
REDACTED = "[redacted]"


class IntentType(str, Enum):
    """Interpreted voice intent variants."""

    NAVIGATE = "navigate"
    SET_FIELD = "set_field"
    APPEND_FIELD = "append_field"
    CLEAR_FIELD = "clear_field"
    SUBMIT = "submit"
    TOGGLE_STATE = "toggle_state"
    SPEAK = "speak"
    FOCUS = "focus"
    CONFIRM = "confirm"
    ACTION = "action"
    NONE = "none"


class VoiceState(str, Enum):
    """Voice session controller states."""

    IDLE = "idle"
    LISTENING = "listening"


@dataclass(frozen=True)
class Intent:
    """One interpreted command. Produced once per final transcript.

    Only the fields relevant to ``type`` are set:
        NAVIGATE      route
        SET_FIELD     assignments ((field, value), ...)
        APPEND_FIELD  field, value
        CLEAR_FIELD   field (None means every field on the page)
        TOGGLE_STATE  name, state (True/False, None flips)
        SPEAK         text, name (confirmation armed by the prompt)
        FOCUS         field
        CONFIRM       state (True = yes)
        ACTION        name, value
    """

    type: IntentType
    route: str | None = None
    field: FocusContext | None = None
    value: str | None = None
    name: str | None = None
    text: str | None = None
    state: bool | None = None
    assignments: tuple[tuple[FocusContext, str], ...] = ()
    transcript: str = dataclasses.field(default="", compare=False)

    @classmethod
    def navigate(cls, route: str) -> Intent:
        return cls(IntentType.NAVIGATE, route=route)

    @classmethod
    def set_field(cls, target: FocusContext, value: str) -> Intent:
        return cls(IntentType.SET_FIELD, assignments=((target, value),))

    @classmethod
    def set_fields(cls, *assignments: tuple[FocusContext, str]) -> Intent:
        return cls(IntentType.SET_FIELD, assignments=tuple(assignments))

    @classmethod
    def append_field(cls, target: FocusContext, text: str) -> Intent:
        return cls(IntentType.APPEND_FIELD, field=target, value=text)

    @classmethod
    def clear_field(cls, target: FocusContext | None = None) -> Intent:
        return cls(IntentType.CLEAR_FIELD, field=target)

    @classmethod
    def submit(cls) -> Intent:
        return cls(IntentType.SUBMIT)

    @classmethod
    def toggle(cls, name: str, state: bool | None = None) -> Intent:
        return cls(IntentType.TOGGLE_STATE, name=name, state=state)

    @classmethod
    def speak(cls, text: str, confirmation: str | None = None) -> Intent:
        return cls(IntentType.SPEAK, text=text, name=confirmation)

    @classmethod
    def focus(cls, target: FocusContext) -> Intent:
        return cls(IntentType.FOCUS, field=target)

    @classmethod
    def confirm(cls, accepted: bool) -> Intent:
        return cls(IntentType.CONFIRM, state=accepted)

    @classmethod
    def action(cls, name: str, value: str | None = None) -> Intent:
        return cls(IntentType.ACTION, name=name, value=value)

    @classmethod
    def none(cls) -> Intent:
        return cls(IntentType.NONE)

    @property
    def clears_all(self) -> bool:
        return self.type == IntentType.CLEAR_FIELD and self.field is None

    @property
    def sensitive(self) -> bool:
        """True when the intent writes a secret (a spoken password)."""
        if self.type == IntentType.APPEND_FIELD:
            return self.field in SECRET_FIELDS
        return any(target in SECRET_FIELDS for target, _ in self.assignments)

    def redacted(self) -> Intent:
        """Copy safe to log or store: secret values and the transcript masked."""
        if not self.sensitive:
            return self
        return replace(
            self,
            value=REDACTED if self.field in SECRET_FIELDS else self.value,
            assignments=tuple(
                (target, REDACTED if target in SECRET_FIELDS else value)
                for target, value in self.assignments
            ),
            transcript=REDACTED,
        )

    def with_transcript(self, transcript: str) -> Intent:
        return replace(self, transcript=transcript)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.route is not None:
            data["route"] = self.route
        if self.field is not None:
            data["field"] = self.field.value
        if self.value is not None:
            data["value"] = self.value
        if self.name is not None:
            data["name"] = self.name
        if self.text is not None:
            data["text"] = self.text
        if self.state is not None:
            data["state"] = self.state
        if self.assignments:
            data["assignments"] = [
                {"field": target.value, "value": value} for target, value in self.assignments
            ]
        if self.type == IntentType.CLEAR_FIELD and self.field is None:
            data["all"] = True
        data["transcript"] = self.transcript
        return data


@dataclass
class TranscriptionResult:
    """Result from speech recognition."""

    transcript: str
    confidence: float = 0.0
    source: str = "web_speech"
    language: str = "en-US"
    is_final: bool = True
    alternatives: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "confidence": self.confidence,
            "source": self.source,
            "language": self.language,
            "is_final": self.is_final,
            "alternatives": self.alternatives,
        }


@dataclass
class CommandResult:
    """Result from a page handling an intent. ``message`` is spoken."""

    success: bool
    message: str | None = None
    intent: IntentType = IntentType.NONE
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "intent": self.intent.value,
            "data": self.data,
            "error": self.error,
        }


class Route(str, Enum):
    """Client routes reachable by navigation."""

    INBOX = "/"
    COMPOSE = "/compose"
    STARRED = "/starred"
    SENT = "/sent"
    SETTINGS = "/settings"
    LOGIN = "/login"
    REGISTER = "/register"

    @staticmethod
    def email(email_id: str) -> str:
        return f"/email/{email_id}"


PUBLIC_ROUTES = frozenset({Route.LOGIN.value, Route.REGISTER.value})
