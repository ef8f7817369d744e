"""
Email view page.

Opening marks the email read. From here the user can reply or forward
(the compose page is prefilled with the quoted original), delete, star,
label, and have the email read aloud.
"""

from __future__ import annotations

import logging
from datetime import datetime

from voxmail.client.errors import NetworkFailure, VoxmailError
from voxmail.client.pages.base import Page
from voxmail.models import Email
from voxmail.voice.models import CommandResult, FocusContext, Intent, IntentType, PageName, Route

logger = logging.getLogger(__name__)


def sender_name(address: str) -> str:
    """Spoken name for an address: local part with dots as spaces."""
    return address.split("@", 1)[0].replace(".", " ")


def format_date(value: datetime | None) -> str:
    if value is None:
        return "Unknown date"
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value:%M:%S} {value:%p}"


def _quoted(email: Email, heading: str) -> str:
    return (
        f"\n\n-------- {heading} --------\n"
        f"From: {email.sender}\n"
        f"Date: {format_date(email.created_at)}\n"
        f"Subject: {email.subject}\n\n"
        f"{email.body}"
    )


def reply_prefill(email: Email) -> dict[str, str]:
    return {
        "to": email.sender,
        "subject": f"Re: {email.subject}",
        "body": _quoted(email, "Original Message"),
    }


def forward_prefill(email: Email) -> dict[str, str]:
    return {
        "subject": f"Fwd: {email.subject}",
        "body": _quoted(email, "Forwarded Message"),
    }


class EmailViewPage(Page):
    """One email."""

    page = PageName.EMAIL_VIEW
    deactivation_message = "Voice commands disabled"

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.email_id: str = str(self.params.get("email_id", ""))
        self.email: Email | None = None
        self.loading = False
        self.reading = False

    def activation_message(self, focus: FocusContext) -> str:
        return (
            "Voice commands enabled. You can say commands like reply, forward, "
            "delete, read aloud, or go back."
        )

    async def load(self) -> None:
        self.loading = True
        try:
            email = await self.context.store.open(self.email_id)
        except NetworkFailure as e:
            if self.mounted:
                self.show_error("Email not found" if e.status_code == 404 else "Failed to load email")
            return
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to load email")
            return
        finally:
            self.loading = False
        if self.mounted:
            self.email = email

    def unmount(self) -> None:
        self.reading = False
        super().unmount()

    # =========================================================================
    # Button operations
    # =========================================================================

    async def reply(self) -> bool:
        if self.email is None:
            return False
        await self.navigate(Route.COMPOSE.value, reply_prefill(self.email))
        return True

    async def forward(self) -> bool:
        if self.email is None:
            return False
        await self.navigate(Route.COMPOSE.value, forward_prefill(self.email))
        return True

    async def delete(self) -> bool:
        if self.email is None:
            return False
        try:
            await self.context.store.soft_delete(self.email.id)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to delete email")
            return False
        if not self.mounted:
            return True
        self.announce("Email deleted")
        await self.navigate(Route.INBOX.value)
        return True

    async def toggle_star(self) -> bool:
        if self.email is None:
            return False
        try:
            self.email = await self.context.store.toggle_star(self.email.id)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to star email")
            return False
        self.announce("Email starred" if self.email.is_starred else "Email unstarred")
        return True

    async def set_labels(self, labels: list[str]) -> bool:
        if self.email is None:
            return False
        try:
            updated = await self.context.store.set_labels(self.email.id, labels)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to update labels")
            return False
        if self.mounted:
            self.email = updated
        return True

    def read_aloud(self) -> bool:
        """Start reading, or stop if already reading (the button toggles)."""
        if self.email is None:
            return False
        if self.reading:
            self.stop_reading()
            return False
        self.reading = True
        text = (
            f"Email from {sender_name(self.email.sender)}. "
            f"Subject: {self.email.subject}. {self.email.body}"
        )
        return self.voice.say(text, force=True)

    def stop_reading(self) -> None:
        self.reading = False
        self.voice.stop_speaking()

    # =========================================================================
    # Voice handlers
    # =========================================================================

    def register_handlers(self) -> None:
        self.router.register(IntentType.ACTION, self._on_reply, name="reply")
        self.router.register(IntentType.ACTION, self._on_forward, name="forward")
        self.router.register(IntentType.ACTION, self._on_delete, name="delete")
        self.router.register(IntentType.ACTION, self._on_star, name="star")
        self.router.register(IntentType.ACTION, self._on_read, name="read_aloud")
        self.router.register(IntentType.ACTION, self._on_stop_reading, name="stop_reading")
        self.router.register(IntentType.ACTION, self._on_label, name="label")
        self.router.register(IntentType.ACTION, self._on_clear_labels, name="clear_labels")

    def _no_email(self) -> CommandResult:
        return CommandResult(success=False, message="No email is open", error="no_email")

    async def _on_reply(self, intent: Intent) -> CommandResult:
        return CommandResult(success=True) if await self.reply() else self._no_email()

    async def _on_forward(self, intent: Intent) -> CommandResult:
        return CommandResult(success=True) if await self.forward() else self._no_email()

    async def _on_delete(self, intent: Intent) -> CommandResult:
        if self.email is None:
            return self._no_email()
        return CommandResult(success=await self.delete())

    async def _on_star(self, intent: Intent) -> CommandResult:
        if self.email is None:
            return self._no_email()
        wanted = {"on": True, "off": False}.get(intent.value or "")
        if wanted is not None and wanted == self.email.is_starred:
            state = "starred" if wanted else "not starred"
            return CommandResult(success=True, message=f"Email is already {state}")
        return CommandResult(success=await self.toggle_star())

    async def _on_read(self, intent: Intent) -> CommandResult:
        if self.email is None:
            return self._no_email()
        # Spoken "read" always restarts from the top
        self.reading = False
        self.read_aloud()
        return CommandResult(success=True)

    async def _on_stop_reading(self, intent: Intent) -> CommandResult:
        self.stop_reading()
        return CommandResult(success=True)

    async def _on_label(self, intent: Intent) -> CommandResult:
        if self.email is None:
            return self._no_email()
        label = (intent.value or "").strip()
        labels = [*self.email.labels, label] if label not in self.email.labels else self.email.labels
        if not await self.set_labels(labels):
            return CommandResult(success=False)
        return CommandResult(success=True, message=f"Labeled as {label}")

    async def _on_clear_labels(self, intent: Intent) -> CommandResult:
        if self.email is None:
            return self._no_email()
        if not await self.set_labels([]):
            return CommandResult(success=False)
        return CommandResult(success=True, message="Labels removed")
