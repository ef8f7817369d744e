"""
Compose page.

Recipient, subject, body and attachments, prefilled from navigation
state for replies and forwards. submit() is the single send path for
the Send button and the spoken "send": required fields are checked in
order (recipient, subject, body) and each failure has its own spoken
prompt. After a successful send the page returns to the inbox once
``redirect_delay`` has passed.
"""

from __future__ import annotations

import asyncio
import logging

from voxmail.client.api import AttachmentUpload
from voxmail.client.errors import ValidationFailure, VoxmailError
from voxmail.client.pages.base import Page
from voxmail.voice.models import CommandResult, FocusContext, Intent, IntentType, PageName, Route

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    FocusContext.RECIPIENT: "recipient",
    FocusContext.SUBJECT: "subject",
    FocusContext.BODY: "body",
}

PREFILL_KEYS = {
    "to": FocusContext.RECIPIENT,
    "subject": FocusContext.SUBJECT,
    "body": FocusContext.BODY,
}

SEND_FAILED = "Failed to send email. Please try again."


def _log_redirect_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Return to inbox after send failed: {exc}", exc_info=exc)


class ComposePage(Page):
    """New email, reply or forward."""

    page = PageName.COMPOSE
    fields = (FocusContext.RECIPIENT, FocusContext.SUBJECT, FocusContext.BODY)
    default_focus = FocusContext.RECIPIENT
    deactivation_message = "Voice recognition disabled"

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.attachments: list[AttachmentUpload] = []
        self.sending = False
        self.redirect_task: asyncio.Task | None = None

    def activation_message(self, focus: FocusContext) -> str:
        label = FIELD_LABELS.get(focus, "recipient")
        return f"Voice recognition enabled. You're currently focused on the {label} field."

    @property
    def to(self) -> str:
        return self.get_value(FocusContext.RECIPIENT)

    @property
    def subject(self) -> str:
        return self.get_value(FocusContext.SUBJECT)

    @property
    def body(self) -> str:
        return self.get_value(FocusContext.BODY)

    async def load(self) -> None:
        prefill = self.context.navigator.take_state()
        for key, target in PREFILL_KEYS.items():
            value = prefill.get(key)
            if isinstance(value, str):
                self.set_value(target, value)

    def unmount(self) -> None:
        task = self.redirect_task
        # The redirect itself unmounts this page; it must not cancel itself
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        super().unmount()

    # =========================================================================
    # Attachments
    # =========================================================================

    def add_attachments(self, files: list[AttachmentUpload]) -> None:
        if not files:
            return
        self.attachments.extend(files)
        count = len(files)
        self.announce(f"{count} file{'s' if count > 1 else ''} attached")

    def remove_attachment(self, index: int) -> None:
        del self.attachments[index]
        self.announce("Attachment removed")

    def clear_form(self) -> None:
        """The Clear button: fields and attachments."""
        self.clear_all()
        self.attachments.clear()
        self.error = None
        self.announce("Form cleared")

    # =========================================================================
    # Submission
    # =========================================================================

    def validate(self) -> ValidationFailure | None:
        if not self.to.strip():
            return ValidationFailure(
                "Recipient email is required",
                "Please provide a recipient email address",
                field=FocusContext.RECIPIENT.value,
            )
        if not self.subject.strip():
            return ValidationFailure(
                "Subject is required",
                "Please provide a subject for your email",
                field=FocusContext.SUBJECT.value,
            )
        if not self.body.strip():
            return ValidationFailure(
                "Email body is required",
                "Please write some content for your email",
                field=FocusContext.BODY.value,
            )
        return None

    async def submit(self) -> CommandResult | None:
        if self.sending:
            return CommandResult(success=False, error="already_sending")

        failure = self.validate()
        if failure is not None:
            self.show_error(failure.message, failure.spoken)
            return CommandResult(success=False, error=failure.code, data={"field": failure.field})

        self.error = None
        self.sending = True
        try:
            sent = await self.context.store.send(
                self.to.strip(), self.subject, self.body, list(self.attachments)
            )
        except VoxmailError as e:
            logger.warning(f"Send failed: {e}")
            if self.mounted:
                self.show_error(SEND_FAILED)
            return CommandResult(success=False, error=e.code)
        finally:
            self.sending = False

        if not self.mounted:
            return None

        self.show_success("Email sent successfully", "Your email has been sent successfully")
        self.clear_all()
        self.attachments.clear()
        self.redirect_task = asyncio.create_task(self._return_to_inbox())
        self.redirect_task.add_done_callback(_log_redirect_failure)
        return CommandResult(success=True, data={"email_id": sent.id})

    async def _return_to_inbox(self) -> None:
        await asyncio.sleep(self.context.redirect_delay)
        if self.mounted:
            await self.navigate(Route.INBOX.value)

    # =========================================================================
    # Voice handlers
    # =========================================================================

    def register_handlers(self) -> None:
        self.router.register(IntentType.ACTION, self._on_clear_attachments, name="clear_attachments")

    async def _on_clear_attachments(self, intent: Intent) -> CommandResult:
        self.attachments.clear()
        return CommandResult(success=True, message="Attachments removed")
