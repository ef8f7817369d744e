"""
Register page.

The confirmation field has no voice name: a password given by voice is
copied into it, since a spoken password cannot be mistyped twice.
"""

from __future__ import annotations

import logging

from voxmail.client.errors import ValidationFailure, VoxmailError
from voxmail.client.pages.base import Page
from voxmail.client.pages.login import assignment_feedback
from voxmail.voice.models import CommandResult, FocusContext, Intent, PageName, Route

logger = logging.getLogger(__name__)

MISMATCH = "Passwords do not match"
MISMATCH_SPOKEN = "Passwords do not match. Please try again."
WELCOME = "Registration successful. Welcome to Voice Email!"
REGISTER_FAILED_SPOKEN = "Registration failed. Please try again."


class RegisterPage(Page):
    page = PageName.REGISTER
    fields = (FocusContext.NAME, FocusContext.EMAIL, FocusContext.PASSWORD)
    default_focus = FocusContext.NAME

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.confirm_password = ""
        self.submitting = False

    def activation_message(self, focus: FocusContext) -> str:
        return (
            'Voice commands activated. Say "name is", "email is" and "password is" '
            'to fill in the form, then say "register".'
        )

    def assignment_message(self, target: FocusContext, value: str) -> str | None:
        return assignment_feedback(target, value)

    @property
    def name(self) -> str:
        return self.get_value(FocusContext.NAME)

    @property
    def email(self) -> str:
        return self.get_value(FocusContext.EMAIL)

    @property
    def password(self) -> str:
        return self.get_value(FocusContext.PASSWORD)

    def clear_all(self) -> None:
        super().clear_all()
        self.confirm_password = ""

    async def _on_set_field(self, intent: Intent) -> CommandResult:
        result = await super()._on_set_field(intent)
        for target, value in intent.assignments:
            if target == FocusContext.PASSWORD:
                self.confirm_password = value
        return result

    async def submit(self) -> CommandResult:
        if self.submitting:
            return CommandResult(success=False, error="already_submitting")
        if not self.name.strip() or not self.email.strip() or not self.password:
            self.show_error("Name, email and password are required")
            return CommandResult(success=False, error=ValidationFailure.code)
        if self.password != self.confirm_password:
            self.show_error(MISMATCH, MISMATCH_SPOKEN)
            return CommandResult(success=False, error=ValidationFailure.code)

        self.submitting = True
        try:
            await self.context.auth.register(self.name.strip(), self.email.strip(), self.password)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(self.context.auth.error or e.message, REGISTER_FAILED_SPOKEN)
            return CommandResult(success=False, error=e.code)
        finally:
            self.submitting = False

        if not self.mounted:
            return CommandResult(success=True)
        self.show_success(WELCOME)
        await self.navigate(Route.INBOX.value)
        return CommandResult(success=True)
