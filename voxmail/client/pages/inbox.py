"""
Inbox page: the inbox, starred and sent folders.

Loads the folder through the shared EmailStore, filters it with the
search box and acts on emails by id (buttons) or by spoken position
("open the second email", "delete email 3", "star the last one").
"""

from __future__ import annotations

import logging

from voxmail.client.errors import VoxmailError
from voxmail.client.pages.base import Page
from voxmail.models import Email, Folder
from voxmail.voice.models import CommandResult, FocusContext, Intent, IntentType, PageName, Route
from voxmail.voice.parser.entity_extractor import resolve_position

logger = logging.getLogger(__name__)

FOLDER_NAMES = {
    Folder.INBOX: "inbox",
    Folder.STARRED: "starred emails",
    Folder.SENT: "sent emails",
}


class InboxPage(Page):
    """Email list for one folder."""

    page = PageName.INBOX
    fields = (FocusContext.SEARCH,)

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.folder = Folder(self.params.get("folder", Folder.INBOX))
        self.loading = False
        self.status_message = ""

    @property
    def search(self) -> str:
        return self.get_value(FocusContext.SEARCH)

    @property
    def emails(self) -> list[Email]:
        """What the list shows: the folder filtered by the search box."""
        return self.context.store.list(self.search or None)

    def summary(self) -> str:
        emails = self.context.store.list()
        if self.folder == Folder.INBOX:
            unread = sum(1 for e in emails if not e.is_read)
            return f"You have {len(emails)} emails in your inbox. {unread} are unread."
        return f"You have {len(emails)} {FOLDER_NAMES[self.folder]}."

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            await self.context.store.refresh(self.folder)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to load emails")
            return
        finally:
            self.loading = False
        if not self.mounted:
            return
        emails = self.context.store.list()
        unread = sum(1 for e in emails if not e.is_read)
        self.status_message = f"Inbox loaded. You have {len(emails)} emails, {unread} unread."
        self.announce(self.summary())

    # =========================================================================
    # Button operations
    # =========================================================================

    def set_search(self, text: str) -> None:
        self.set_value(FocusContext.SEARCH, text)

    async def open_email(self, email_id: str) -> None:
        await self.navigate(Route.email(email_id))

    async def toggle_star(self, email_id: str) -> bool:
        """Returns True when the star change was persisted."""
        try:
            email = await self.context.store.toggle_star(email_id)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to star email")
            return False
        if self.mounted:
            self.announce("Email starred" if email.is_starred else "Email unstarred")
        return True

    async def delete_email(self, email_id: str) -> bool:
        try:
            await self.context.store.soft_delete(email_id)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(e.message or "Failed to delete email")
            return False
        if self.mounted:
            self.announce("Email deleted")
        return True

    # =========================================================================
    # Voice handlers
    # =========================================================================

    def register_handlers(self) -> None:
        self.router.register(IntentType.ACTION, self._on_open, name="open_email")
        self.router.register(IntentType.ACTION, self._on_star, name="star_email")
        self.router.register(IntentType.ACTION, self._on_delete, name="delete_email")
        self.router.register(IntentType.ACTION, self._on_summary, name="summary")
        self.router.register(IntentType.ACTION, self._on_refresh, name="refresh")

    def _email_at(self, intent: Intent) -> Email | None:
        emails = self.emails
        try:
            position = int(intent.value or "")
        except ValueError:
            return None
        index = resolve_position(position, len(emails))
        return emails[index] if index is not None else None

    def _missing(self, intent: Intent) -> CommandResult:
        if not self.emails:
            return CommandResult(success=False, message="There are no emails here", error="empty")
        return CommandResult(
            success=False,
            message=f"There is no email number {intent.value}. You have {len(self.emails)} emails.",
            error="out_of_range",
        )

    async def _on_open(self, intent: Intent) -> CommandResult:
        email = self._email_at(intent)
        if email is None:
            return self._missing(intent)
        await self.open_email(email.id)
        return CommandResult(success=True)

    async def _on_star(self, intent: Intent) -> CommandResult:
        email = self._email_at(intent)
        if email is None:
            return self._missing(intent)
        return CommandResult(success=await self.toggle_star(email.id))

    async def _on_delete(self, intent: Intent) -> CommandResult:
        email = self._email_at(intent)
        if email is None:
            return self._missing(intent)
        return CommandResult(success=await self.delete_email(email.id))

    async def _on_summary(self, intent: Intent) -> CommandResult:
        return CommandResult(success=True, message=self.summary())

    async def _on_refresh(self, intent: Intent) -> CommandResult:
        await self.load()
        return CommandResult(success=self.error is None)

    async def _on_set_field(self, intent: Intent) -> CommandResult:
        result = await super()._on_set_field(intent)
        if self.search:
            count = len(self.emails)
            result.message = f"{count} {'email matches' if count == 1 else 'emails match'} {self.search}"
        return result
