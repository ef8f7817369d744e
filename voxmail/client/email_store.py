"""
Client-side email cache.

Holds the summaries of the current folder (newest first) and the open
email. Star and delete are applied optimistically and rolled back when
the server call fails; the failure is re-raised for the page to show.
Every write is last-write-wins against the server.
"""

from __future__ import annotations

import logging

from voxmail.client.api import ApiClient, AttachmentUpload
from voxmail.client.errors import VoxmailError
from voxmail.models import Email, EmailStatus, Folder

logger = logging.getLogger(__name__)


class EmailNotFound(VoxmailError):
    """The id is not in the cache."""

    code = "EMAIL_NOT_FOUND"


class EmailStore:
    """Summaries of one folder plus the open email."""

    def __init__(self, api: ApiClient):
        self._api = api
        self._emails: list[Email] = []
        self._deleted: set[str] = set()
        self.folder = Folder.INBOX
        self.current: Email | None = None
        self.loaded = False

    def reset(self) -> None:
        """Forget everything cached for the signed-out user."""
        self._emails = []
        self._deleted.clear()
        self.folder = Folder.INBOX
        self.current = None
        self.loaded = False

    async def on_signed_out(self, reason: str) -> None:
        self.reset()
        logger.debug(f"Email cache cleared ({reason})")

    def _visible(self, email: Email) -> bool:
        if email.id in self._deleted or email.status == EmailStatus.DELETED:
            return False
        if self.folder == Folder.STARRED:
            return email.is_starred
        return True

    def list(self, query: str | None = None) -> list[Email]:
        """Cached summaries, optionally filtered by sender/subject/body substring."""
        emails = [e for e in self._emails if self._visible(e)]
        if query:
            emails = [e for e in emails if e.matches(query)]
        return emails

    @property
    def unread_count(self) -> int:
        return sum(1 for e in self.list() if not e.is_read)

    def get(self, email_id: str) -> Email | None:
        for email in self._emails:
            if email.id == email_id:
                return email
        if self.current is not None and self.current.id == email_id:
            return self.current
        return None

    def _require(self, email_id: str) -> Email:
        email = self.get(email_id)
        if email is None or email_id in self._deleted:
            raise EmailNotFound("Email not found")
        return email

    def _merge(self, email: Email) -> Email:
        for i, cached in enumerate(self._emails):
            if cached.id == email.id:
                self._emails[i] = email
                break
        if self.current is not None and self.current.id == email.id:
            self.current = email
        return email

    # =========================================================================
    # Server operations
    # =========================================================================

    async def refresh(self, folder: Folder | None = None) -> list[Email]:
        """Reload a folder from the server."""
        if folder is not None:
            self.folder = Folder(folder)
        emails = await self._api.list_emails(self.folder)
        emails.sort(key=lambda e: e.created_at, reverse=True)
        self._emails = emails
        # Ids the server no longer lists need no local tombstone
        self._deleted &= {e.id for e in emails}
        self.loaded = True
        logger.debug(f"Loaded {len(emails)} emails from {self.folder.value}")
        return self.list()

    async def fetch(self, email_id: str) -> Email:
        """Load one email without marking it read."""
        email = await self._api.get_email(email_id)
        self.current = email
        return self._merge(email)

    async def open(self, email_id: str) -> Email:
        """Mark read on the server, merge locally and make it the open email."""
        email = await self._api.mark_read(email_id)
        self.current = email
        return self._merge(email)

    async def toggle_star(self, email_id: str) -> Email:
        """Flip starred optimistically; revert and re-raise on failure."""
        email = self._require(email_id)
        original = email.is_starred
        self._merge(email.model_copy(update={"is_starred": not original}))
        try:
            updated = await self._api.toggle_star(email_id)
        except VoxmailError:
            self._merge(email.model_copy(update={"is_starred": original}))
            raise
        return self._merge(updated)

    async def soft_delete(self, email_id: str) -> None:
        """Drop locally and ask the server to soft-delete; restore on failure."""
        email = self._require(email_id)
        index = next((i for i, e in enumerate(self._emails) if e.id == email_id), None)
        if index is not None:
            del self._emails[index]
        self._deleted.add(email_id)
        try:
            await self._api.delete_email(email_id)
        except VoxmailError:
            self._deleted.discard(email_id)
            if index is not None:
                self._emails.insert(index, email)
            raise
        if self.current is not None and self.current.id == email_id:
            self.current = self.current.model_copy(update={"status": EmailStatus.DELETED})

    async def set_labels(self, email_id: str, labels: list[str]) -> Email:
        """Replace the label set."""
        cleaned = list(dict.fromkeys(label.strip() for label in labels if label.strip()))
        updated = await self._api.set_labels(email_id, cleaned)
        return self._merge(updated)

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        attachments: list[AttachmentUpload] | None = None,
    ) -> Email:
        sent = await self._api.send_email(to, subject, body, attachments)
        if self.folder == Folder.SENT and self.loaded:
            self._emails.insert(0, sent)
        return sent


__all__ = ["EmailNotFound", "EmailStore"]
