"""
Session/auth controller.

Holds the bearer token and the signed-in user's profile. The token is
persisted to a file (the browser client keeps it in localStorage) so
restore() can resume a session. Any authenticated request answered with
401 signs the client out and notifies listeners, which send the app to
/login.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Awaitable, Callable

import httpx

from voxmail.client.api import DEFAULT_TIMEOUT, ApiClient
from voxmail.client.errors import VoxmailError
from voxmail.models import DEFAULT_VOICE_SPEED, UserPreferences, UserProfile

logger = logging.getLogger(__name__)

# Listener: async function(reason) where reason is "logout" or "auth_failure"
SignedOutListener = Callable[[str], Awaitable[None]]


class TokenStore:
    """Token persistence. ``path=None`` keeps the token in memory only."""

    def __init__(self, path: Path | None = None):
        self.path = path
        self._memory: str | None = None

    def load(self) -> str | None:
        if self.path is None:
            return self._memory
        try:
            token = self.path.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read token file {self.path}: {e}")
            return None
        return token or None

    def save(self, token: str) -> None:
        self._memory = token
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token)
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        self._memory = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)


class AuthController:
    """Bearer token + user profile. One per running client."""

    def __init__(
        self,
        base_url: str,
        *,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token_store = token_store or TokenStore()
        self.token: str | None = None
        self.user: UserProfile | None = None
        self.error: str | None = None
        self.loading = False
        self._listeners: list[SignedOutListener] = []
        self.api = ApiClient(
            base_url,
            token_getter=lambda: self.token,
            on_auth_failure=self._on_auth_failure,
            transport=transport,
            timeout=timeout,
        )

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    @property
    def preferences(self) -> UserPreferences:
        return self.user.preferences if self.user else UserPreferences()

    @property
    def voice_speed(self) -> float:
        """Speech rate for every utterance; 1.0 when signed out."""
        return self.user.preferences.voice_speed if self.user else DEFAULT_VOICE_SPEED

    def add_listener(self, listener: SignedOutListener) -> None:
        self._listeners.append(listener)

    async def _notify(self, reason: str) -> None:
        for listener in list(self._listeners):
            try:
                await listener(reason)
            except Exception as e:
                logger.exception(f"Signed-out listener failed: {e}")

    def _sign_in(self, token: str, user: UserProfile) -> None:
        self.token_store.save(token)
        self.token = token
        self.user = user
        self.error = None

    def _clear(self) -> bool:
        """Drop token and profile. Returns True if anything was cleared."""
        had_session = self.token is not None or self.user is not None
        self.token = None
        self.user = None
        self.token_store.clear()
        return had_session

    async def _on_auth_failure(self) -> None:
        logger.info("Session rejected by server, signing out")
        if self._clear():
            await self._notify("auth_failure")

    # =========================================================================
    # Operations
    # =========================================================================

    async def login(self, email: str, password: str) -> UserProfile:
        """Sign in. Raises the VoxmailError after recording its message in ``error``."""
        self.error = None
        self.loading = True
        try:
            response = await self.api.login(email, password)
        except VoxmailError as e:
            self.error = e.message or "Failed to login"
            self._clear()
            raise
        finally:
            self.loading = False
        self._sign_in(response.token, response.user)
        logger.info(f"Signed in as {response.user.email}")
        return response.user

    async def register(self, name: str, email: str, password: str) -> UserProfile:
        self.error = None
        self.loading = True
        try:
            response = await self.api.register(name, email, password)
        except VoxmailError as e:
            self.error = e.message or "Failed to register"
            self._clear()
            raise
        finally:
            self.loading = False
        self._sign_in(response.token, response.user)
        logger.info(f"Registered {response.user.email}")
        return response.user

    async def restore(self) -> bool:
        """Resume a persisted session by fetching /api/auth/me."""
        token = self.token_store.load()
        if not token:
            return False
        self.token = token
        self.loading = True
        try:
            self.user = await self.api.me()
        except VoxmailError as e:
            logger.info(f"Could not restore session: {e}")
            self._clear()
            return False
        finally:
            self.loading = False
        return True

    async def logout(self) -> None:
        """Sign out unconditionally. The server-side revoke is best effort."""
        if self.token is not None:
            try:
                await self.api.logout()
            except VoxmailError as e:
                logger.debug(f"Server logout failed, clearing locally: {e}")
        self._clear()
        self.error = None
        await self._notify("logout")

    async def update_preferences(self, preferences: UserPreferences) -> UserPreferences:
        if self.user is None:
            raise VoxmailError("Not signed in")
        try:
            saved = await self.api.update_preferences(preferences)
        except VoxmailError as e:
            self.error = e.message or "Failed to update preferences"
            raise
        if self.user is not None:
            self.user = self.user.model_copy(update={"preferences": saved})
        return saved

    async def aclose(self) -> None:
        await self.api.aclose()


__all__ = ["AuthController", "TokenStore"]
