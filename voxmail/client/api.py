"""
REST client for the VoxMail backend.

Wraps httpx.AsyncClient. Authenticated calls carry the session's bearer
token; a 401 on an authenticated call runs the ``on_auth_failure``
callback (forced logout) before raising AuthFailure. Every other failure
surfaces as NetworkFailure carrying the server's error message.

Usage:
    api = ApiClient("http://127.0.0.1:5000", token_getter=lambda: token)
    emails = await api.list_emails()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError

from voxmail.client.errors import AuthFailure, NetworkFailure
from voxmail.models import (
    AuthResponse,
    Email,
    Folder,
    PreferencesPayload,
    UserPreferences,
    UserProfile,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class AttachmentUpload:
    """A file picked in the compose form."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default


class ApiClient:
    """Async client for /api/auth, /api/emails and /api/voice."""

    def __init__(
        self,
        base_url: str,
        *,
        token_getter: Callable[[], str | None] | None = None,
        on_auth_failure: Callable[[], Awaitable[None]] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_getter = token_getter or (lambda: None)
        self.on_auth_failure = on_auth_failure
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        *,
        authenticated: bool = True,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, tuple[str, bytes, str]]] | None = None,
        failure: str = "Request failed",
    ) -> Any:
        """Make API request with error handling."""
        client = await self._get_client()

        headers: dict[str, str] = {}
        token = self.token_getter() if authenticated else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await client.request(
                method,
                endpoint,
                headers=headers,
                json=json,
                params=params,
                data=data,
                files=files,
            )
        except httpx.HTTPError as e:
            logger.error(f"VoxMail request error: {method} {endpoint}: {e}")
            raise NetworkFailure(f"{failure}. Could not reach the server.") from e

        if response.status_code == 401 and authenticated:
            logger.info(f"Session rejected on {method} {endpoint}")
            if self.on_auth_failure is not None:
                await self.on_auth_failure()
            raise AuthFailure(
                _error_message(response, "Your session has expired. Please log in again."),
                status_code=401,
            )

        if response.is_error:
            message = _error_message(response, failure)
            logger.warning(f"VoxMail API error: {response.status_code} {method} {endpoint}: {message}")
            raise NetworkFailure(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure(f"{failure}. The server sent an invalid response.") from e

    @staticmethod
    def _parse(model: Any, payload: Any, failure: str) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected response shape for {model.__name__}: {e}")
            raise NetworkFailure(f"{failure}. The server sent an invalid response.") from e

    # =========================================================================
    # Auth
    # =========================================================================

    async def login(self, email: str, password: str) -> AuthResponse:
        payload = await self._make_request(
            "POST",
            "/api/auth/login",
            authenticated=False,
            json={"email": email, "password": password},
            failure="Failed to login",
        )
        return self._parse(AuthResponse, payload, "Failed to login")

    async def register(self, name: str, email: str, password: str) -> AuthResponse:
        payload = await self._make_request(
            "POST",
            "/api/auth/register",
            authenticated=False,
            json={"name": name, "email": email, "password": password},
            failure="Failed to register",
        )
        return self._parse(AuthResponse, payload, "Failed to register")

    async def me(self) -> UserProfile:
        payload = await self._make_request("GET", "/api/auth/me", failure="Failed to load profile")
        return self._parse(UserProfile, payload, "Failed to load profile")

    async def logout(self) -> None:
        await self._make_request("POST", "/api/auth/logout", failure="Failed to log out")

    async def update_preferences(self, preferences: UserPreferences) -> UserPreferences:
        payload = await self._make_request(
            "PUT",
            "/api/auth/preferences",
            json=PreferencesPayload(preferences=preferences).to_wire(),
            failure="Failed to update preferences",
        )
        return self._parse(PreferencesPayload, payload, "Failed to update preferences").preferences

    # =========================================================================
    # Emails
    # =========================================================================

    async def list_emails(self, folder: Folder = Folder.INBOX) -> list[Email]:
        payload = await self._make_request(
            "GET",
            "/api/emails",
            params={"folder": Folder(folder).value},
            failure="Failed to load emails",
        )
        if not isinstance(payload, list):
            raise NetworkFailure("Failed to load emails. The server sent an invalid response.")
        return [self._parse(Email, item, "Failed to load emails") for item in payload]

    async def get_email(self, email_id: str) -> Email:
        payload = await self._make_request(
            "GET", f"/api/emails/{email_id}", failure="Failed to load email"
        )
        return self._parse(Email, payload, "Failed to load email")

    async def mark_read(self, email_id: str) -> Email:
        payload = await self._make_request(
            "PUT", f"/api/emails/{email_id}/read", failure="Failed to mark email as read"
        )
        return self._parse(Email, payload, "Failed to mark email as read")

    async def toggle_star(self, email_id: str) -> Email:
        payload = await self._make_request(
            "PUT", f"/api/emails/{email_id}/star", failure="Failed to star email"
        )
        return self._parse(Email, payload, "Failed to star email")

    async def delete_email(self, email_id: str) -> None:
        await self._make_request("DELETE", f"/api/emails/{email_id}", failure="Failed to delete email")

    async def set_labels(self, email_id: str, labels: list[str]) -> Email:
        payload = await self._make_request(
            "PUT",
            f"/api/emails/{email_id}/labels",
            json={"labels": labels},
            failure="Failed to update labels",
        )
        return self._parse(Email, payload, "Failed to update labels")

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        attachments: list[AttachmentUpload] | None = None,
    ) -> Email:
        files = [
            ("attachments", (a.filename, a.content, a.content_type)) for a in attachments or []
        ]
        payload = await self._make_request(
            "POST",
            "/api/emails/send",
            data={"to": to, "subject": subject, "body": body},
            files=files or None,
            failure="Failed to send email",
        )
        return self._parse(Email, payload, "Failed to send email")

    # =========================================================================
    # Voice / health
    # =========================================================================

    async def interpret(self, transcript: str, page: str, focus: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"transcript": transcript, "page": page}
        if focus is not None:
            body["focus"] = focus
        return await self._make_request(
            "POST", "/api/voice/interpret", json=body, failure="Failed to interpret command"
        )

    async def health(self) -> dict[str, Any]:
        return await self._make_request(
            "GET", "/api/health", authenticated=False, failure="Server unavailable"
        )


__all__ = ["ApiClient", "AttachmentUpload"]
