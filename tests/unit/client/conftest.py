"""
Client test fixtures.

FakeBackend answers the REST API from memory through httpx.MockTransport,
so client code runs its real request path without a server.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from voxmail.client.auth import AuthController
from voxmail.client.email_store import EmailStore
from voxmail.client.navigation import Navigator
from voxmail.client.pages.base import PageContext
from voxmail.models import UserProfile

BASE_URL = "http://voxmail.test"

_EMAIL_PATH = re.compile(r"^/api/emails/(?P<email_id>[^/]+)(?:/(?P<op>read|star|labels))?$")


class FakeBackend:
    """In-memory stand-in for the VoxMail REST API."""

    TOKEN = "test-token"
    PASSWORD = "secret123"

    def __init__(self):
        self.user: dict[str, Any] = {
            "id": "user-1",
            "name": "Jane Doe",
            "email": "jane@example.com",
            "preferences": {"fontSize": "medium", "highContrast": False, "voiceSpeed": 1.0},
        }
        self.emails: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # Setup helpers
    # ─────────────────────────────────────────────────────────────────────────

    def add_email(
        self,
        email_id: str,
        sender: str = "alex@example.com",
        subject: str = "Hello",
        body: str = "Hi there",
        minutes_ago: int = 0,
        **extra: Any,
    ) -> dict[str, Any]:
        created = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
        email = {
            "id": email_id,
            "from": sender,
            "to": self.user["email"],
            "subject": subject,
            "body": body,
            "attachments": [],
            "status": "received",
            "isRead": False,
            "isStarred": False,
            "labels": [],
            "createdAt": created.isoformat(),
        }
        email.update(extra)
        self.emails[email_id] = email
        return email

    def fail(self, method: str, path: str, status_code: int = 500, error: str = "Server error") -> None:
        """Make the next and every later ``method path`` call fail."""
        self.failures[(method, path)] = (status_code, error)

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ─────────────────────────────────────────────────────────────────────────
    # Request handling
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _error(status_code: int, message: str) -> httpx.Response:
        return httpx.Response(status_code, json={"error": message, "code": f"HTTP_{status_code}"})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        failure = self.failures.get((method, path))
        if failure is not None:
            return self._error(*failure)

        if path == "/api/auth/login":
            body = json.loads(request.content)
            if body.get("email") == self.user["email"] and body.get("password") == self.PASSWORD:
                return httpx.Response(200, json={"token": self.TOKEN, "user": self.user})
            return self._error(400, "Invalid credentials")

        if path == "/api/auth/register":
            body = json.loads(request.content)
            if body.get("email") == self.user["email"]:
                return self._error(400, "User already exists")
            user = {**self.user, "id": "user-2", "name": body["name"], "email": body["email"]}
            return httpx.Response(201, json={"token": self.TOKEN, "user": user})

        if path == "/api/health":
            return httpx.Response(200, json={"status": "healthy"})

        if request.headers.get("Authorization") != f"Bearer {self.TOKEN}":
            return self._error(401, "Session invalid: token_not_found")

        if path == "/api/auth/me":
            return httpx.Response(200, json=self.user)
        if path == "/api/auth/logout":
            return httpx.Response(200, json={"message": "Logged out"})
        if path == "/api/auth/preferences":
            preferences = json.loads(request.content)["preferences"]
            self.user["preferences"] = preferences
            return httpx.Response(200, json={"preferences": preferences})

        if path == "/api/emails" and method == "GET":
            return self._list(request.url.params.get("folder", "inbox"))
        if path == "/api/emails/send" and method == "POST":
            email = self.add_email(
                "sent-1",
                sender=self.user["email"],
                subject="Sent",
                status="sent",
                to="bob@example.com",
            )
            return httpx.Response(201, json=email)

        match = _EMAIL_PATH.match(path)
        if match:
            return self._email_op(method, match.group("email_id"), match.group("op"), request)

        return self._error(404, "Not found")

    def _list(self, folder: str) -> httpx.Response:
        emails = [e for e in self.emails.values() if e["status"] != "deleted"]
        if folder == "starred":
            emails = [e for e in emails if e["isStarred"]]
        elif folder == "sent":
            emails = [e for e in emails if e["status"] == "sent"]
        else:
            emails = [e for e in emails if e["status"] != "sent"]
        emails.sort(key=lambda e: e["createdAt"], reverse=True)
        return httpx.Response(200, json=emails)

    def _email_op(self, method: str, email_id: str, op: str | None, request: httpx.Request) -> httpx.Response:
        email = self.emails.get(email_id)
        if email is None or email["status"] == "deleted":
            return self._error(404, "Email not found")

        if method == "GET" and op is None:
            return httpx.Response(200, json=email)
        if method == "DELETE" and op is None:
            email["status"] = "deleted"
            return httpx.Response(200, json={"message": "Email deleted"})
        if method == "PUT" and op == "read":
            email["isRead"] = True
        elif method == "PUT" and op == "star":
            email["isStarred"] = not email["isStarred"]
        elif method == "PUT" and op == "labels":
            email["labels"] = json.loads(request.content)["labels"]
        else:
            return self._error(405, "Method not allowed")
        return httpx.Response(200, json=email)


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def backend() -> FakeBackend:
    """Backend with three inbox emails, newest first: e1, e2, e3."""
    backend = FakeBackend()
    backend.add_email("e1", sender="alex.morgan@example.com", subject="Team lunch", minutes_ago=1)
    backend.add_email(
        "e2", sender="billing@example.com", subject="Invoice", body="Your invoice", minutes_ago=5,
        isRead=True,
    )
    backend.add_email("e3", sender="sam@example.com", subject="Project update", minutes_ago=10)
    return backend


@pytest.fixture
def auth(backend) -> AuthController:
    """Signed-out auth controller talking to the fake backend."""
    return AuthController(BASE_URL, transport=backend.transport)


@pytest.fixture
def signed_in(auth, backend) -> AuthController:
    """Auth controller holding a valid session."""
    auth.token = FakeBackend.TOKEN
    auth.user = UserProfile.model_validate(backend.user)
    return auth


@pytest.fixture
def store(signed_in) -> EmailStore:
    return EmailStore(signed_in.api)


@pytest.fixture
def page_context(signed_in, store, speech) -> PageContext:
    """Context for mounting pages directly, with no redirect delay."""
    return PageContext(
        auth=signed_in,
        store=store,
        navigator=Navigator(),
        speech_input=speech,
        speech_output=speech,
        redirect_delay=0,
    )


@pytest.fixture
def base_url() -> str:
    return BASE_URL
