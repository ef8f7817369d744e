"""
Integration test fixtures for VoxMail.

Provides fixtures for exercising the real backend:
- FastAPI TestClient over voxmail.server.main.app
- Database, attachment directory and password hashing isolated per test
- Helpers to register users and build auth headers
- An httpx ASGI transport so the client library talks to the app in-process
"""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient


# ─────────────────────────────────────────────────────────────────────────────
# Backend Isolation
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def attachments_dir(tmp_path: Path) -> Path:
    return tmp_path / "attachments"


@pytest.fixture
def backend_env(
    temp_db: Path, attachments_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Throwaway database, attachment directory and store-only mail."""
    monkeypatch.delenv("SMTP_HOST", raising=False)
    with (
        patch("voxmail.server.database.DB_PATH", temp_db),
        patch("voxmail.server.passwords.KDF_ITERATIONS", 1000),
        patch("voxmail.server.routes.emails.get_attachments_dir", return_value=attachments_dir),
    ):
        yield temp_db


@pytest.fixture
def server_app(backend_env):
    from voxmail.server.main import app

    return app


@pytest.fixture
def test_client(server_app) -> Generator[TestClient, None, None]:
    """TestClient with the app lifespan running."""
    with TestClient(server_app) as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────

JANE = {"name": "Jane Doe", "email": "jane@example.com", "password": "secret123"}
BOB = {"name": "Bob Smith", "email": "bob@example.com", "password": "hunter22"}


@pytest.fixture
def register(test_client) -> Callable[..., dict[str, Any]]:
    """Register a user and return the auth response body."""

    def _register(name: str, email: str, password: str) -> dict[str, Any]:
        response = test_client.post(
            "/api/auth/register", json={"name": name, "email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def jane(register) -> dict[str, Any]:
    return register(**JANE)


@pytest.fixture
def bob(register) -> dict[str, Any]:
    return register(**BOB)


@pytest.fixture
def jane_headers(jane) -> dict[str, str]:
    return {"Authorization": f"Bearer {jane['token']}"}


@pytest.fixture
def bob_headers(bob) -> dict[str, str]:
    return {"Authorization": f"Bearer {bob['token']}"}


@pytest.fixture
def send_as(test_client) -> Callable[..., dict[str, Any]]:
    """Send an email through the API and return the stored record."""

    def _send(headers: dict[str, str], to: str, subject: str, body: str, files=None) -> dict[str, Any]:
        response = test_client.post(
            "/api/emails/send",
            data={"to": to, "subject": subject, "body": body},
            files=files,
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _send


# ─────────────────────────────────────────────────────────────────────────────
# In-process Client Transport
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def asgi_transport(server_app) -> httpx.ASGITransport:
    """Lets AuthController/ApiClient call the app without a socket."""
    return httpx.ASGITransport(app=server_app)
