"""
Integration tests for the /api/voice endpoints.

The server interprets transcripts with the same command tables the
client uses, so these double as a check that both sides agree.
"""

import pytest

pytestmark = pytest.mark.integration


class TestVoiceConfig:
    """Tests for GET /api/voice/config."""

    def test_browser_settings(self, test_client):
        response = test_client.get("/api/voice/config")
        assert response.status_code == 200
        assert response.json() == {
            "lang": "en-US",
            "continuous": True,
            "interimResults": True,
            "maxAlternatives": 1,
        }


class TestVoiceCommands:
    """Tests for GET /api/voice/commands."""

    def test_all_pages(self, test_client):
        data = test_client.get("/api/voice/commands").json()
        assert set(data["pages"]) == {
            "inbox", "compose", "email_view", "settings", "login", "register"
        }
        assert data["total"] == sum(len(c) for c in data["pages"].values())

    def test_one_page(self, test_client):
        data = test_client.get("/api/voice/commands", params={"page": "compose"}).json()
        assert list(data["pages"]) == ["compose"]
        assert {"command": "Send the email", "example": "send", "category": "submission"} in (
            data["pages"]["compose"]
        )

    def test_page_never_navigates_to_itself(self, test_client):
        data = test_client.get("/api/voice/commands", params={"page": "settings"}).json()
        commands = [c["command"] for c in data["pages"]["settings"]]
        assert "Open settings" not in commands
        assert "Compose a new email" in commands


class TestInterpret:
    """Tests for POST /api/voice/interpret."""

    @pytest.mark.parametrize(
        "payload,intent",
        [
            (
                {"transcript": "go to subject", "page": "compose"},
                {"type": "focus", "field": "subject"},
            ),
            (
                {"transcript": "see you at noon", "page": "compose", "focus": "body"},
                {"type": "append_field", "field": "body", "value": "see you at noon"},
            ),
            (
                {"transcript": "delete the second email", "page": "inbox"},
                {"type": "action", "name": "delete_email", "value": "2"},
            ),
            (
                {"transcript": "email is jane at example dot com", "page": "login"},
                {
                    "type": "set_field",
                    "assignments": [{"field": "email", "value": "jane@example.com"}],
                },
            ),
            (
                {"transcript": "enable high contrast", "page": "settings"},
                {"type": "toggle_state", "name": "high_contrast", "state": True},
            ),
            (
                {"transcript": "what a lovely day", "page": "settings"},
                {"type": "none"},
            ),
        ],
    )
    def test_interpret(self, test_client, jane_headers, payload, intent):
        response = test_client.post("/api/voice/interpret", json=payload, headers=jane_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["page"] == payload["page"]
        assert data["intent"] == {**intent, "transcript": payload["transcript"]}

    def test_default_focus_is_the_page(self, test_client, jane_headers):
        response = test_client.post(
            "/api/voice/interpret",
            json={"transcript": "send", "page": "compose"},
            headers=jane_headers,
        )
        assert response.json()["focus"] == "compose"

    @pytest.mark.parametrize(
        "payload",
        [
            {"transcript": "", "page": "compose"},
            {"transcript": "send", "page": "calendar"},
            {"transcript": "send", "page": "compose", "focus": "cc"},
        ],
    )
    def test_invalid_request(self, test_client, jane_headers, payload):
        response = test_client.post("/api/voice/interpret", json=payload, headers=jane_headers)
        assert response.status_code == 422

    def test_requires_auth(self, test_client):
        response = test_client.post(
            "/api/voice/interpret", json={"transcript": "send", "page": "compose"}
        )
        assert response.status_code == 401


class TestVoiceHistory:
    """Tests for GET /api/voice/history."""

    def test_history_per_user(self, test_client, jane_headers, bob_headers):
        for transcript in ("compose", "go to subject"):
            test_client.post(
                "/api/voice/interpret",
                json={"transcript": transcript, "page": "compose"},
                headers=jane_headers,
            )
        test_client.post(
            "/api/voice/interpret",
            json={"transcript": "refresh", "page": "inbox"},
            headers=bob_headers,
        )

        data = test_client.get("/api/voice/history", headers=jane_headers).json()
        assert data["count"] == 2
        assert [h["transcript"] for h in data["history"]] == ["go to subject", "compose"]
        assert data["history"][0]["intent"]["type"] == "focus"

        limited = test_client.get("/api/voice/history?limit=1", headers=bob_headers).json()
        assert limited["history"][0]["page"] == "inbox"

    def test_spoken_password_is_not_stored(self, test_client, jane_headers):
        response = test_client.post(
            "/api/voice/interpret",
            json={
                "transcript": "email is jane at example dot com password is secret123",
                "page": "login",
            },
            headers=jane_headers,
        )
        assignments = response.json()["intent"]["assignments"]
        assert {"field": "password", "value": "secret123"} in assignments

        entry = test_client.get("/api/voice/history", headers=jane_headers).json()["history"][0]
        assert "secret123" not in str(entry)
        assert entry["transcript"] == "[redacted]"
        assert entry["intent"]["assignments"] == [
            {"field": "email", "value": "jane@example.com"},
            {"field": "password", "value": "[redacted]"},
        ]
