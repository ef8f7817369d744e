"""Tests for the SQLite storage layer in voxmail/server/database.py"""

import sqlite3

import pytest

from voxmail.models import Attachment, EmailStatus, Folder, FontSize, UserPreferences
from voxmail.server import database

ME = "jane@example.com"


@pytest.fixture
def mailbox(isolated_db):
    """One received, one sent, one deleted and one unrelated email."""
    received = database.insert_email("alex@example.com", ME, "Hello", "Hi Jane")
    sent = database.insert_email(ME, "bob@example.com", "Lunch?", "Noon", status=EmailStatus.SENT)
    deleted = database.insert_email("spam@example.com", ME, "Win", "Prize")
    database.update_email(deleted.id, status=EmailStatus.DELETED)
    database.insert_email("alex@example.com", "someone@example.com", "Other", "Not yours")
    return {"received": received, "sent": sent, "deleted": deleted}


class TestGetConnection:
    def test_creates_tables(self, isolated_db):
        conn = database.get_connection()
        names = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        conn.close()
        assert {"users", "emails", "sessions", "voice_commands"} <= names

    def test_creates_directory(self, tmp_path, monkeypatch):
        db_path = tmp_path / "subdir" / "voxmail.db"
        monkeypatch.setattr(database, "DB_PATH", db_path)
        database.init_db()
        assert db_path.exists()


@pytest.mark.usefixtures("isolated_db")
class TestUsers:
    def test_create_and_get(self):
        user = database.create_user("Jane Doe", "Jane@Example.com", "hash")
        assert user.email == "jane@example.com"
        assert user.preferences == UserPreferences()
        assert database.get_user(user.id) == user

    def test_duplicate_email(self):
        database.create_user("Jane", ME, "hash")
        with pytest.raises(sqlite3.IntegrityError):
            database.create_user("Other Jane", "JANE@example.com", "hash")

    def test_credentials(self):
        user = database.create_user("Jane", ME, "stored-hash")
        found, password_hash = database.get_credentials("JANE@EXAMPLE.COM")
        assert found.id == user.id
        assert password_hash == "stored-hash"
        assert database.get_credentials("nobody@example.com") is None

    def test_preferences(self):
        user = database.create_user("Jane", ME, "hash")
        wanted = UserPreferences(font_size=FontSize.LARGE, high_contrast=True, voice_speed=1.4)
        database.set_preferences(user.id, wanted)
        assert database.get_user(user.id).preferences == wanted

    def test_corrupt_preferences_fall_back(self):
        user = database.create_user("Jane", ME, "hash")
        conn = database.get_connection()
        conn.execute("UPDATE users SET preferences = ? WHERE id = ?", ("{oops", user.id))
        conn.commit()
        conn.close()
        assert database.get_user(user.id).preferences == UserPreferences()


class TestFolders:
    def test_inbox(self, mailbox):
        emails = database.list_emails(ME, Folder.INBOX)
        assert [e.id for e in emails] == [mailbox["received"].id]

    def test_sent(self, mailbox):
        emails = database.list_emails(ME, Folder.SENT)
        assert [e.id for e in emails] == [mailbox["sent"].id]

    def test_starred_spans_both_directions(self, mailbox):
        database.update_email(mailbox["received"].id, is_starred=True)
        database.update_email(mailbox["sent"].id, is_starred=True)
        database.update_email(mailbox["deleted"].id, is_starred=True)
        emails = database.list_emails(ME, Folder.STARRED)
        assert {e.id for e in emails} == {mailbox["received"].id, mailbox["sent"].id}

    def test_newest_first(self, isolated_db):
        first = database.insert_email("a@example.com", ME, "First", "1")
        second = database.insert_email("b@example.com", ME, "Second", "2")
        assert [e.id for e in database.list_emails(ME)] == [second.id, first.id]

    def test_case_insensitive_owner(self, mailbox):
        assert len(database.list_emails("JANE@example.com")) == 1


class TestEmails:
    def test_get_own_email(self, mailbox):
        assert database.get_email(mailbox["received"].id, ME).subject == "Hello"
        assert database.get_email(mailbox["sent"].id, ME).status == EmailStatus.SENT

    def test_deleted_and_foreign_are_hidden(self, mailbox):
        assert database.get_email(mailbox["deleted"].id, ME) is None
        assert database.get_email(mailbox["received"].id, "bob@example.com") is None

    def test_attachments_round_trip(self, isolated_db):
        attachment = Attachment(filename="notes.txt", content_type="text/plain", size=5)
        email = database.insert_email("a@example.com", ME, "Files", "See", attachments=[attachment])
        assert database.get_email(email.id, ME).attachments == [attachment]

    def test_update_flags_and_labels(self, mailbox):
        email_id = mailbox["received"].id
        updated = database.update_email(email_id, is_read=True, labels=["Work"])
        assert updated.is_read
        assert updated.labels == ["Work"]
        assert updated.updated_at >= mailbox["received"].updated_at

    def test_update_unknown_column(self, mailbox):
        with pytest.raises(ValueError):
            database.update_email(mailbox["received"].id, subject="Hacked")

    def test_update_missing(self, isolated_db):
        assert database.update_email("missing", is_read=True) is None


@pytest.mark.usefixtures("isolated_db")
class TestVoiceHistory:
    def test_newest_first_per_user(self):
        database.log_voice_command("user-1", "inbox", "open email 1", {"type": "action"})
        database.log_voice_command("user-1", "compose", "send", {"type": "submit"})
        database.log_voice_command("user-2", "inbox", "refresh", {"type": "action"})

        history = database.get_voice_history("user-1")
        assert [h["transcript"] for h in history] == ["send", "open email 1"]
        assert history[0]["intent"] == {"type": "submit"}
        assert database.get_voice_history("user-1", limit=1)[0]["page"] == "compose"
