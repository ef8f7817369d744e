"""
VoxMail Database Module

SQLite storage for the backend:
- users: accounts, password hashes and accessibility preferences
- emails: one record per message, shared by sender and recipient
- sessions: bearer token hashes (see sessions.py)
- voice_commands: interpreted transcripts, for troubleshooting recognition

Tables are created on first connection. Tests point DB_PATH at a
temporary file.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any

from voxmail.config import get_db_path
from voxmail.models import Attachment, Email, EmailStatus, Folder, UserPreferences, UserProfile

logger = logging.getLogger(__name__)

# Database path
DB_PATH = get_db_path()


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            preferences TEXT,
            created_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS emails (
            id TEXT PRIMARY KEY,
            sender TEXT NOT NULL,
            recipient TEXT NOT NULL,
            subject TEXT NOT NULL,
            body TEXT NOT NULL,
            attachments TEXT,
            status TEXT DEFAULT 'received',
            is_read INTEGER DEFAULT 0,
            is_starred INTEGER DEFAULT 0,
            labels TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            token_hash TEXT UNIQUE NOT NULL,
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            expires_at TEXT NOT NULL,
            last_activity TEXT NOT NULL,
            is_active INTEGER DEFAULT 1
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS voice_commands (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT,
            page TEXT NOT NULL,
            transcript TEXT NOT NULL,
            intent TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """)

    # Indexes
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_emails_recipient ON emails(recipient)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_emails_sender ON emails(sender)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_emails_created ON emails(created_at DESC)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_sessions_token ON sessions(token_hash)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id)")

    conn.commit()
    return conn


def init_db() -> None:
    """Create tables at startup."""
    conn = get_connection()
    conn.close()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Users
# =============================================================================


def _profile_from_row(row: sqlite3.Row) -> UserProfile:
    preferences = UserPreferences()
    if row["preferences"]:
        try:
            preferences = UserPreferences.model_validate(json.loads(row["preferences"]))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Invalid stored preferences for user {row['id']}: {e}")
    return UserProfile(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        preferences=preferences,
        created_at=row["created_at"],
    )


def create_user(name: str, email: str, password_hash: str) -> UserProfile:
    """Insert a user. Raises sqlite3.IntegrityError if the email is taken."""
    user_id = uuid.uuid4().hex
    created_at = now_iso()
    preferences = json.dumps(UserPreferences().model_dump(mode="json"))

    conn = get_connection()
    try:
        conn.execute(
            """
            INSERT INTO users (id, name, email, password_hash, preferences, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """,
            (user_id, name, email.lower(), password_hash, preferences, created_at),
        )
        conn.commit()
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    finally:
        conn.close()

    return _profile_from_row(row)


def get_user(user_id: str) -> UserProfile | None:
    conn = get_connection()
    row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    conn.close()
    return _profile_from_row(row) if row else None


def get_credentials(email: str) -> tuple[UserProfile, str] | None:
    """Profile plus stored password hash for a login attempt."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM users WHERE email = ?", (email.lower(),)).fetchone()
    conn.close()
    if not row:
        return None
    return _profile_from_row(row), row["password_hash"]


def set_preferences(user_id: str, preferences: UserPreferences) -> UserPreferences:
    conn = get_connection()
    conn.execute(
        "UPDATE users SET preferences = ? WHERE id = ?",
        (json.dumps(preferences.model_dump(mode="json")), user_id),
    )
    conn.commit()
    conn.close()
    return preferences


# =============================================================================
# Emails
# =============================================================================


def _email_from_row(row: sqlite3.Row) -> Email:
    attachments = json.loads(row["attachments"]) if row["attachments"] else []
    labels = json.loads(row["labels"]) if row["labels"] else []
    return Email(
        id=row["id"],
        sender=row["sender"],
        recipient=row["recipient"],
        subject=row["subject"],
        body=row["body"],
        attachments=[Attachment.model_validate(a) for a in attachments],
        status=EmailStatus(row["status"]),
        is_read=bool(row["is_read"]),
        is_starred=bool(row["is_starred"]),
        labels=labels,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


FOLDER_QUERIES: dict[Folder, str] = {
    Folder.INBOX: "recipient = :me AND status != 'deleted'",
    Folder.STARRED: "(recipient = :me OR sender = :me) AND is_starred = 1 AND status != 'deleted'",
    Folder.SENT: "sender = :me AND status = 'sent'",
}


def list_emails(user_email: str, folder: Folder = Folder.INBOX) -> list[Email]:
    """Emails in a folder, newest first. Deleted emails never appear."""
    where = FOLDER_QUERIES[Folder(folder)]
    conn = get_connection()
    rows = conn.execute(
        f"SELECT * FROM emails WHERE {where} ORDER BY created_at DESC, rowid DESC",
        {"me": user_email.lower()},
    ).fetchall()
    conn.close()
    return [_email_from_row(row) for row in rows]


def get_email(email_id: str, user_email: str) -> Email | None:
    """One email the user sent or received. None if missing, deleted or not theirs."""
    conn = get_connection()
    row = conn.execute(
        """
        SELECT * FROM emails
        WHERE id = ? AND (recipient = ? OR sender = ?) AND status != 'deleted'
    """,
        (email_id, user_email.lower(), user_email.lower()),
    ).fetchone()
    conn.close()
    return _email_from_row(row) if row else None


def insert_email(
    sender: str,
    recipient: str,
    subject: str,
    body: str,
    status: EmailStatus = EmailStatus.RECEIVED,
    attachments: list[Attachment] | None = None,
    email_id: str | None = None,
) -> Email:
    email_id = email_id or uuid.uuid4().hex
    timestamp = now_iso()
    attachments_json = json.dumps([a.model_dump(mode="json") for a in attachments or []])

    conn = get_connection()
    conn.execute(
        """
        INSERT INTO emails
        (id, sender, recipient, subject, body, attachments, status, labels, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, '[]', ?, ?)
    """,
        (
            email_id,
            sender.lower(),
            recipient.lower(),
            subject,
            body,
            attachments_json,
            EmailStatus(status).value,
            timestamp,
            timestamp,
        ),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM emails WHERE id = ?", (email_id,)).fetchone()
    conn.close()
    return _email_from_row(row)


EMAIL_COLUMNS = ("status", "is_read", "is_starred", "labels")


def update_email(email_id: str, **fields: Any) -> Email | None:
    """Update columns of an email and bump updated_at."""
    unknown = set(fields) - set(EMAIL_COLUMNS)
    if unknown:
        raise ValueError(f"Cannot update email columns: {sorted(unknown)}")

    values: dict[str, Any] = {}
    for column, value in fields.items():
        if column == "labels":
            value = json.dumps(list(value))
        elif column in ("is_read", "is_starred"):
            value = 1 if value else 0
        elif column == "status":
            value = EmailStatus(value).value
        values[column] = value

    assignments = ", ".join(f"{column} = :{column}" for column in values)
    values["updated_at"] = now_iso()
    values["id"] = email_id

    conn = get_connection()
    conn.execute(
        f"UPDATE emails SET {assignments}, updated_at = :updated_at WHERE id = :id", values
    )
    conn.commit()
    row = conn.execute("SELECT * FROM emails WHERE id = ?", (email_id,)).fetchone()
    conn.close()
    return _email_from_row(row) if row else None


# =============================================================================
# Voice command log
# =============================================================================


def log_voice_command(user_id: str | None, page: str, transcript: str, intent: dict) -> None:
    try:
        conn = get_connection()
        conn.execute(
            """
            INSERT INTO voice_commands (user_id, page, transcript, intent, created_at)
            VALUES (?, ?, ?, ?, ?)
        """,
            (user_id, page, transcript, json.dumps(intent), now_iso()),
        )
        conn.commit()
        conn.close()
    except sqlite3.Error as e:
        logger.warning(f"Failed to log voice command: {e}")


def get_voice_history(user_id: str, limit: int = 50) -> list[dict[str, Any]]:
    conn = get_connection()
    rows = conn.execute(
        """
        SELECT page, transcript, intent, created_at FROM voice_commands
        WHERE user_id = ?
        ORDER BY id DESC
        LIMIT ?
    """,
        (user_id, limit),
    ).fetchall()
    conn.close()
    return [
        {
            "page": row["page"],
            "transcript": row["transcript"],
            "intent": json.loads(row["intent"]),
            "createdAt": row["created_at"],
        }
        for row in rows
    ]
