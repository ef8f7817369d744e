"""
Session Manager

Bearer tokens for the REST API:
- 256-bit random tokens, only the SHA-256 hash is stored
- TTL (default 24h) plus idle timeout (default 4h)
- At most MAX_SESSIONS_PER_USER active sessions; the oldest is revoked
- Logout revokes the presented token

The raw token is returned only by create_session().
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any

from voxmail.config import get_section
from voxmail.server.database import get_connection

logger = logging.getLogger(__name__)

_security = get_section("security")

# Default session settings (can be overridden by args/voxmail.yaml)
DEFAULT_TTL_HOURS = int(_security.get("session_ttl_hours", 24))
MAX_TTL_HOURS = 168  # 7 days
IDLE_TIMEOUT_HOURS = float(_security.get("idle_timeout_hours", 4))
MAX_SESSIONS_PER_USER = int(_security.get("max_sessions_per_user", 5))
TOKEN_BYTES = 32  # 256 bits


def generate_token() -> str:
    """Generate a secure random session token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a token for secure storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def create_session(user_id: str, ttl_hours: int = DEFAULT_TTL_HOURS) -> dict[str, Any]:
    """
    Create a new session.

    Args:
        user_id: User identifier
        ttl_hours: Session lifetime in hours

    Returns:
        dict with session info and RAW TOKEN (only time it's returned)
    """
    ttl_hours = min(ttl_hours, MAX_TTL_HOURS)

    token = generate_token()
    token_hash = hash_token(token)

    now = datetime.now()
    expires_at = now + timedelta(hours=ttl_hours)

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(
        "SELECT COUNT(*) as count FROM sessions WHERE user_id = ? AND is_active = 1", (user_id,)
    )
    active_count = cursor.fetchone()["count"]

    if active_count >= MAX_SESSIONS_PER_USER:
        # Revoke oldest session
        cursor.execute(
            """
            UPDATE sessions SET is_active = 0
            WHERE id = (
                SELECT id FROM sessions
                WHERE user_id = ? AND is_active = 1
                ORDER BY created_at ASC, id ASC
                LIMIT 1
            )
        """,
            (user_id,),
        )
        logger.info(f"Session limit reached for user {user_id}, revoked oldest")

    cursor.execute(
        """
        INSERT INTO sessions (token_hash, user_id, created_at, expires_at, last_activity)
        VALUES (?, ?, ?, ?, ?)
    """,
        (token_hash, user_id, now.isoformat(), expires_at.isoformat(), now.isoformat()),
    )

    session_id = cursor.lastrowid
    conn.commit()
    conn.close()

    return {
        "success": True,
        "token": token,  # Only time raw token is returned!
        "session_id": session_id,
        "user_id": user_id,
        "expires_at": expires_at.isoformat(),
    }


def validate_session(token: str, update_activity: bool = True) -> dict[str, Any]:
    """
    Validate a session token.

    Returns:
        dict with ``valid`` and either ``user_id`` or a ``reason``
    """
    token_hash = hash_token(token)

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM sessions WHERE token_hash = ?", (token_hash,))
    row = cursor.fetchone()

    if not row:
        conn.close()
        return {"valid": False, "reason": "token_not_found"}

    if not row["is_active"]:
        conn.close()
        return {"valid": False, "reason": "session_revoked"}

    now = datetime.now()

    if now > datetime.fromisoformat(row["expires_at"]):
        cursor.execute("UPDATE sessions SET is_active = 0 WHERE id = ?", (row["id"],))
        conn.commit()
        conn.close()
        return {"valid": False, "reason": "session_expired"}

    idle_seconds = (now - datetime.fromisoformat(row["last_activity"])).total_seconds()
    if idle_seconds > IDLE_TIMEOUT_HOURS * 3600:
        cursor.execute("UPDATE sessions SET is_active = 0 WHERE id = ?", (row["id"],))
        conn.commit()
        conn.close()
        return {"valid": False, "reason": "idle_timeout"}

    if update_activity:
        cursor.execute(
            "UPDATE sessions SET last_activity = ? WHERE id = ?", (now.isoformat(), row["id"])
        )
        conn.commit()

    conn.close()

    return {
        "valid": True,
        "session_id": row["id"],
        "user_id": row["user_id"],
        "expires_at": row["expires_at"],
    }


def revoke_session(token: str) -> bool:
    """Revoke a single session. Returns False if the token is unknown."""
    token_hash = hash_token(token)

    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute("UPDATE sessions SET is_active = 0 WHERE token_hash = ?", (token_hash,))
    revoked = cursor.rowcount > 0
    conn.commit()
    conn.close()
    return revoked


def revoke_all_sessions(user_id: str) -> int:
    """Revoke all sessions for a user. Returns how many were active."""
    conn = get_connection()
    cursor = conn.cursor()
    cursor.execute(
        "UPDATE sessions SET is_active = 0 WHERE user_id = ? AND is_active = 1", (user_id,)
    )
    count = cursor.rowcount
    conn.commit()
    conn.close()
    return count


def cleanup_expired() -> int:
    """Deactivate expired sessions and delete inactive ones older than 30 days."""
    conn = get_connection()
    cursor = conn.cursor()

    now = datetime.now()
    cursor.execute(
        "UPDATE sessions SET is_active = 0 WHERE expires_at < ? AND is_active = 1",
        (now.isoformat(),),
    )
    expired = cursor.rowcount

    cutoff = (now - timedelta(days=30)).isoformat()
    cursor.execute("DELETE FROM sessions WHERE is_active = 0 AND created_at < ?", (cutoff,))

    conn.commit()
    conn.close()
    return expired
