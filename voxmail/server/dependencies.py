"""
Request dependencies shared by the route modules.
"""

import logging

from fastapi import HTTPException, Request, status

from voxmail.logging_config import bind_request_context
from voxmail.models import UserProfile
from voxmail.server import database, sessions

logger = logging.getLogger(__name__)


def get_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def get_current_user(request: Request) -> UserProfile:
    """
    Validate the bearer token and return the signed-in user.

    Raises 401 when the token is missing, unknown, revoked, expired or idle.
    """
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required"
        )

    result = sessions.validate_session(token, update_activity=True)
    if not result.get("valid"):
        reason = result.get("reason", "invalid_session")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Session invalid: {reason}"
        )

    user = database.get_user(result["user_id"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    bind_request_context(user_id=user.id)
    return user
