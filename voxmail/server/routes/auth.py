"""
Authentication Routes

Provides endpoints for bearer-token authentication:
- POST /api/auth/register    - Create an account and sign in
- POST /api/auth/login       - Sign in with email and password
- POST /api/auth/logout      - Revoke the presented token
- GET  /api/auth/me          - Current user profile
- PUT  /api/auth/preferences - Save accessibility preferences
"""

import logging
import re
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from voxmail.models import AuthResponse, MessageResponse, PreferencesPayload, UserProfile
from voxmail.server import database, sessions
from voxmail.server.dependencies import get_bearer_token, get_current_user
from voxmail.server.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class LoginRequest(BaseModel):
    """Login request."""

    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Registration request."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


def _sign_in(user: UserProfile) -> AuthResponse:
    session = sessions.create_session(user.id)
    return AuthResponse(token=session["token"], user=user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """Create an account. Returns a bearer token and the profile."""
    name = request.name.strip()
    email = request.email.strip().lower()

    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    if not EMAIL_PATTERN.match(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter a valid email address"
        )
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    try:
        user = database.create_user(name, email, hash_password(request.password))
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists"
        )

    logger.info(f"Registered user {user.id}")
    return _sign_in(user)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """Sign in. Unknown email and wrong password give the same answer."""
    credentials = database.get_credentials(request.email.strip())
    if credentials is None or not verify_password(request.password, credentials[1]):
        logger.info("Failed login attempt")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    user = credentials[0]
    logger.info(f"User {user.id} signed in")
    return _sign_in(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, user: UserProfile = Depends(get_current_user)):
    """Revoke the token used for this request."""
    token = get_bearer_token(request)
    if token:
        sessions.revoke_session(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserProfile)
async def me(user: UserProfile = Depends(get_current_user)):
    return user


@router.put("/preferences", response_model=PreferencesPayload)
async def update_preferences(
    payload: PreferencesPayload, user: UserProfile = Depends(get_current_user)
):
    """Replace the stored accessibility preferences."""
    saved = database.set_preferences(user.id, payload.preferences)
    logger.info(f"Preferences updated for user {user.id}")
    return PreferencesPayload(preferences=saved)
