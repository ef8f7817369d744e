"""
Email Routes

- GET    /api/emails              - Folder listing (?folder=inbox|starred|sent), newest first
- GET    /api/emails/{id}         - One email
- POST   /api/emails/send         - Send (multipart: to, subject, body, attachments[])
- PUT    /api/emails/{id}/read    - Mark read
- PUT    /api/emails/{id}/star    - Toggle starred
- DELETE /api/emails/{id}         - Soft delete
- PUT    /api/emails/{id}/labels  - Replace labels

An email is visible to its sender and its recipient. Deleted emails and
emails belonging to someone else answer 404.
"""

import asyncio
import logging
import re
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from voxmail.config import get_attachments_dir, get_section, get_smtp_settings
from voxmail.models import (
    Attachment,
    Email,
    EmailStatus,
    Folder,
    LabelsPayload,
    MessageResponse,
    UserProfile,
)
from voxmail.server import database
from voxmail.server.dependencies import get_current_user
from voxmail.server.mailer import MailDeliveryError, OutgoingAttachment, send_mail

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_ATTACHMENT_MB = int(get_section("server").get("max_attachment_mb", 25))


def _owned(email_id: str, user: UserProfile) -> Email:
    email = database.get_email(email_id, user.email)
    if email is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Email not found")
    return email


def _safe_filename(name: str | None) -> str:
    cleaned = Path(name or "").name.strip()
    return cleaned or "attachment"


def _store_attachments(email_id: str, files: list[OutgoingAttachment]) -> None:
    target = get_attachments_dir() / email_id
    target.mkdir(parents=True, exist_ok=True)
    for attachment in files:
        (target / attachment.filename).write_bytes(attachment.content)


@router.get("", response_model=list[Email])
async def list_emails(
    folder: Folder = Query(Folder.INBOX, description="inbox, starred or sent"),
    user: UserProfile = Depends(get_current_user),
):
    return database.list_emails(user.email, folder)


@router.post("/send", response_model=Email, status_code=status.HTTP_201_CREATED)
async def send_email(
    to: str = Form(""),
    subject: str = Form(""),
    body: str = Form(""),
    attachments: Optional[list[UploadFile]] = File(None),
    user: UserProfile = Depends(get_current_user),
):
    """
    Send an email.

    Delivered over SMTP when a mail host is configured, then stored with
    status "sent". Without a mail host the email is only stored.
    """
    to = to.strip()
    if not to or not subject.strip() or not body.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recipient, subject and body are required",
        )
    if not EMAIL_PATTERN.match(to):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid recipient email address"
        )

    outgoing: list[OutgoingAttachment] = []
    for upload in attachments or []:
        content = await upload.read()
        if len(content) > MAX_ATTACHMENT_MB * 1024 * 1024:
            raise HTTPException(
                status_code=413,
                detail=f"Attachment too large (max {MAX_ATTACHMENT_MB}MB)",
            )
        outgoing.append(
            OutgoingAttachment(
                filename=_safe_filename(upload.filename),
                content=content,
                content_type=upload.content_type or "application/octet-stream",
            )
        )

    settings = get_smtp_settings()
    if settings.configured:
        try:
            await asyncio.to_thread(send_mail, settings, user.email, to, subject, body, outgoing)
        except MailDeliveryError as e:
            logger.error(f"Mail delivery failed for user {user.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send email"
            )
    else:
        logger.warning("SMTP host not configured, storing email without delivery")

    email_id = uuid.uuid4().hex
    if outgoing:
        _store_attachments(email_id, outgoing)

    return database.insert_email(
        sender=user.email,
        recipient=to,
        subject=subject,
        body=body,
        status=EmailStatus.SENT,
        attachments=[
            Attachment(filename=a.filename, content_type=a.content_type, size=len(a.content))
            for a in outgoing
        ],
        email_id=email_id,
    )


@router.get("/{email_id}", response_model=Email)
async def get_email(email_id: str, user: UserProfile = Depends(get_current_user)):
    return _owned(email_id, user)


@router.put("/{email_id}/read", response_model=Email)
async def mark_read(email_id: str, user: UserProfile = Depends(get_current_user)):
    _owned(email_id, user)
    return database.update_email(email_id, is_read=True)


@router.put("/{email_id}/star", response_model=Email)
async def toggle_star(email_id: str, user: UserProfile = Depends(get_current_user)):
    email = _owned(email_id, user)
    return database.update_email(email_id, is_starred=not email.is_starred)


@router.delete("/{email_id}", response_model=MessageResponse)
async def delete_email(email_id: str, user: UserProfile = Depends(get_current_user)):
    """Soft delete: the record stays with status "deleted"."""
    _owned(email_id, user)
    database.update_email(email_id, status=EmailStatus.DELETED)
    logger.info(f"Email {email_id} deleted by user {user.id}")
    return MessageResponse(message="Email deleted")


@router.put("/{email_id}/labels", response_model=Email)
async def set_labels(
    email_id: str, payload: LabelsPayload, user: UserProfile = Depends(get_current_user)
):
    _owned(email_id, user)
    labels = list(dict.fromkeys(label.strip() for label in payload.labels if label.strip()))
    return database.update_email(email_id, labels=labels)
