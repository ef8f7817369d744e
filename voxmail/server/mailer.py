"""
Outgoing mail over SMTP.

Uses stdlib smtplib: implicit TLS (SMTP_SSL) when ``secure`` is set,
STARTTLS otherwise. Blocking; the send route runs it in a worker thread.
"""

import logging
import smtplib
from dataclasses import dataclass
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from voxmail.config import SmtpSettings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """The SMTP server refused or could not be reached."""


@dataclass
class OutgoingAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def build_message(
    sender: str,
    to: str,
    subject: str,
    body: str,
    attachments: list[OutgoingAttachment] | None = None,
) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain"))

    for attachment in attachments or []:
        maintype, _, subtype = attachment.content_type.partition("/")
        part = MIMEBase(maintype or "application", subtype or "octet-stream")
        part.set_payload(attachment.content)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
        msg.attach(part)

    return msg


def send_mail(
    settings: SmtpSettings,
    sender: str,
    to: str,
    subject: str,
    body: str,
    attachments: list[OutgoingAttachment] | None = None,
) -> None:
    """Deliver one message. Raises MailDeliveryError on any SMTP failure."""
    msg = build_message(sender, to, subject, body, attachments)

    try:
        if settings.secure:
            server = smtplib.SMTP_SSL(settings.host, settings.port, timeout=30)
        else:
            server = smtplib.SMTP(settings.host, settings.port, timeout=30)
        with server:
            if not settings.secure:
                server.starttls()
            if settings.user:
                server.login(settings.user, settings.password)
            server.sendmail(sender, [to], msg.as_string())
    except smtplib.SMTPAuthenticationError as e:
        raise MailDeliveryError("SMTP authentication failed") from e
    except (smtplib.SMTPException, OSError) as e:
        raise MailDeliveryError(f"Failed to send email: {e!s}") from e

    logger.info(f"Mail sent from {sender} to {to}")
