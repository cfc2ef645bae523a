"""
Email Service - outgoing mail over SMTP.

Used for password reset links. Without SMTP settings (local runs) the
message is logged instead of sent.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from hunter.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class EmailDeliveryError(Exception):
    """The SMTP server rejected or failed to deliver a message."""


def build_message(sender: str, recipient: str, subject: str, body: str,
                  html_body: Optional[str] = None) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)

    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def send_email(to_addr: str, subject: str, body: str, html_body: Optional[str] = None) -> None:
    if not settings.smtp_configured:
        logger.warning(f"SMTP is not configured; not sending '{subject}' to {to_addr}:\n{body}")
        return

    message = build_message(
        sender=settings.mail_from or settings.smtp_username,
        recipient=to_addr,
        subject=subject,
        body=body,
        html_body=html_body,
    )

    context = ssl.create_default_context()
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            if settings.smtp_use_starttls:
                server.starttls(context=context)
            server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"Failed to send email to {to_addr}: {exc}")
        raise EmailDeliveryError(str(exc)) from exc

    logger.info(f"Sent '{subject}' to {to_addr}")


def send_password_reset(to_addr: str, name: str, token: str) -> str:
    """Mail a reset link and return it."""
    link = f"{settings.frontend_url.rstrip('/')}/reset-password/confirm?token={token}"
    body = (
        f"Hi {name},\n\n"
        "We received a request to reset your Hunter AI password.\n"
        f"Open this link to choose a new one (valid for {settings.reset_token_expire_minutes} minutes):\n\n"
        f"{link}\n\n"
        "If you didn't ask for this, you can ignore this email."
    )
    send_email(to_addr, "Reset your Hunter AI password", body)
    return link
