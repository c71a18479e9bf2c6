"""
Email notifications for contact-form messages.

Messages go out through the Resend transactional email API. Without an API
key the app falls back to RecordingEmailSender, which only logs and keeps
the messages in memory.
"""

import html
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol

import resend

from settings import Settings

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """The email provider did not accept a message."""


@dataclass
class EmailMessage:
    from_address: str
    to: str
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


class EmailSender(Protocol):
    def send(self, message: EmailMessage) -> str:
        """Deliver a message and return the provider message id."""
        ...


class ResendEmailSender:
    """Sends email through the Resend API."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message: EmailMessage) -> str:
        resend.api_key = self.api_key
        params = {
            "from": message.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        if message.reply_to:
            params["reply_to"] = message.reply_to
        try:
            response = resend.Emails.send(params)
            message_id = response["id"]
        except Exception as exc:
            raise NotificationError(f"Resend rejected message to {message.to}: {exc!r}") from exc
        logger.info("Sent email %s to %s | Subject: %s", message_id, message.to, message.subject)
        return message_id


class RecordingEmailSender:
    """
    Keeps sent messages in memory instead of delivering them.

    Used when no API key is configured and in tests. Can be told to fail so
    callers can exercise the delivery-failure path.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent_messages: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> str:
        if self.fail:
            logger.error("[EMAIL FAILED] To: %s | Subject: %s", message.to, message.subject)
            raise NotificationError("Simulated email delivery failure")
        self.sent_messages.append(message)
        logger.info("[EMAIL] To: %s | Subject: %s", message.to, message.subject)
        logger.debug("[EMAIL BODY] %s", message.text)
        return uuid.uuid4().hex

    def clear_history(self) -> None:
        self.sent_messages.clear()


def _format_sent_at(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def build_contact_notification(contact: dict, settings: Settings) -> EmailMessage:
    """Compose the HTML and plain-text email for a stored contact message."""
    if not settings.pastor_email:
        raise NotificationError("PASTOR_EMAIL is not configured")

    name = f"{contact['firstName']} {contact['lastName']}"
    phone = contact.get("phone")
    sent_at = _format_sent_at(contact["sentAt"])
    subject = f"New contact message from {name}"

    phone_html = f"<p><strong>Phone:</strong> {html.escape(phone)}</p>" if phone else ""
    message_html = html.escape(contact["message"]).replace("\n", "<br>")
    html_body = f"""
    <h2>New Contact Message</h2>
    <p><strong>Name:</strong> {html.escape(name)}</p>
    <p><strong>Email:</strong> {html.escape(contact['email'])}</p>
    {phone_html}
    <p><strong>Sent:</strong> {sent_at}</p>
    <hr/>
    <p>{message_html}</p>
    """

    text_lines = [
        "New Contact Message",
        "",
        f"Name: {name}",
        f"Email: {contact['email']}",
    ]
    if phone:
        text_lines.append(f"Phone: {phone}")
    text_lines += [f"Sent: {sent_at}", "", contact["message"]]

    return EmailMessage(
        from_address=settings.from_address,
        to=settings.pastor_email,
        subject=subject,
        html=html_body,
        text="\n".join(text_lines),
        reply_to=contact["email"],
    )
