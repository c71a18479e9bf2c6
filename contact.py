"""
Contact-form pipeline: validate, persist, notify.

A stored message is never rolled back because the email failed; the caller
learns about the failed delivery through ``ContactSubmission.notified``.
"""

import logging
from dataclasses import dataclass
from typing import Any

from database import DocumentStore
from notifications import EmailSender, NotificationError, build_contact_notification
from schemas import ContactForm, ContactMessage
from settings import Settings
from validation import validate

logger = logging.getLogger(__name__)


@dataclass
class ContactSubmission:
    message: dict
    notified: bool


def submit(store: DocumentStore, sender: EmailSender, settings: Settings, data: Any) -> ContactSubmission:
    form = validate(ContactForm, data)
    contact = ContactMessage(**form.model_dump())

    document = contact.model_dump()
    document["_id"] = store.create_document(ContactMessage.COLLECTION, document)
    logger.info("Stored contact message %s from %s", document["_id"], contact.email)

    try:
        notification = build_contact_notification(document, settings)
        sender.send(notification)
    except NotificationError:
        logger.exception("Contact message %s saved but notification failed", document["_id"])
        return ContactSubmission(message=document, notified=False)

    return ContactSubmission(message=document, notified=True)
