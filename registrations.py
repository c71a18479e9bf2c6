"""
Conference registration service.

The unique index on ``email`` is the authoritative duplicate guard; the
lookup before insert only gives the common case a clean answer without
relying on the store error.
"""

import logging
from typing import Any, List

from database import DocumentStore, DuplicateDocumentError
from schemas import Registration, RegistrationForm
from validation import validate

logger = logging.getLogger(__name__)


class DuplicateRegistrationError(Exception):
    """A registration with this email already exists."""

    message = "Email already registered"

    def __init__(self, email: str):
        self.email = email
        super().__init__(self.message)


def ensure_indexes(store: DocumentStore) -> None:
    store.ensure_unique(Registration.COLLECTION, "email")


def register(store: DocumentStore, data: Any) -> dict:
    """Validate and store a registration, returning the stored document."""
    form = validate(RegistrationForm, data)
    registration = Registration(**form.model_dump())

    if store.find_document(Registration.COLLECTION, {"email": registration.email}):
        logger.info("Rejected duplicate registration for %s", registration.email)
        raise DuplicateRegistrationError(registration.email)

    document = registration.model_dump()
    try:
        document["_id"] = store.create_document(Registration.COLLECTION, document)
    except DuplicateDocumentError as exc:
        logger.info("Unique index rejected registration for %s", registration.email)
        raise DuplicateRegistrationError(registration.email) from exc

    logger.info("Registered %s %s <%s>", registration.firstName, registration.lastName, registration.email)
    return document


def list_all(store: DocumentStore) -> List[dict]:
    """Return every registration in insertion order."""
    return store.get_documents(Registration.COLLECTION)
