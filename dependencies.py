"""
Dependency wiring for the FastAPI app.
"""

import logging
import threading
from typing import Optional

from database import DocumentStore, InMemoryDocumentStore, MongoDocumentStore, StoreError
from notifications import EmailSender, RecordingEmailSender, ResendEmailSender
from registrations import ensure_indexes
from settings import get_settings

logger = logging.getLogger(__name__)

_store: Optional[DocumentStore] = None
_indexes_ready = False
_email_sender: Optional[EmailSender] = None
_lock = threading.Lock()


def get_store() -> DocumentStore:
    """
    Return a singleton store so one Mongo connection pool serves all requests.

    Sync handlers run in the threadpool, so creation is guarded by a lock. If
    the unique index cannot be built the client is still kept and only the
    index build is retried on the next request.
    """
    global _store, _indexes_ready
    with _lock:
        if _store is None:
            settings = get_settings()
            if settings.mongodb_uri:
                _store = MongoDocumentStore(settings.mongodb_uri, settings.mongodb_db)
            else:
                logger.warning("MONGODB_URI not set; using in-memory store")
                _store = InMemoryDocumentStore()

        if not _indexes_ready:
            try:
                ensure_indexes(_store)
                _indexes_ready = True
            except StoreError:
                logger.exception("Could not create store indexes")
        return _store


def get_email_sender() -> EmailSender:
    global _email_sender
    with _lock:
        if _email_sender is None:
            settings = get_settings()
            if settings.resend_api_key:
                _email_sender = ResendEmailSender(settings.resend_api_key)
            else:
                logger.warning("RESEND_API_KEY not set; contact emails will only be logged")
                _email_sender = RecordingEmailSender()
        return _email_sender
