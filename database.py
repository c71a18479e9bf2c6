"""
Document store access for MongoDB and an in-memory test implementation.

Both stores expose the same small surface: create a document, find one,
list many, and declare a unique field. Documents come back as plain dicts
with a string ``_id``.
"""

import copy
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional, Protocol, Set

from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The document store could not complete an operation."""


class DuplicateDocumentError(StoreError):
    """A write violated a unique index."""


class DocumentStore(Protocol):
    """Interface for document access."""

    name: str

    def ensure_unique(self, collection: str, field: str) -> None:
        ...

    def create_document(self, collection: str, data: Dict[str, Any]) -> str:
        ...

    def find_document(self, collection: str, filter_dict: Dict[str, Any]) -> Optional[dict]:
        ...

    def get_documents(
        self,
        collection: str,
        filter_dict: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        ...

    def list_collection_names(self) -> List[str]:
        ...


def _with_string_id(doc: dict) -> dict:
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class MongoDocumentStore:
    """MongoDB-backed store using pymongo."""

    def __init__(self, uri: str, db_name: str):
        self.client = MongoClient(uri)
        self.db = self.client[db_name]
        self.name = db_name

    def ensure_unique(self, collection: str, field: str) -> None:
        try:
            self.db[collection].create_index([(field, ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

    def create_document(self, collection: str, data: Dict[str, Any]) -> str:
        document = dict(data)
        try:
            result = self.db[collection].insert_one(document)
        except DuplicateKeyError as exc:
            raise DuplicateDocumentError(str(exc)) from exc
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc
        return str(result.inserted_id)

    def find_document(self, collection: str, filter_dict: Dict[str, Any]) -> Optional[dict]:
        try:
            doc = self.db[collection].find_one(filter_dict)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc
        return _with_string_id(doc) if doc else None

    def get_documents(
        self,
        collection: str,
        filter_dict: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        try:
            cursor = self.db[collection].find(filter_dict or {})
            if limit:
                cursor = cursor.limit(limit)
            return [_with_string_id(doc) for doc in cursor]
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

    def list_collection_names(self) -> List[str]:
        try:
            return self.db.list_collection_names()
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc


class InMemoryDocumentStore:
    """Simple in-memory store for development and tests."""

    def __init__(self, name: str = "in-memory"):
        self.name = name
        self.collections: Dict[str, List[dict]] = {}
        self.unique_fields: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def ensure_unique(self, collection: str, field: str) -> None:
        self.unique_fields.setdefault(collection, set()).add(field)

    def create_document(self, collection: str, data: Dict[str, Any]) -> str:
        with self._lock:
            docs = self.collections.setdefault(collection, [])
            for field in self.unique_fields.get(collection, ()):
                if field in data and any(doc.get(field) == data[field] for doc in docs):
                    raise DuplicateDocumentError(
                        f"duplicate key error collection: {collection} index: {field}"
                    )
            document = copy.deepcopy(data)
            document["_id"] = uuid.uuid4().hex
            docs.append(document)
            return document["_id"]

    def find_document(self, collection: str, filter_dict: Dict[str, Any]) -> Optional[dict]:
        matches = self.get_documents(collection, filter_dict, limit=1)
        return matches[0] if matches else None

    def get_documents(
        self,
        collection: str,
        filter_dict: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        filter_dict = filter_dict or {}
        with self._lock:
            matches = [
                copy.deepcopy(doc)
                for doc in self.collections.get(collection, [])
                if all(doc.get(key) == value for key, value in filter_dict.items())
            ]
        return matches[:limit] if limit else matches

    def list_collection_names(self) -> List[str]:
        return list(self.collections)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()
