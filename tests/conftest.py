"""
Shared pytest fixtures for the conference backend tests.

Every test gets a fresh in-memory store and a recording email sender, and
the FastAPI app is pointed at them through dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from database import InMemoryDocumentStore
from dependencies import get_email_sender, get_store
from main import app
from notifications import RecordingEmailSender
from registrations import ensure_indexes
from settings import Settings, get_settings


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh store with the same unique index the Mongo store gets."""
    store = InMemoryDocumentStore()
    ensure_indexes(store)
    return store


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        pastor_email="pastor@church.example.org",
        email_domain="church.example.org",
        email_from_name="Grace Conference",
    )


@pytest.fixture
def client(store, sender, settings):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registration_data() -> dict:
    """A complete, valid registration form."""
    return {
        "firstName": "Grace",
        "lastName": "Hopper",
        "middleName": "Brewster",
        "ageBracket": "26-35",
        "email": "grace@example.com",
        "whatsappPhone": "+15555550100",
        "passportCountry": "United States",
        "countryOfResidence": "United States",
        "regionState": "New York",
        "sex": "Female",
        "educationLevel": "Doctorate",
        "courseOfStudy": "Mathematics",
        "occupation": "Engineer",
        "sendingOrganization": "First Community Church",
        "applicantType": "Delegate",
        "firstTimeAttending": "Yes",
        "selfFunding": "No",
        "scholarshipNeeded": "Yes",
        "belongsToMKGroup": "No",
        "referenceInfo": "Pastor John, john@example.com",
    }


@pytest.fixture
def make_registration(registration_data):
    """Factory for registrations that differ only in the given fields."""

    def _make(**overrides) -> dict:
        return {**registration_data, **overrides}

    return _make


@pytest.fixture
def contact_data() -> dict:
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "message": "Hello, I would like more information.",
    }
