"""
Tests for the contact-form pipeline and its email notification.
"""

from datetime import datetime, timezone

import pytest

from contact import submit
from notifications import NotificationError, RecordingEmailSender, build_contact_notification
from schemas import ContactMessage
from settings import Settings
from validation import BadInputError


class TestSubmit:
    def test_persists_and_notifies(self, store, sender, settings, contact_data):
        submission = submit(store, sender, settings, contact_data)

        assert submission.notified is True
        stored = store.get_documents(ContactMessage.COLLECTION)
        assert stored == [submission.message]
        assert stored[0]["read"] is False
        assert stored[0]["replied"] is False
        assert stored[0]["phone"] is None

        assert len(sender.sent_messages) == 1
        email = sender.sent_messages[0]
        assert email.reply_to == "ada@example.com"
        assert email.to == "pastor@church.example.org"
        assert email.from_address == "Grace Conference <noreply@church.example.org>"
        assert email.subject == "New contact message from Ada Lovelace"

    @pytest.mark.parametrize("field", ["firstName", "lastName", "email", "message"])
    def test_missing_field_writes_nothing(self, store, sender, settings, contact_data, field):
        del contact_data[field]

        with pytest.raises(BadInputError):
            submit(store, sender, settings, contact_data)

        assert store.get_documents(ContactMessage.COLLECTION) == []
        assert sender.sent_messages == []

    def test_short_message_rejected(self, store, sender, settings, contact_data):
        with pytest.raises(BadInputError) as exc_info:
            submit(store, sender, settings, {**contact_data, "message": "  hi pastor  "})

        assert exc_info.value.errors == ["message must be at least 10 characters"]
        assert store.get_documents(ContactMessage.COLLECTION) == []

    def test_malformed_email_rejected(self, store, sender, settings, contact_data):
        with pytest.raises(BadInputError):
            submit(store, sender, settings, {**contact_data, "email": "ada.example.com"})
        assert store.get_documents(ContactMessage.COLLECTION) == []

    def test_delivery_failure_keeps_message(self, store, settings, contact_data):
        sender = RecordingEmailSender(fail=True)

        submission = submit(store, sender, settings, contact_data)

        assert submission.notified is False
        assert store.get_documents(ContactMessage.COLLECTION) == [submission.message]

    def test_missing_recipient_keeps_message(self, store, sender, contact_data):
        submission = submit(store, sender, Settings(), contact_data)

        assert submission.notified is False
        assert len(store.get_documents(ContactMessage.COLLECTION)) == 1
        assert sender.sent_messages == []


class TestBuildContactNotification:
    @pytest.fixture
    def stored(self) -> dict:
        return {
            "_id": "abc123",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": "+44 20 7946 0000",
            "message": "First line\nSecond <b>line</b>",
            "sentAt": datetime(2026, 5, 4, 12, 0, 0, tzinfo=timezone.utc),
        }

    def test_html_rendition(self, stored, settings):
        email = build_contact_notification(stored, settings)

        assert "First line<br>Second &lt;b&gt;line&lt;/b&gt;" in email.html
        assert "+44 20 7946 0000" in email.html
        assert "2026-05-04 12:00:00 UTC" in email.html
        assert "ada@example.com" in email.html

    def test_text_rendition(self, stored, settings):
        email = build_contact_notification(stored, settings)

        assert "Name: Ada Lovelace" in email.text
        assert "Phone: +44 20 7946 0000" in email.text
        assert "Sent: 2026-05-04 12:00:00 UTC" in email.text
        assert email.text.endswith("First line\nSecond <b>line</b>")

    def test_phone_is_optional(self, stored, settings):
        stored["phone"] = None
        email = build_contact_notification(stored, settings)

        assert "Phone" not in email.html
        assert "Phone" not in email.text

    def test_requires_recipient(self, stored):
        with pytest.raises(NotificationError):
            build_contact_notification(stored, Settings())


def test_server_owned_fields_cannot_be_set(store, sender, settings, contact_data):
    submission = submit(
        store,
        sender,
        settings,
        {**contact_data, "read": True, "replied": True, "sentAt": "1999-01-01T00:00:00Z"},
    )

    stored = store.get_documents(ContactMessage.COLLECTION)[0]
    assert stored["read"] is False
    assert stored["replied"] is False
    assert stored["sentAt"].year != 1999
    assert submission.message["sentAt"] == stored["sentAt"]
