"""
Database Schemas for the conference website

Each stored model below maps to a MongoDB collection (see COLLECTION on
each class). Request bodies are validated against the matching *Form model,
which only carries the fields a client may send; server-owned fields such as
timestamps and status flags exist only on the stored model.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, ClassVar, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
)
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

PHONE_PATTERN = r"^[+]?[\d\s().-]{7,20}$"

# C0 control characters other than tab, newline and carriage return; the
# .xlsx format cannot hold them
CONTROL_CHARACTERS = re.compile(r"[\000-\010]|[\013-\014]|[\016-\037]")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _email_address(value: str) -> str:
    try:
        _, address = validate_email(value)
    except ValueError:
        raise PydanticCustomError("invalid_email", "Please provide a valid email address")
    return address


def _exact_email_address(value: str) -> str:
    """Check the address format but keep exactly what was submitted."""
    address = _email_address(value)
    if address.lower() != value.lower():
        raise PydanticCustomError("invalid_email", "Please provide a valid email address")
    return value


def _printable(value):
    if isinstance(value, str) and CONTROL_CHARACTERS.search(value):
        raise PydanticCustomError("control_characters", "Text contains invalid characters")
    return value


def _lowercase(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


RequiredText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1), AfterValidator(_printable)
]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_printable)]
EmailAddress = Annotated[str, StringConstraints(strip_whitespace=True), AfterValidator(_exact_email_address)]


class RegistrationForm(BaseModel):
    """Fields a registrant submits; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    firstName: RequiredText
    lastName: RequiredText
    middleName: RequiredText
    ageBracket: RequiredText
    email: EmailAddress
    whatsappPhone: RequiredText
    passportCountry: RequiredText
    countryOfResidence: RequiredText
    regionState: RequiredText
    sex: RequiredText
    educationLevel: RequiredText
    courseOfStudy: RequiredText
    occupation: RequiredText
    sendingOrganization: RequiredText
    applicantType: RequiredText
    firstTimeAttending: RequiredText
    selfFunding: RequiredText
    scholarshipNeeded: OptionalText = None
    belongsToMKGroup: RequiredText
    referenceInfo: RequiredText


class Registration(RegistrationForm):
    """
    Conference registrations submitted from the website form
    Collection name: "registrations" (unique index on email)
    """

    COLLECTION: ClassVar[str] = "registrations"

    registrationDate: datetime = Field(default_factory=_utcnow)


class ContactForm(BaseModel):
    """Fields the contact form submits; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    firstName: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    lastName: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    email: Annotated[
        str,
        StringConstraints(max_length=100),
        BeforeValidator(_lowercase),
        AfterValidator(_email_address),
    ]
    phone: Annotated[
        Optional[Annotated[str, StringConstraints(pattern=PHONE_PATTERN)]],
        BeforeValidator(_blank_to_none),
    ] = None
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=2000)]


class ContactMessage(ContactForm):
    """
    Messages sent through the website contact form
    Collection name: "contactmessages"
    """

    COLLECTION: ClassVar[str] = "contactmessages"

    sentAt: datetime = Field(default_factory=_utcnow)
    read: bool = False
    replied: bool = False
