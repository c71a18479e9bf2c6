"""
Spreadsheet export of conference registrations.

Builds a single-sheet .xlsx workbook with a fixed column layout, one row per
registration. Timestamps are written as ISO-8601 text so the file does not
depend on the server locale.
"""

import io
from datetime import datetime, timezone
from typing import Any, Iterable, List, NamedTuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from database import DocumentStore
from registrations import list_all

EXPORT_FILENAME = "conference_registrations.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Registrations"


class Column(NamedTuple):
    header: str
    key: str
    width: int


COLUMNS: List[Column] = [
    Column("First Name", "firstName", 15),
    Column("Last Name", "lastName", 15),
    Column("Middle Name", "middleName", 15),
    Column("Age Bracket", "ageBracket", 15),
    Column("Email", "email", 25),
    Column("WhatsApp Phone", "whatsappPhone", 20),
    Column("Passport Country", "passportCountry", 20),
    Column("Country of Residence", "countryOfResidence", 20),
    Column("Region/State", "regionState", 15),
    Column("Sex", "sex", 10),
    Column("Education Level", "educationLevel", 20),
    Column("Course of Study", "courseOfStudy", 20),
    Column("Occupation", "occupation", 20),
    Column("Sending Organization", "sendingOrganization", 25),
    Column("Applicant Type", "applicantType", 20),
    Column("First Time Attending", "firstTimeAttending", 20),
    Column("Self Funding", "selfFunding", 15),
    Column("Scholarship Needed", "scholarshipNeeded", 20),
    Column("Belongs to MK Group", "belongsToMKGroup", 20),
    Column("Reference Info", "referenceInfo", 40),
    Column("Registration Date", "registrationDate", 20),
]


def format_timestamp(value: Any) -> str:
    """Render a stored timestamp as ISO-8601 in UTC, seconds precision."""
    if not isinstance(value, datetime):
        return "" if value is None else str(value)
    if value.tzinfo is None:
        # pymongo hands back naive datetimes that are already UTC
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds")


def build_row(registration: dict) -> List[Any]:
    row = []
    for column in COLUMNS:
        value = registration.get(column.key)
        if column.key == "registrationDate":
            value = format_timestamp(value)
        elif isinstance(value, str):
            value = ILLEGAL_CHARACTERS_RE.sub("", value)
        row.append(value)
    return row


def build_workbook(registrations: Iterable[dict]) -> Workbook:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = SHEET_TITLE

    worksheet.append([column.header for column in COLUMNS])
    for cell in worksheet[1]:
        cell.font = Font(bold=True)
    worksheet.freeze_panes = "A2"

    for index, column in enumerate(COLUMNS, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = column.width

    for registration in registrations:
        worksheet.append(build_row(registration))
        # openpyxl reads "=..." as a formula; registrant text is always plain text
        for cell in worksheet[worksheet.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"
    return workbook


def export_registrations(store: DocumentStore) -> bytes:
    """Return every registration as the bytes of an .xlsx workbook."""
    workbook = build_workbook(list_all(store))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
