import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

import contact
import registrations
from database import DocumentStore, StoreError
from dependencies import get_email_sender, get_store
from export import EXPORT_FILENAME, XLSX_MEDIA_TYPE, export_registrations
from notifications import EmailSender
from settings import Settings, get_settings
from validation import BadInputError, describe_errors

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)
logging.getLogger("pymongo").setLevel(logging.WARN)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Conference Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(settings: Settings, message: str, exc: Exception, **extra: Any) -> Dict[str, Any]:
    """Generic failure payload; raw detail is only exposed outside production."""
    body: Dict[str, Any] = dict(extra, message=message)
    if not settings.is_production:
        body["error"] = str(exc)
    return body


@app.exception_handler(RequestValidationError)
async def bad_request_body(request: Request, exc: RequestValidationError):
    body: Dict[str, Any] = {"message": ". ".join(describe_errors(exc))}
    if request.url.path == request.app.url_path_for("send_contact_message"):
        body = {"success": False, **body}
    return JSONResponse(status_code=400, content=body)


@app.get("/")
def read_root():
    return {"message": "Conference API is running"}


@app.get("/test")
def test_database(store: DocumentStore = Depends(get_store)):
    """Test endpoint to check if the document store is available and accessible"""
    response: Dict[str, Any] = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": store.name,
        "collections": [],
    }
    try:
        response["collections"] = store.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except StoreError as e:
        response["database"] = f"⚠️  Connected but Error: {str(e)[:80]}"
    return response


@app.get("/api/registrations/export")
def export_registrations_file(
    store: DocumentStore = Depends(get_store),
):
    """Download every registration as an .xlsx workbook."""
    try:
        content = export_registrations(store)
    except Exception:
        logger.exception("Error exporting registrations")
        return JSONResponse(status_code=500, content={"message": "Error exporting registrations"})

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@app.post("/api/register")
def register(
    payload: Any = Body(None),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Create a conference registration; one per email address."""
    try:
        registration = registrations.register(store, payload)
    except BadInputError as exc:
        logger.info("Rejected registration: %s", exc.message)
        return JSONResponse(status_code=400, content={"message": exc.message})
    except registrations.DuplicateRegistrationError as exc:
        return JSONResponse(status_code=400, content={"message": exc.message})
    except Exception as exc:
        logger.exception("Registration error")
        return JSONResponse(status_code=500, content=_error_body(settings, "Registration failed", exc))

    return JSONResponse(
        status_code=201,
        content=jsonable_encoder({"message": "Registration successful", "registration": registration}),
    )


@app.post("/api/contact")
def send_contact_message(
    payload: Any = Body(None),
    store: DocumentStore = Depends(get_store),
    sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
):
    """Store a contact-form message and forward it to the pastor by email."""
    try:
        submission = contact.submit(store, sender, settings, payload)
    except BadInputError as exc:
        logger.info("Rejected contact message: %s", exc.message)
        return JSONResponse(status_code=400, content={"success": False, "message": exc.message})
    except Exception as exc:
        logger.exception("Contact form error")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                settings, "Failed to send message. Please try again later.", exc, success=False
            ),
        )

    stored = submission.message
    if submission.notified:
        message = "Thank you for your message. We will get back to you soon."
    else:
        message = "Your message was saved, but we could not notify our team by email yet."
    return JSONResponse(
        status_code=201,
        content=jsonable_encoder(
            {
                "success": True,
                "message": message,
                "notified": submission.notified,
                "data": {
                    "id": stored["_id"],
                    "firstName": stored["firstName"],
                    "lastName": stored["lastName"],
                    "email": stored["email"],
                    "sentAt": stored["sentAt"],
                },
            }
        ),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
