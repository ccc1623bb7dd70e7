# byteinvoice/api/settings.py

from typing import Optional

from fastapi import APIRouter, Body, Depends

from byteinvoice.api.dependencies import company_or_default, get_database, get_smtp_relay, settings_or_default
from byteinvoice.models import AppSettings, SMTPSettings
from byteinvoice.services.database_service import InvoiceDatabase
from byteinvoice.services.email_service import SMTPRelay, send_test_email

router = APIRouter()


@router.get("/settings", response_model=AppSettings, summary="Get SMTP settings and email templates")
def get_settings(db: InvoiceDatabase = Depends(get_database)):
    return settings_or_default(db)


@router.put("/settings", response_model=AppSettings, summary="Replace SMTP settings and email templates")
def set_settings(settings: AppSettings, db: InvoiceDatabase = Depends(get_database)):
    return db.set_settings(settings)


@router.post("/test-email", summary="Send a test email")
def test_email(
    smtp_settings: Optional[SMTPSettings] = Body(None),
    db: InvoiceDatabase = Depends(get_database),
    relay: SMTPRelay = Depends(get_smtp_relay),
):
    """
    Sends a test message to the sender address. Uses the posted SMTP
    settings, or the stored ones when the body is empty.
    """
    smtp = smtp_settings or settings_or_default(db).smtp
    return {"success": send_test_email(smtp, company_or_default(db), relay)}
