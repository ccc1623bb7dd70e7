# byteinvoice/api/dependencies.py

from fastapi import HTTPException, status

from byteinvoice.models import AppSettings, Client, Company, Invoice
from byteinvoice.services.database_service import InvoiceDatabase, get_database
from byteinvoice.services.email_service import SMTPRelay
from byteinvoice.services.storage_service import get_storage_service

__all__ = ["get_database", "get_storage_service", "get_smtp_relay", "require_client", "require_invoice", "company_or_default", "settings_or_default"]


def get_smtp_relay() -> SMTPRelay:
    return SMTPRelay()


def require_invoice(db: InvoiceDatabase, invoice_id: str) -> Invoice:
    invoice = db.get_invoice(invoice_id)
    if invoice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Invoice '{invoice_id}' not found.")
    return invoice


def require_client(db: InvoiceDatabase, client_id: str) -> Client:
    client = db.get_client(client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client '{client_id}' not found.")
    return client


def company_or_default(db: InvoiceDatabase) -> Company:
    return db.get_company() or Company()


def settings_or_default(db: InvoiceDatabase) -> AppSettings:
    return db.get_settings() or AppSettings()
