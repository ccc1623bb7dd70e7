# byteinvoice/api/invoices.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from byteinvoice.api.dependencies import (
    company_or_default,
    get_database,
    get_smtp_relay,
    get_storage_service,
    require_client,
    require_invoice,
    settings_or_default,
)
from byteinvoice.config import ARCHIVE_GENERATED_PDFS
from byteinvoice.constants import INVOICE_STATUS_DRAFT, INVOICE_STATUS_SENT, INVOICE_STATUSES
from byteinvoice.core.status import derive_invoice_status, get_invoices_with_updated_status
from byteinvoice.core.utils import apply_draft, build_invoice
from byteinvoice.models import Invoice, InvoiceDraft, SendInvoiceRequest, StatusUpdate
from byteinvoice.services import email_service
from byteinvoice.services.database_service import InvoiceDatabase
from byteinvoice.services.email_service import SMTPRelay
from byteinvoice.services.pdf_service import archive_invoice_pdf, generate_invoice_pdf, pdf_filename, validate_pdf_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Invoice], summary="List invoices")
def list_invoices(
    status: Optional[str] = None,
    q: Optional[str] = None,
    db: InvoiceDatabase = Depends(get_database),
):
    """
    Lists invoices with their derived status (sent invoices past due are
    reported as overdue).

    Query params:
        status: Only invoices with this (derived) status.
        q: Case-insensitive match on invoice number or client name.
    """
    if status and status != "all" and status not in INVOICE_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be 'all' or one of {', '.join(INVOICE_STATUSES)}.")
    invoices = get_invoices_with_updated_status(db.get_invoices())
    if status and status != "all":
        invoices = [invoice for invoice in invoices if invoice.status == status]
    if q:
        needle = q.lower()
        invoices = [
            invoice for invoice in invoices
            if needle in invoice.invoice_number.lower() or needle in invoice.client_name.lower()
        ]
    return invoices


@router.post("", response_model=Invoice, status_code=201, summary="Create an invoice")
def create_invoice(draft: InvoiceDraft, db: InvoiceDatabase = Depends(get_database)):
    """
    Creates a draft invoice from form data. Items referencing a catalogue
    product are autofilled and all totals are computed server side.
    """
    client = db.get_client(draft.client_id)
    if client is None:
        raise HTTPException(status_code=400, detail=f"clientId: client '{draft.client_id}' does not exist.")
    invoice = build_invoice(draft, client, db.get_products(), db.get_invoices())
    try:
        return db.add_invoice(invoice)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/refresh-status", response_model=List[Invoice], summary="Persist derived overdue statuses")
def refresh_invoice_statuses(db: InvoiceDatabase = Depends(get_database)):
    """Stores "overdue" on every sent invoice whose due date has passed."""
    refreshed = []
    for invoice in db.get_invoices():
        derived = derive_invoice_status(invoice)
        if derived.status != invoice.status:
            db.update_invoice(invoice.id, {"status": derived.status})
            refreshed.append(derived)
    if refreshed:
        logger.info("Marked %d invoice(s) overdue", len(refreshed))
    return refreshed


@router.get("/{invoice_id}", response_model=Invoice, summary="Get an invoice")
def get_invoice(invoice_id: str, db: InvoiceDatabase = Depends(get_database)):
    return derive_invoice_status(require_invoice(db, invoice_id))


@router.put("/{invoice_id}", response_model=Invoice, summary="Edit an invoice")
def update_invoice(invoice_id: str, draft: InvoiceDraft, db: InvoiceDatabase = Depends(get_database)):
    """Replaces the invoice contents and recomputes its totals; id, number and status are kept."""
    invoice = require_invoice(db, invoice_id)
    client = db.get_client(draft.client_id)
    if client is None:
        raise HTTPException(status_code=400, detail=f"clientId: client '{draft.client_id}' does not exist.")
    updated = apply_draft(invoice, draft, client, db.get_products())
    return derive_invoice_status(db.update_invoice(invoice_id, updated))


@router.delete("/{invoice_id}", status_code=204, summary="Delete an invoice")
def delete_invoice(invoice_id: str, db: InvoiceDatabase = Depends(get_database)):
    if not db.delete_invoice(invoice_id):
        raise HTTPException(status_code=404, detail=f"Invoice '{invoice_id}' not found.")
    return Response(status_code=204)


@router.patch("/{invoice_id}/status", response_model=Invoice, summary="Change an invoice status")
def update_invoice_status(invoice_id: str, update: StatusUpdate, db: InvoiceDatabase = Depends(get_database)):
    require_invoice(db, invoice_id)
    return derive_invoice_status(db.update_invoice(invoice_id, {"status": update.status}))


def _email_context(db: InvoiceDatabase, invoice_id: str):
    invoice = derive_invoice_status(require_invoice(db, invoice_id))
    client = require_client(db, invoice.client_id)
    settings = settings_or_default(db)
    if not settings.smtp.is_complete():
        raise HTTPException(status_code=400, detail="SMTP configuration is incomplete")
    return invoice, client, company_or_default(db), settings


@router.post("/{invoice_id}/send", summary="Email an invoice to its client")
def send_invoice(
    invoice_id: str,
    request: Optional[SendInvoiceRequest] = Body(None),
    db: InvoiceDatabase = Depends(get_database),
    relay: SMTPRelay = Depends(get_smtp_relay),
) -> Dict[str, Any]:
    """
    Sends the invoice email with the PDF attached. On success the invoice is
    flagged as emailed and a draft moves to "sent".
    """
    invoice, client, company, settings = _email_context(db, invoice_id)
    template = settings.template_for("invoice", request.template_id if request else None)
    success = email_service.send_invoice(invoice, client, company, settings.smtp, template, relay)
    if success:
        updates: Dict[str, Any] = {"email_sent": True}
        if invoice.status == INVOICE_STATUS_DRAFT:
            updates["status"] = INVOICE_STATUS_SENT
        invoice = derive_invoice_status(db.update_invoice(invoice_id, updates))
    return {"success": success, "invoice": invoice.to_json_dict()}


@router.post("/{invoice_id}/remind", summary="Email a payment reminder")
def send_reminder(
    invoice_id: str,
    request: Optional[SendInvoiceRequest] = Body(None),
    db: InvoiceDatabase = Depends(get_database),
    relay: SMTPRelay = Depends(get_smtp_relay),
) -> Dict[str, Any]:
    invoice, client, company, settings = _email_context(db, invoice_id)
    template = settings.template_for("reminder", request.template_id if request else None)
    success = email_service.send_reminder(invoice, client, company, settings.smtp, template, relay)
    if success:
        invoice = derive_invoice_status(db.update_invoice(invoice_id, {"last_reminder_sent": datetime.now(timezone.utc)}))
    return {"success": success, "invoice": invoice.to_json_dict()}


@router.post("/{invoice_id}/overdue-notice", summary="Email an overdue notice")
def send_overdue_notice(
    invoice_id: str,
    request: Optional[SendInvoiceRequest] = Body(None),
    db: InvoiceDatabase = Depends(get_database),
    relay: SMTPRelay = Depends(get_smtp_relay),
) -> Dict[str, Any]:
    invoice, client, company, settings = _email_context(db, invoice_id)
    template = settings.template_for("overdue", request.template_id if request else None)
    success = email_service.send_overdue_notice(invoice, client, company, settings.smtp, template, relay)
    if success:
        invoice = derive_invoice_status(db.update_invoice(invoice_id, {"last_reminder_sent": datetime.now(timezone.utc)}))
    return {"success": success, "invoice": invoice.to_json_dict()}


@router.get("/{invoice_id}/pdf", summary="Download an invoice as PDF")
def download_invoice_pdf(invoice_id: str, db: InvoiceDatabase = Depends(get_database)):
    invoice = derive_invoice_status(require_invoice(db, invoice_id))
    client = db.get_client(invoice.client_id)
    company = db.get_company()
    try:
        validate_pdf_request(invoice, client, company)
        pdf_bytes = generate_invoice_pdf(invoice, client, company)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if ARCHIVE_GENERATED_PDFS:
        archive_invoice_pdf(pdf_bytes, invoice, get_storage_service())

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(invoice)}"'},
    )
