# byteinvoice/api/documents.py

import logging
import smtplib

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from byteinvoice.api.dependencies import get_smtp_relay, get_storage_service
from byteinvoice.config import ARCHIVE_GENERATED_PDFS
from byteinvoice.models import GeneratePDFRequest, SendEmailRequest
from byteinvoice.services.email_service import SMTPRelay
from byteinvoice.services.pdf_service import archive_invoice_pdf, generate_invoice_pdf, pdf_filename, validate_pdf_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-pdf", summary="Render an invoice PDF from posted data")
def generate_pdf(request: GeneratePDFRequest):
    """
    Stateless PDF rendering: the caller posts the invoice, client and company
    and receives the PDF as a download.

    Returns:
        Response: application/pdf, or a JSON {"error": ...} with status 400
        (incomplete data) or 500 (render failure).
    """
    try:
        validate_pdf_request(request.invoice, request.client, request.company)
    except ValueError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})

    try:
        pdf_bytes = generate_invoice_pdf(request.invoice, request.client, request.company)
    except RuntimeError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to generate PDF", "details": str(e)},
        )

    if ARCHIVE_GENERATED_PDFS:
        archive_invoice_pdf(pdf_bytes, request.invoice, get_storage_service())

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(request.invoice)}"'},
    )


@router.post("/send-email", summary="Relay an email through caller-supplied SMTP settings")
def send_email(request: SendEmailRequest, relay: SMTPRelay = Depends(get_smtp_relay)):
    """
    Sends one HTML email (with optional attachments) through the SMTP server
    described in the request.

    Returns:
        JSON: {"success": true, "messageId": ...}; 400 when the SMTP settings
        are incomplete, 500 when delivery fails.
    """
    if not request.smtp_settings.is_complete():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "SMTP configuration is incomplete"})

    try:
        message_id = relay.send(request.smtp_settings, request.email_data)
    except (ValueError, smtplib.SMTPException, OSError) as e:
        logger.error("Error sending email to %s: %s", request.email_data.to, e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to send email", "details": str(e)},
        )
    return {"success": True, "messageId": message_id}
