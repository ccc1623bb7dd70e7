# byteinvoice/services/email_service.py

import base64
import binascii
import logging
import re
import smtplib
import ssl
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Any, Dict, Mapping, Optional

from byteinvoice import email_templates
from byteinvoice.config import SMTP_TIMEOUT
from byteinvoice.core.status import days_overdue
from byteinvoice.core.utils import format_display_date
from byteinvoice.models import Client, Company, EmailAttachment, EmailData, EmailTemplate, Invoice, SMTPSettings
from byteinvoice.services.pdf_service import generate_invoice_pdf, pdf_filename

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# statusMessage, statusColor, urgencyLevel per invoice status
STATUS_PRESENTATION = {
    "paid": ("Thank you for your payment! This invoice has been marked as paid.", "#16a34a", "confirmation"),
    "overdue": ("This invoice is now overdue. Please arrange payment as soon as possible to avoid any service interruptions.", "#dc2626", "urgent"),
    "sent": ("This invoice is awaiting payment. Please review the details and process payment by the due date.", "#ea580c", "normal"),
}
DEFAULT_PRESENTATION = ("Please review the attached invoice and process payment by the due date.", "#2563eb", "normal")


def replace_template_variables(template: str, variables: Mapping[str, Any]) -> str:
    """
    Substitutes every {{name}} placeholder found in `variables`.

    Placeholders without a matching variable are left as they are; None values
    become empty strings.
    """
    def _substitute(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, template or "")


def build_template_variables(invoice: Invoice, client: Client, company: Company, now: Optional[datetime] = None) -> Dict[str, str]:
    """
    The fixed variable set available to email templates.

    Args:
        invoice (Invoice): The invoice the email is about.
        client (Client): The recipient.
        company (Company): The sender's company profile.
        now (datetime, optional): Reference time for daysOverdue.

    Returns:
        Dict[str, str]: Variable name to display value.
    """
    status_message, status_color, urgency_level = STATUS_PRESENTATION.get(invoice.status, DEFAULT_PRESENTATION)
    status = invoice.status or "draft"
    return {
        "invoiceNumber": invoice.invoice_number or invoice.id or "N/A",
        "clientName": client.name or "Valued Customer",
        "companyName": company.name or "Your Company",
        "total": f"{invoice.total or 0:.2f}",
        "dueDate": format_display_date(invoice.due_date),
        "issueDate": format_display_date(invoice.issue_date),
        "clientEmail": client.email or "",
        "companyEmail": company.email or "",
        "companyPhone": company.phone or "",
        "companyAddress": company.address or "",
        "companyWebsite": company.website or "",
        "invoiceStatus": status[:1].upper() + status[1:],
        "statusMessage": status_message,
        "statusColor": status_color,
        "urgencyLevel": urgency_level,
        "daysOverdue": str(days_overdue(invoice, now)),
    }


def decode_attachment_content(content: Any) -> bytes:
    """
    Accepts the attachment encodings a JSON client can send: raw bytes, a
    list of byte values, a serialized Node Buffer ({"type": "Buffer",
    "data": [...]}) or a base64 string. Strings that are not valid base64 are
    sent as UTF-8 text.
    """
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    if isinstance(content, Mapping) and content.get("type") == "Buffer" and isinstance(content.get("data"), list):
        content = content["data"]
    if isinstance(content, list):
        try:
            return bytes(content)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Attachment byte values must be integers in 0..255: {e}") from e
    if isinstance(content, str):
        try:
            return base64.b64decode(content, validate=True)
        except binascii.Error:
            return content.encode("utf-8")
    raise ValueError(f"Unsupported attachment content of type {type(content).__name__}")


def build_message(smtp_settings: SMTPSettings, email_data: EmailData) -> EmailMessage:
    """Builds the MIME message (HTML body plus attachments) with a fresh Message-ID."""
    sender = smtp_settings.from_email or smtp_settings.username
    message = EmailMessage()
    message["From"] = formataddr((smtp_settings.from_name, sender))
    message["To"] = email_data.to
    message["Subject"] = email_data.subject
    message["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] or None)
    message.set_content(email_data.html, subtype="html")

    for attachment in email_data.attachments or []:
        content_type = attachment.content_type or "application/pdf"
        maintype, _, subtype = content_type.partition("/")
        message.add_attachment(
            decode_attachment_content(attachment.content),
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
    return message


class SMTPRelay:
    """
    Sends one message per call through the given SMTP server. No retries.

    secure=True opens an implicit TLS connection (usually port 465);
    otherwise the connection is upgraded with STARTTLS when the server
    offers it.
    """

    def __init__(self, timeout: float = SMTP_TIMEOUT):
        self.timeout = timeout

    def send(self, smtp_settings: SMTPSettings, email_data: EmailData) -> str:
        """
        Returns:
            str: The Message-ID of the sent message.

        Raises:
            ValueError: If the SMTP configuration is incomplete.
            smtplib.SMTPException, OSError: On transport failures.
        """
        if not smtp_settings.is_complete():
            raise ValueError("SMTP configuration is incomplete")

        message = build_message(smtp_settings, email_data)
        logger.info(
            "Sending email via %s:%s to %s (subject=%r, attachments=%d)",
            smtp_settings.host, smtp_settings.port, email_data.to, email_data.subject, len(email_data.attachments or []),
        )
        context = ssl.create_default_context()
        if smtp_settings.secure:
            connection = smtplib.SMTP_SSL(smtp_settings.host, smtp_settings.port, timeout=self.timeout, context=context)
        else:
            connection = smtplib.SMTP(smtp_settings.host, smtp_settings.port, timeout=self.timeout)

        with connection as server:
            if not smtp_settings.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            server.login(smtp_settings.username, smtp_settings.password)
            server.send_message(message)

        logger.info("Email sent successfully: %s", message["Message-ID"])
        return message["Message-ID"]


def send_email(smtp_settings: SMTPSettings, email_data: EmailData, relay: Optional[SMTPRelay] = None) -> bool:
    """
    Sends an email and reports success as a boolean. Failures are logged,
    never raised.
    """
    relay = relay or SMTPRelay()
    try:
        relay.send(smtp_settings, email_data)
        return True
    except (ValueError, smtplib.SMTPException, OSError) as e:
        logger.error("Error sending email to %s: %s", email_data.to, e)
        return False


def _can_send(client: Client, smtp_settings: SMTPSettings) -> bool:
    if not client.email or "@" not in client.email:
        logger.error("Invalid client email address: %r", client.email)
        return False
    if not smtp_settings.is_complete():
        logger.error("Incomplete SMTP settings")
        return False
    return True


def render_email(subject: str, body: str, variables: Mapping[str, Any], to: str) -> EmailData:
    return EmailData(
        to=to,
        subject=replace_template_variables(subject, variables),
        html=replace_template_variables(body, variables),
    )


def send_invoice(
    invoice: Invoice,
    client: Client,
    company: Company,
    smtp_settings: SMTPSettings,
    template: Optional[EmailTemplate] = None,
    relay: Optional[SMTPRelay] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Emails an invoice to its client with the PDF attached.

    If the PDF can not be rendered the email is still sent, without the
    attachment.

    Returns:
        bool: True when the message was handed to the SMTP server.
    """
    logger.info("Sending invoice %s to %s", invoice.invoice_number or invoice.id, client.email)
    if not _can_send(client, smtp_settings):
        return False

    variables = build_template_variables(invoice, client, company, now)
    subject = template.subject if template and template.subject else email_templates.INVOICE_SUBJECTS.get(invoice.status, email_templates.INVOICE_SUBJECT_DEFAULT)
    body = template.body if template and template.body else email_templates.INVOICE_BODY
    email_data = render_email(subject, body, variables, client.email)

    try:
        pdf_bytes = generate_invoice_pdf(invoice, client, company)
        email_data.attachments = [EmailAttachment(
            filename=pdf_filename(invoice),
            content=pdf_bytes,
            content_type="application/pdf",
        )]
    except (ValueError, RuntimeError) as e:
        logger.warning("PDF generation failed, sending email without attachment: %s", e)

    return send_email(smtp_settings, email_data, relay)


def send_reminder(
    invoice: Invoice,
    client: Client,
    company: Company,
    smtp_settings: SMTPSettings,
    template: Optional[EmailTemplate] = None,
    relay: Optional[SMTPRelay] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Sends a friendly payment reminder (no attachment)."""
    if not _can_send(client, smtp_settings):
        return False
    variables = build_template_variables(invoice, client, company, now)
    subject = template.subject if template and template.subject else email_templates.REMINDER_SUBJECT
    body = template.body if template and template.body else email_templates.REMINDER_BODY
    return send_email(smtp_settings, render_email(subject, body, variables, client.email), relay)


def send_overdue_notice(
    invoice: Invoice,
    client: Client,
    company: Company,
    smtp_settings: SMTPSettings,
    template: Optional[EmailTemplate] = None,
    relay: Optional[SMTPRelay] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Sends an urgent overdue notice including the number of days overdue."""
    if not _can_send(client, smtp_settings):
        return False
    variables = build_template_variables(invoice, client, company, now)
    subject = template.subject if template and template.subject else email_templates.OVERDUE_SUBJECT
    body = template.body if template and template.body else email_templates.OVERDUE_BODY
    return send_email(smtp_settings, render_email(subject, body, variables, client.email), relay)


def send_test_email(smtp_settings: SMTPSettings, company: Optional[Company] = None, relay: Optional[SMTPRelay] = None) -> bool:
    """Sends a short test message to the configured sender address."""
    recipient = smtp_settings.from_email or smtp_settings.username
    variables = {"companyName": (company.name if company else "") or "Your Company"}
    email_data = render_email(email_templates.TEST_SUBJECT, email_templates.TEST_BODY, variables, recipient)
    return send_email(smtp_settings, email_data, relay)
