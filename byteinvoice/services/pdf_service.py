# byteinvoice/services/pdf_service.py

from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Image
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
import base64
import logging
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from byteinvoice.config import PDF_BUCKET
from byteinvoice.core.calculations import format_currency, format_percentage
from byteinvoice.core.utils import format_display_date
from byteinvoice.models import Client, Company, Invoice

logger = logging.getLogger(__name__)


def validate_pdf_request(invoice: Optional[Invoice], client: Optional[Client], company: Optional[Company]) -> None:
    """
    Checks that there is enough data to render an invoice.

    Raises:
        ValueError: With a message suitable for the API caller.
    """
    if invoice is None or client is None or company is None:
        raise ValueError("Missing required data: invoice, client, or company")
    if not invoice.items:
        raise ValueError("Invoice must have at least one item")
    if not client.name or not client.email:
        raise ValueError("Client must have name and email")
    if not company.name:
        raise ValueError("Company must have a name")


def pdf_filename(invoice: Invoice) -> str:
    return f"invoice-{invoice.invoice_number or invoice.id}.pdf"


def _quantity(value: float) -> str:
    # 2.0 -> "2", 1.5 -> "1.5"
    return f"{value:g}"


def _logo_flowable(logo: Optional[str]) -> Optional[Image]:
    """Decodes a base64 data URL (or bare base64) logo; None if absent or unreadable."""
    if not logo:
        return None
    encoded = logo.split(",", 1)[1] if logo.startswith("data:") else logo
    try:
        raw = base64.b64decode(encoded, validate=True)
        ImageReader(BytesIO(raw)).getSize() # Fail here rather than halfway through doc.build
        image = Image(BytesIO(raw), width=60, height=60)
        image.hAlign = "LEFT"
        return image
    except Exception as e:
        logger.warning("Skipping unreadable company logo: %s", e)
        return None


def generate_invoice_pdf(invoice: Invoice, client: Client, company: Company) -> bytes:
    """
    Renders an invoice as an A4 PDF.

    Args:
        invoice (Invoice): The invoice with its computed totals.
        client (Client): The billed client; an advance payment is deducted from the printed total.
        company (Company): The issuing company.

    Returns:
        bytes: The PDF document.

    Raises:
        ValueError: If the input fails validate_pdf_request.
        RuntimeError: If reportlab fails to build the document.
    """
    validate_pdf_request(invoice, client, company)

    # Use BytesIO to create the PDF in memory
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4,
                            rightMargin=0.6*inch, leftMargin=0.6*inch,
                            topMargin=0.6*inch, bottomMargin=0.6*inch,
                            title=f"Invoice {invoice.invoice_number}")
    elements = []
    styles = getSampleStyleSheet()
    normal = styles['Normal']
    right = ParagraphStyle('RightAligned', parent=normal, alignment=TA_RIGHT)
    right_title = ParagraphStyle('RightTitle', parent=styles['h1'], alignment=TA_RIGHT)

    # --- Header: company on the left, invoice details on the right ---
    company_lines = [Paragraph(f"<b>{escape(company.name)}</b>", styles['h2'])]
    company_lines.append(Paragraph(escape(company.address or ""), normal))
    company_lines.append(Paragraph(escape(f"{company.city or ''}, {company.state or ''} {company.zip_code or ''}"), normal))
    company_lines.append(Paragraph(escape(company.country or ""), normal))
    if company.phone:
        company_lines.append(Paragraph(f"Phone: {escape(company.phone)}", normal))
    company_lines.append(Paragraph(f"Email: {escape(company.email or '')}", normal))
    if company.website:
        company_lines.append(Paragraph(f"Website: {escape(company.website)}", normal))
    if company.tax_id:
        company_lines.append(Paragraph(f"Tax ID: {escape(company.tax_id)}", normal))

    logo = _logo_flowable(company.logo)
    company_cell = [logo, Spacer(1, 0.1 * inch)] + company_lines if logo else company_lines

    invoice_cell = [
        Paragraph("<b>INVOICE</b>", right_title),
        Paragraph(f"<b>Invoice #:</b> {escape(invoice.invoice_number)}", right),
        Paragraph(f"<b>Date:</b> {format_display_date(invoice.issue_date)}", right),
        Paragraph(f"<b>Due Date:</b> {format_display_date(invoice.due_date)}", right),
        Paragraph(f"<b>Status:</b> {escape(invoice.status)}", right),
    ]

    header = Table([[company_cell, invoice_cell]], colWidths=[3.9*inch, 3.0*inch])
    header.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
    ]))
    elements.append(header)
    elements.append(Spacer(1, 0.4 * inch))

    # --- Client Information ---
    elements.append(Paragraph("<b>Bill To:</b>", styles['h3']))
    elements.append(Paragraph(escape(client.name), normal))
    elements.append(Paragraph(escape(client.address or ""), normal))
    elements.append(Paragraph(escape(f"{client.city or ''}, {client.state or ''} {client.zip_code or ''}"), normal))
    elements.append(Paragraph(escape(client.country or ""), normal))
    elements.append(Paragraph(f"Email: {escape(client.email)}", normal))
    if client.phone:
        elements.append(Paragraph(f"Phone: {escape(client.phone)}", normal))
    elements.append(Spacer(1, 0.3 * inch))

    # --- Items Table ---
    data = [['Description', 'Qty', 'Rate', 'Amount']]
    for item in invoice.items:
        data.append([
            Paragraph(escape(item.description or item.product_name), normal),
            _quantity(item.quantity),
            format_currency(item.unit_price),
            format_currency(item.total or 0.0),
        ])

    item_table = Table(data, colWidths=[3.9*inch, 0.8*inch, 1.1*inch, 1.1*inch], repeatRows=1)
    item_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#F0F0F0')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('ALIGN', (1, 0), (1, -1), 'CENTER'),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, -1), 0.5, colors.HexColor('#E0E0E0')),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(item_table)
    elements.append(Spacer(1, 0.2 * inch))

    # --- Totals ---
    advance_payment = client.advance_payment or 0.0
    totals_data = [['Subtotal:', format_currency(invoice.subtotal)]]
    if invoice.tax_rate > 0:
        totals_data.append([f"Tax ({format_percentage(invoice.tax_rate)}):", format_currency(invoice.tax_amount)])
    if invoice.discount_amount > 0:
        totals_data.append(['Discount:', f"-{format_currency(invoice.discount_amount)}"])
    if advance_payment > 0:
        totals_data.append(['Advance Payment:', f"-{format_currency(advance_payment)}"])
    totals_data.append(['Total:', format_currency(invoice.total - advance_payment)])

    totals_table = Table(totals_data, colWidths=[5.7*inch, 1.2*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, -1), (-1, -1), 12),
        ('LINEABOVE', (1, -1), (1, -1), 1, colors.black),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(totals_table)

    # --- Notes ---
    if invoice.notes:
        elements.append(Spacer(1, 0.4 * inch))
        elements.append(Paragraph("<b>Notes:</b>", styles['h3']))
        elements.append(Paragraph(escape(invoice.notes).replace("\n", "<br/>"), normal))

    # Build PDF in memory
    try:
        doc.build(elements)
    except Exception as e:
        logger.error("Error generating PDF for invoice %s: %s", invoice.invoice_number or invoice.id, e)
        raise RuntimeError(f"Failed to generate PDF: {e}") from e

    pdf_bytes = buffer.getvalue()
    logger.info("Generated PDF for invoice %s (%d bytes)", invoice.invoice_number or invoice.id, len(pdf_bytes))
    return pdf_bytes


def archive_invoice_pdf(pdf_bytes: bytes, invoice: Invoice, storage) -> str:
    """
    Uploads a rendered PDF to the PDF bucket.

    Returns:
        str: The storage path (bucket/object) of the PDF.
    """
    return storage.upload_file(
        bucket_name=PDF_BUCKET,
        object_name=pdf_filename(invoice),
        data=BytesIO(pdf_bytes),
        length=len(pdf_bytes),
        content_type="application/pdf"
    )
