# byteinvoice/core/utils.py

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from byteinvoice.config import DEFAULT_DUE_DAYS
from byteinvoice.core.calculations import calculate_invoice_totals, calculate_item_total
from byteinvoice.core.generators import generate_id, generate_invoice_number
from byteinvoice.models import Client, Invoice, InvoiceDraft, InvoiceItem, InvoiceItemInput, Product

logger = logging.getLogger(__name__)


def format_display_date(value: Optional[date]) -> str:
    """US style short date (5/1/2024) as printed on PDFs and in emails; "N/A" when unset."""
    if not value:
        return "N/A"
    return f"{value.month}/{value.day}/{value.year}"


def autofill_invoice_items(items: Iterable[InvoiceItemInput], products: Iterable[Product]) -> List[InvoiceItem]:
    """
    Turns submitted items into stored invoice items, filling product name,
    description and unit price from the product catalogue where the item
    leaves them blank.

    Args:
        items: Items as submitted on the invoice form.
        products: The product catalogue.

    Returns:
        List[InvoiceItem]: Items with their line totals calculated.
    """
    catalogue: Dict[str, Product] = {product.id: product for product in products}
    filled_items = []
    for item in items:
        product = catalogue.get(item.product_id) if item.product_id else None
        if item.product_id and product is None:
            logger.warning("Invoice item references unknown product %s", item.product_id)

        product_name = item.product_name or (product.name if product else "")
        description = item.description or (product.description if product else "") or product_name
        unit_price = item.unit_price
        if unit_price is None:
            # Products without a price are "variable pricing"
            unit_price = product.price if product and product.price is not None else 0.0

        filled_items.append(InvoiceItem(
            product_id=item.product_id,
            product_name=product_name,
            description=description,
            quantity=item.quantity,
            unit_price=unit_price,
            total=calculate_item_total(item.quantity, unit_price),
        ))
    return filled_items


def recalculate_invoice(invoice: Invoice) -> Invoice:
    """
    Recomputes every line total and the invoice totals in place.
    """
    for item in invoice.items:
        item.total = calculate_item_total(item.quantity, item.unit_price)
    invoice.apply_totals(calculate_invoice_totals(invoice.items, invoice.tax_rate, invoice.discount_rate))
    return invoice


def next_invoice_number(existing_invoices: List[Invoice], today: Optional[date] = None) -> str:
    """
    Count-based invoice number that is not already taken.

    After deletions the plain count can collide with an existing number, in
    which case the count is bumped until the number is free.
    """
    taken = {invoice.invoice_number for invoice in existing_invoices}
    count = len(existing_invoices)
    number = generate_invoice_number(count, today)
    while number in taken:
        count += 1
        number = generate_invoice_number(count, today)
    return number


def build_invoice(
    draft: InvoiceDraft,
    client: Client,
    products: Iterable[Product],
    existing_invoices: List[Invoice],
    today: Optional[date] = None,
) -> Invoice:
    """
    Assembles a new draft invoice from submitted form data.

    Fills in the invoice number, client name, the default due date
    (issue date + DEFAULT_DUE_DAYS) and every derived amount.

    Args:
        draft (InvoiceDraft): The submitted invoice form.
        client (Client): The client the invoice is billed to.
        products: The product catalogue used to autofill items.
        existing_invoices: Invoices already stored, used for numbering.
        today (date, optional): Reference date for the invoice number.

    Returns:
        Invoice: A complete invoice in "draft" status.
    """
    invoice = Invoice(
        id=generate_id(),
        invoice_number=next_invoice_number(existing_invoices, today),
        client_id=client.id,
        client_name=client.name,
        issue_date=draft.issue_date,
        due_date=draft.due_date or (draft.issue_date + timedelta(days=DEFAULT_DUE_DAYS)),
        items=autofill_invoice_items(draft.items, products),
        tax_rate=draft.tax_rate,
        discount_rate=draft.discount_rate,
        status="draft",
        notes=draft.notes,
    )
    return recalculate_invoice(invoice)


def apply_draft(invoice: Invoice, draft: InvoiceDraft, client: Client, products: Iterable[Product]) -> Invoice:
    """
    Applies an edited invoice form to a stored invoice, keeping its id,
    number and status.
    """
    updated = invoice.model_copy(deep=True)
    updated.client_id = client.id
    updated.client_name = client.name
    updated.issue_date = draft.issue_date
    updated.due_date = draft.due_date or (draft.issue_date + timedelta(days=DEFAULT_DUE_DAYS))
    updated.items = autofill_invoice_items(draft.items, products)
    updated.tax_rate = draft.tax_rate
    updated.discount_rate = draft.discount_rate
    updated.notes = draft.notes
    return recalculate_invoice(updated)
