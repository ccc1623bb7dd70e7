# byteinvoice/core/status.py

import math
from datetime import date, datetime
from typing import Iterable, List, Optional

from byteinvoice.constants import INVOICE_STATUS_OVERDUE, INVOICE_STATUS_PAID, INVOICE_STATUS_SENT
from byteinvoice.models import Invoice


def _as_date(value) -> date:
    # Comparisons are by calendar day only
    if isinstance(value, datetime):
        return value.date()
    return value


def is_invoice_overdue(invoice: Invoice, today: Optional[date] = None) -> bool:
    """
    True when the invoice's due date lies before `today`.

    Paid and already overdue invoices never count as (newly) overdue.
    """
    if invoice.status in (INVOICE_STATUS_PAID, INVOICE_STATUS_OVERDUE):
        return False
    today = _as_date(today) if today else date.today()
    return _as_date(invoice.due_date) < today


def derive_invoice_status(invoice: Invoice, today: Optional[date] = None) -> Invoice:
    """
    Reclassifies a `sent` invoice as `overdue` once its due date has passed.

    Drafts are left alone even when past due, and the rule never moves an
    invoice back from overdue. The input is not mutated; a copy is returned
    when the status changes.

    Args:
        invoice (Invoice): The invoice to check.
        today (date, optional): Reference date, defaults to the current date.

    Returns:
        Invoice: The same invoice, or an updated copy with status "overdue".
    """
    if invoice.status == INVOICE_STATUS_SENT and is_invoice_overdue(invoice, today):
        return invoice.model_copy(update={"status": INVOICE_STATUS_OVERDUE})
    return invoice


def get_invoices_with_updated_status(invoices: Iterable[Invoice], today: Optional[date] = None) -> List[Invoice]:
    return [derive_invoice_status(invoice, today) for invoice in invoices]


def days_overdue(invoice: Invoice, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since midnight of the due date, never negative."""
    now = now or datetime.now()
    due = datetime.combine(_as_date(invoice.due_date), datetime.min.time())
    elapsed_days = (now - due).total_seconds() / 86400
    return max(0, math.floor(elapsed_days))
