# byteinvoice/services/stats_service.py

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from byteinvoice.constants import INVOICE_STATUS_PAID, INVOICE_STATUS_SENT
from byteinvoice.core.calculations import round_currency
from byteinvoice.core.status import get_invoices_with_updated_status
from byteinvoice.models import Client, DashboardStats, Invoice, Product, RevenueData

REVENUE_PERIODS = ("1m", "3m", "6m", "12m", "lifetime", "custom")
LIFETIME_START = date(2020, 1, 1)


def compute_dashboard_stats(
    invoices: Iterable[Invoice],
    clients: Iterable[Client],
    products: Iterable[Product],
    today: Optional[date] = None,
) -> DashboardStats:
    """
    Dashboard totals. Overdue derivation is applied first, so sent invoices
    past their due date no longer count as pending.
    """
    updated = get_invoices_with_updated_status(invoices, today)
    paid = [invoice for invoice in updated if invoice.status == INVOICE_STATUS_PAID]
    sent = [invoice for invoice in updated if invoice.status == INVOICE_STATUS_SENT]
    return DashboardStats(
        total_revenue=round_currency(sum(invoice.total or 0 for invoice in paid)),
        pending_amount=round_currency(sum(invoice.total or 0 for invoice in sent)),
        total_clients=len(list(clients)),
        total_products=len(list(products)),
        total_invoices=len(updated),
        paid_invoices=len(paid),
        sent_invoices=len(sent),
    )


def _subtract_months(value: date, months: int) -> date:
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp the day, e.g. May 31 minus 3 months is Feb 28/29
    for day in (value.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"Cannot subtract {months} months from {value}")


def resolve_period(period: str, start: Optional[date] = None, end: Optional[date] = None, today: Optional[date] = None) -> Tuple[Optional[date], Optional[date]]:
    """Date range covered by a revenue chart period; (None, None) for an incomplete custom range."""
    today = today or date.today()
    if period == "1m":
        return _subtract_months(today, 1), today
    if period == "3m":
        return _subtract_months(today, 3), today
    if period == "6m":
        return _subtract_months(today, 6), today
    if period == "lifetime":
        return LIFETIME_START, today
    if period == "custom":
        return start, end
    return _subtract_months(today, 12), today


def compute_revenue_series(
    invoices: Iterable[Invoice],
    period: str = "12m",
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> List[RevenueData]:
    """
    Monthly revenue from paid invoices, grouped by issue month.

    Args:
        invoices: All invoices.
        period (str): One of "1m", "3m", "6m", "12m", "lifetime" or "custom".
        start, end (date, optional): The range for the "custom" period.
        today (date, optional): Reference date for the relative periods.

    Returns:
        List[RevenueData]: One point per month in the range, months without
        paid invoices included with zero revenue.
    """
    range_start, range_end = resolve_period(period, start, end, today)
    if range_start is None or range_end is None or range_start > range_end:
        return []

    revenue_by_month: Dict[Tuple[int, int], float] = {}
    count_by_month: Dict[Tuple[int, int], int] = {}
    for invoice in invoices:
        if invoice.status != INVOICE_STATUS_PAID:
            continue
        if not range_start <= invoice.issue_date <= range_end:
            continue
        key = (invoice.issue_date.year, invoice.issue_date.month)
        revenue_by_month[key] = revenue_by_month.get(key, 0.0) + (invoice.total or 0)
        count_by_month[key] = count_by_month.get(key, 0) + 1

    series = []
    current = date(range_start.year, range_start.month, 1)
    while current <= range_end:
        key = (current.year, current.month)
        series.append(RevenueData(
            month=current.strftime("%b %Y"),
            revenue=round_currency(revenue_by_month.get(key, 0.0)),
            invoices=count_by_month.get(key, 0),
            date=current.isoformat(),
        ))
        current = date(current.year + 1, 1, 1) if current.month == 12 else date(current.year, current.month + 1, 1)
    return series
