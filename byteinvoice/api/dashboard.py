# byteinvoice/api/dashboard.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from byteinvoice.api.dependencies import get_database
from byteinvoice.models import DashboardStats, RevenueData
from byteinvoice.services.database_service import InvoiceDatabase
from byteinvoice.services.stats_service import REVENUE_PERIODS, compute_dashboard_stats, compute_revenue_series

router = APIRouter()


@router.get("/stats", response_model=DashboardStats, summary="Dashboard totals")
def dashboard_stats(db: InvoiceDatabase = Depends(get_database)):
    return compute_dashboard_stats(db.get_invoices(), db.get_clients(), db.get_products())


@router.get("/revenue", response_model=List[RevenueData], summary="Monthly revenue chart data")
def dashboard_revenue(
    period: str = "12m",
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: InvoiceDatabase = Depends(get_database),
):
    if period not in REVENUE_PERIODS:
        raise HTTPException(status_code=400, detail=f"period must be one of {', '.join(REVENUE_PERIODS)}.")
    return compute_revenue_series(db.get_invoices(), period, start, end)
