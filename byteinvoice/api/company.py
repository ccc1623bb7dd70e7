# byteinvoice/api/company.py

from fastapi import APIRouter, Depends, HTTPException, status

from byteinvoice.api.dependencies import company_or_default, get_database
from byteinvoice.core.validation import validate_company
from byteinvoice.models import Company
from byteinvoice.services.database_service import InvoiceDatabase

router = APIRouter()


@router.get("", response_model=Company, summary="Get the company profile")
def get_company(db: InvoiceDatabase = Depends(get_database)):
    """Returns the stored profile, or an empty one if none was saved yet."""
    return company_or_default(db)


@router.put("", response_model=Company, summary="Replace the company profile")
def set_company(company: Company, db: InvoiceDatabase = Depends(get_database)):
    try:
        validate_company(company)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return db.set_company(company)
