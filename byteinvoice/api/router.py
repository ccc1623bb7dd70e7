# byteinvoice/api/router.py

from fastapi import APIRouter

from byteinvoice.api import clients, company, dashboard, data, documents, invoices, products, settings

api_router = APIRouter()
api_router.include_router(company.router, prefix="/company", tags=["company"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(settings.router, tags=["settings"])
api_router.include_router(data.router, prefix="/data", tags=["data"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(documents.router, tags=["documents"])
