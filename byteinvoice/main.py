# byteinvoice/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from byteinvoice.api.router import api_router
from byteinvoice.config import APP_VERSION, CORS_ORIGINS, ENVIRONMENT, LOG_LEVEL, STORAGE_BACKEND
from byteinvoice.services.database_service import get_database

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ByteInvoice Backend",
    description="Invoicing API for a single small business: clients, products, invoices, PDF rendering, email delivery and data backup.",
    version=APP_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


# Startup event: open the storage backend and load the stored database
@app.on_event("startup")
async def startup_event():
    """
    Initializes the storage service (which ensures its buckets exist) and
    loads the database document, so configuration problems show up at boot.
    """
    logger.info("Application startup (%s): storage backend %s", ENVIRONMENT, STORAGE_BACKEND)
    get_database()


@app.get("/")
async def root():
    """Root endpoint providing a welcome message."""
    return {"message": "Welcome to the ByteInvoice Backend. Visit /docs for API documentation."}
