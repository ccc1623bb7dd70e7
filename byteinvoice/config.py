# byteinvoice/config.py

import os

# --- General Application Configuration ---
# Setting the environment to development by default if not specified
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
APP_VERSION = "1.0.0" # Written into every export document
# Comma separated list of browser origins allowed to call the API
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# --- Storage Configuration ---
# "local" keeps everything under LOCAL_DATA_DIR, "minio" uses S3-compatible object storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()
LOCAL_DATA_DIR = os.getenv("LOCAL_DATA_DIR", os.path.join(os.getcwd(), "data"))

# Bucket names (directories for the local backend)
DATA_BUCKET = os.getenv("DATA_BUCKET", "byteinvoice-data")
DATA_OBJECT_NAME = os.getenv("DATA_OBJECT_NAME", "byteinvoice-db.json")
PDF_BUCKET = os.getenv("PDF_BUCKET", "generated-invoices")
BACKUP_BUCKET = os.getenv("BACKUP_BUCKET", "backups")

# --- MinIO S3 Compatible Storage Configuration ---
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000") # MinIO server endpoint
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin") # MinIO access key
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin") # MinIO secret key
MINIO_SECURE = os.getenv("MINIO_SECURE", "False").lower() == "true" # Use HTTPS if true

# Keep a copy of every rendered PDF in PDF_BUCKET
ARCHIVE_GENERATED_PDFS = os.getenv("ARCHIVE_GENERATED_PDFS", "False").lower() == "true"

# --- Email ---
SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "30")) # Seconds

# --- Invoice Defaults ---
DEFAULT_DUE_DAYS = int(os.getenv("DEFAULT_DUE_DAYS", "30"))
DEFAULT_TAX_RATE = float(os.getenv("DEFAULT_TAX_RATE", "0"))
DEFAULT_DISCOUNT_RATE = float(os.getenv("DEFAULT_DISCOUNT_RATE", "0"))
CURRENCY = os.getenv("CURRENCY", "USD")
