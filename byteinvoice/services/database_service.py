# byteinvoice/services/database_service.py

import json
import logging
import threading
from contextlib import contextmanager
from io import BytesIO
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from byteinvoice.config import APP_VERSION, DATA_BUCKET, DATA_OBJECT_NAME
from byteinvoice.models import AppData, AppSettings, Client, Company, Invoice, Product
from byteinvoice.services.storage_service import get_storage_service

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def apply_updates(record: ModelT, updates: Dict[str, Any]) -> ModelT:
    """
    Merges a partial update into `record` and re-validates the result.

    Keys may be camelCase aliases or snake_case field names. The id can not
    be changed.

    Raises:
        ValueError: For unknown keys or values that fail validation.
    """
    model_cls = type(record)
    names_by_key = {}
    for field_name, field in model_cls.model_fields.items():
        names_by_key[field_name] = field_name
        if field.alias:
            names_by_key[field.alias] = field_name

    merged = record.model_dump()
    for key, value in updates.items():
        field_name = names_by_key.get(key)
        if field_name is None:
            raise ValueError(f"Unknown field '{key}' for {model_cls.__name__}.")
        if field_name == "id":
            continue
        merged[field_name] = value
    return model_cls.model_validate(merged)


class InvoiceDatabase:
    """
    Single-tenant document database holding the company profile, clients,
    products, invoices and settings.

    The whole database is one JSON document (the export format) kept in the
    storage backend; every mutation rewrites it. Records are keyed by id and
    keep insertion order.
    """

    def __init__(self, storage, bucket_name: str = DATA_BUCKET, object_name: str = DATA_OBJECT_NAME):
        self.storage = storage
        self.bucket_name = bucket_name
        self.object_name = object_name
        self._lock = threading.RLock()
        self._company: Optional[Company] = None
        self._clients: Dict[str, Client] = {}
        self._products: Dict[str, Product] = {}
        self._invoices: Dict[str, Invoice] = {}
        self._settings: Optional[AppSettings] = None
        self._load()

    # --- Persistence ---

    def _load(self) -> None:
        if not self.storage.object_exists(self.bucket_name, self.object_name):
            logger.info("No stored database at %s/%s, starting empty", self.bucket_name, self.object_name)
            return
        raw = self.storage.download_file(self.bucket_name, self.object_name).read()
        document = json.loads(raw.decode("utf-8"))
        self._replace_tables(
            company=Company.model_validate(document["company"]) if document.get("company") else None,
            clients=[Client.model_validate(item) for item in document.get("clients", [])],
            products=[Product.model_validate(item) for item in document.get("products", [])],
            invoices=[Invoice.model_validate(item) for item in document.get("invoices", [])],
            settings=AppSettings.model_validate(document["settings"]) if document.get("settings") else None,
        )
        logger.info(
            "Loaded database: %d clients, %d products, %d invoices",
            len(self._clients), len(self._products), len(self._invoices),
        )

    def _flush(self) -> None:
        document = {
            "company": self._company.to_json_dict() if self._company else None,
            "clients": [client.to_json_dict() for client in self._clients.values()],
            "products": [product.to_json_dict() for product in self._products.values()],
            "invoices": [invoice.to_json_dict() for invoice in self._invoices.values()],
            "settings": self._settings.to_json_dict() if self._settings else None,
            "version": APP_VERSION,
        }
        payload = json.dumps(document, indent=2).encode("utf-8")
        self.storage.upload_file(
            bucket_name=self.bucket_name,
            object_name=self.object_name,
            data=BytesIO(payload),
            length=len(payload),
            content_type="application/json",
        )

    @contextmanager
    def _mutation(self):
        """
        Holds the lock for one change and persists it on exit. When the write
        to storage fails the in-memory tables are restored and the error
        propagates.
        """
        with self._lock:
            snapshot = (self._company, dict(self._clients), dict(self._products), dict(self._invoices), self._settings)
            try:
                yield
                self._flush()
            except Exception:
                self._company, self._clients, self._products, self._invoices, self._settings = snapshot
                raise

    def _replace_tables(self, company, clients, products, invoices, settings) -> None:
        self._company = company
        self._clients = {client.id: client for client in clients}
        self._products = {product.id: product for product in products}
        self._invoices = {invoice.id: invoice for invoice in invoices}
        self._settings = settings

    # --- Generic table helpers ---

    def _add(self, table: Dict[str, ModelT], record: ModelT, kind: str) -> ModelT:
        with self._lock:
            if record.id in table:
                raise ValueError(f"{kind} with id '{record.id}' already exists.")
            with self._mutation():
                table[record.id] = record
        return record

    def _update(self, table: Dict[str, ModelT], record_id: str, updates: Dict[str, Any]) -> Optional[ModelT]:
        with self._lock:
            current = table.get(record_id)
            if current is None:
                return None
            if isinstance(updates, BaseModel):
                updates = updates.model_dump(exclude={"id"})
            updated = apply_updates(current, updates)
            with self._mutation():
                table[record_id] = updated
        return updated

    def _delete(self, table: Dict[str, ModelT], record_id: str) -> bool:
        with self._lock:
            if record_id not in table:
                return False
            with self._mutation():
                del table[record_id]
        return True

    # --- Company ---

    def get_company(self) -> Optional[Company]:
        return self._company

    def set_company(self, company: Company) -> Company:
        with self._mutation():
            self._company = company
        return company

    # --- Clients ---

    def get_clients(self) -> List[Client]:
        return list(self._clients.values())

    def get_client(self, client_id: str) -> Optional[Client]:
        return self._clients.get(client_id)

    def add_client(self, client: Client) -> Client:
        return self._add(self._clients, client, "Client")

    def update_client(self, client_id: str, updates: Dict[str, Any]) -> Optional[Client]:
        return self._update(self._clients, client_id, updates)

    def delete_client(self, client_id: str) -> bool:
        return self._delete(self._clients, client_id)

    # --- Products ---

    def get_products(self) -> List[Product]:
        return list(self._products.values())

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def add_product(self, product: Product) -> Product:
        return self._add(self._products, product, "Product")

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Optional[Product]:
        return self._update(self._products, product_id, updates)

    def delete_product(self, product_id: str) -> bool:
        return self._delete(self._products, product_id)

    # --- Invoices ---

    def get_invoices(self) -> List[Invoice]:
        return list(self._invoices.values())

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self._invoices.get(invoice_id)

    def add_invoice(self, invoice: Invoice) -> Invoice:
        return self._add(self._invoices, invoice, "Invoice")

    def update_invoice(self, invoice_id: str, updates: Dict[str, Any]) -> Optional[Invoice]:
        return self._update(self._invoices, invoice_id, updates)

    def delete_invoice(self, invoice_id: str) -> bool:
        return self._delete(self._invoices, invoice_id)

    # --- Settings ---

    def get_settings(self) -> Optional[AppSettings]:
        return self._settings

    def set_settings(self, settings: AppSettings) -> AppSettings:
        with self._mutation():
            self._settings = settings
        return settings

    # --- Data management ---

    def export_data(self) -> AppData:
        """
        Snapshot of the whole database in the export format. An unset company
        or settings is exported with the defaults.
        """
        with self._lock:
            return AppData(
                company=self._company or Company(),
                clients=self.get_clients(),
                products=self.get_products(),
                invoices=self.get_invoices(),
                settings=self._settings or AppSettings(),
                version=APP_VERSION,
                export_date=datetime.now(timezone.utc).isoformat(),
            ).model_copy(deep=True)

    def import_data(self, data: AppData) -> None:
        """
        Replaces every table with the contents of `data`.

        Validation happens before anything is replaced, so a document with
        duplicate ids leaves the database untouched.
        """
        for kind, records in (("client", data.clients), ("product", data.products), ("invoice", data.invoices)):
            ids = [record.id for record in records]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Import contains duplicate {kind} ids.")

        data = data.model_copy(deep=True)
        with self._mutation():
            self._replace_tables(
                company=data.company,
                clients=data.clients,
                products=data.products,
                invoices=data.invoices,
                settings=data.settings,
            )
        logger.info(
            "Imported %d clients, %d products, %d invoices (version %s, exported %s)",
            len(data.clients), len(data.products), len(data.invoices), data.version, data.export_date,
        )

    def clear_all_data(self) -> None:
        with self._mutation():
            self._replace_tables(company=None, clients=[], products=[], invoices=[], settings=None)
        logger.info("Cleared all data")


_database = None


def get_database() -> InvoiceDatabase:
    """FastAPI dependency returning the process-wide database."""
    global _database
    if _database is None:
        _database = InvoiceDatabase(get_storage_service())
    return _database
