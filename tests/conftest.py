# tests/conftest.py

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from byteinvoice.api.dependencies import get_smtp_relay, get_storage_service
from byteinvoice.main import app
from byteinvoice.models import Client, Company, Invoice, InvoiceItem, Product, SMTPSettings
from byteinvoice.services.database_service import InvoiceDatabase, get_database
from byteinvoice.services.storage_service import LocalStorageService


@pytest.fixture
def storage(tmp_path):
    return LocalStorageService(base_dir=str(tmp_path / "data"))


@pytest.fixture
def db(storage):
    return InvoiceDatabase(storage)


@pytest.fixture
def company():
    return Company(
        name="Byte Works",
        address="1 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="USA",
        phone="555-0100",
        email="billing@byteworks.test",
        website="https://byteworks.test",
    )


@pytest.fixture
def client_record():
    return Client(
        id="client-1",
        name="Acme Corp",
        email="ap@acme.test",
        address="9 Side St",
        city="Shelbyville",
        state="IL",
        country="USA",
    )


@pytest.fixture
def product():
    return Product(
        id="product-1",
        name="Consulting",
        description="Hourly consulting",
        price=50.0,
        sku="SER-CON-001",
        category="Services",
    )


@pytest.fixture
def invoice(client_record):
    today = date.today()
    return Invoice(
        id="invoice-1",
        invoice_number="INV-202405-0001",
        client_id=client_record.id,
        client_name=client_record.name,
        issue_date=today - timedelta(days=10),
        due_date=today + timedelta(days=20),
        items=[InvoiceItem(product_id="product-1", product_name="Consulting", description="Hourly consulting", quantity=2, unit_price=50)],
        subtotal=100.0,
        tax_rate=10.0,
        tax_amount=10.0,
        total=110.0,
        status="sent",
    )


@pytest.fixture
def smtp_settings():
    return SMTPSettings(
        host="smtp.test",
        port=587,
        username="mailer@byteworks.test",
        password="secret",
        from_name="Byte Works",
        from_email="billing@byteworks.test",
    )


@pytest.fixture
def relay():
    relay = MagicMock()
    relay.send.return_value = "<message-id@byteworks.test>"
    return relay


@pytest.fixture
def api(db, storage, relay):
    """TestClient wired to a temporary database and a mocked SMTP relay."""
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_smtp_relay] = lambda: relay
    # Not used as a context manager, so the startup hook never opens the real data directory
    yield TestClient(app)
    app.dependency_overrides.clear()
