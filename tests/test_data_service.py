# tests/test_data_service.py

import json
from datetime import date

import pytest

from byteinvoice.models import AppData
from byteinvoice.services.data_service import backup_filename, create_backup, export_data, parse_import_data


def test_export_is_indented_camel_case_json(client_record, invoice):
    text = export_data(AppData(clients=[client_record], invoices=[invoice]))
    assert text.startswith('{\n  "company"')
    document = json.loads(text)
    assert document["clients"][0]["name"] == "Acme Corp"
    assert document["invoices"][0]["clientId"] == "client-1"
    assert "exportDate" in document


def test_backup_filename():
    assert backup_filename(date(2024, 5, 1)) == "byte-invoice-backup-2024-05-01.json"


def test_parse_import_round_trip(company, client_record, product, invoice):
    original = AppData(company=company, clients=[client_record], products=[product], invoices=[invoice])
    parsed = parse_import_data(export_data(original).encode("utf-8"))
    assert parsed.clients == original.clients
    assert parsed.invoices[0].due_date == invoice.due_date


def test_parse_import_accepts_legacy_timestamps_without_settings():
    raw = json.dumps({
        "company": {"name": "Byte Works"},
        "clients": [],
        "products": [],
        "invoices": [{
            "id": "i1",
            "invoiceNumber": "INV-202401-0001",
            "issueDate": "2024-01-05T00:00:00.000Z",
            "dueDate": "2024-02-04T00:00:00.000Z",
            "items": [],
            "status": "paid",
        }],
        "version": "1.0.0",
        "exportDate": "2024-03-01T12:00:00.000Z",
    })
    parsed = parse_import_data(raw)
    assert parsed.invoices[0].issue_date == date(2024, 1, 5)
    assert parsed.settings.smtp.port == 587


@pytest.mark.parametrize("raw", [
    "not json",
    "[]",
    json.dumps({"company": {}, "clients": [], "products": [], "invoices": [], "version": "1", "exportDate": "x"}),
    json.dumps({"company": {"name": "A"}, "clients": {}, "products": [], "invoices": [], "version": "1", "exportDate": "x"}),
    json.dumps({"company": {"name": "A"}, "clients": [{"name": "no email"}], "products": [], "invoices": [], "version": "1", "exportDate": "x"}),
])
def test_parse_import_rejects_invalid_documents(raw):
    with pytest.raises(ValueError, match="Failed to parse import file"):
        parse_import_data(raw)


def test_create_backup(storage, client_record):
    path = create_backup(AppData(clients=[client_record]), storage, today=date(2024, 5, 1))
    assert path == "backups/byte-invoice-backup-2024-05-01.json"
    stored = json.loads(storage.download_file("backups", "byte-invoice-backup-2024-05-01.json").read())
    assert stored["clients"][0]["id"] == "client-1"
