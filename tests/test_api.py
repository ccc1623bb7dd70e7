# tests/test_api.py

import json
import smtplib
from datetime import date, timedelta
from unittest.mock import patch

from byteinvoice.api.dependencies import get_smtp_relay
from byteinvoice.models import AppSettings
from byteinvoice.services.email_service import SMTPRelay


def _setup_company_and_client(api, company, client_record):
    assert api.put("/api/company", json=company.to_json_dict()).status_code == 200
    assert api.post("/api/clients", json=client_record.to_json_dict()).status_code == 201


def _create_invoice(api, **overrides):
    payload = {
        "clientId": "client-1",
        "issueDate": "2024-05-01",
        "items": [{"productId": "product-1", "quantity": 2}],
        "taxRate": 10,
    }
    payload.update(overrides)
    return api.post("/api/invoices", json=payload)


def _configure_smtp(db, smtp_settings):
    db.set_settings(AppSettings(smtp=smtp_settings))


def test_root(api):
    response = api.get("/")
    assert response.status_code == 200
    assert "ByteInvoice" in response.json()["message"]


def test_company_defaults_and_validation(api, company):
    assert api.get("/api/company").json()["name"] == ""

    bad = company.to_json_dict() | {"email": "not-an-email"}
    response = api.put("/api/company", json=bad)
    assert response.status_code == 400
    assert response.json()["detail"] == "email: Invalid email address"

    assert api.put("/api/company", json=company.to_json_dict()).json()["zipCode"] == "62701"


def test_client_crud(api, client_record):
    created = api.post("/api/clients", json=client_record.to_json_dict())
    assert created.status_code == 201
    assert created.json()["id"] == "client-1"

    assert api.post("/api/clients", json=client_record.to_json_dict()).status_code == 400
    assert [c["name"] for c in api.get("/api/clients", params={"q": "acme"}).json()] == ["Acme Corp"]
    assert api.get("/api/clients", params={"q": "zzz"}).json() == []

    patched = api.patch("/api/clients/client-1", json={"phone": "555-0199", "advancePayment": 20})
    assert patched.status_code == 200
    assert patched.json()["advancePayment"] == 20

    assert api.patch("/api/clients/client-1", json={"email": "broken"}).status_code == 400
    assert api.patch("/api/clients/client-1", json={"nickname": "x"}).status_code == 400
    assert api.get("/api/clients/client-1").json()["email"] == "ap@acme.test"

    assert api.delete("/api/clients/client-1").status_code == 204
    assert api.get("/api/clients/client-1").status_code == 404
    assert api.delete("/api/clients/client-1").status_code == 404


def test_client_missing_required_field(api):
    response = api.post("/api/clients", json={"name": "No Email"})
    assert response.status_code == 422


def test_product_sku_is_generated(api, product):
    payload = product.to_json_dict() | {"id": "product-2", "sku": ""}
    created = api.post("/api/products", json=payload)
    assert created.status_code == 201
    assert created.json()["sku"].startswith("SER-CON-")

    assert api.get("/api/products", params={"category": "services"}).json()[0]["id"] == "product-2"
    assert api.patch("/api/products/product-2", json={"price": 75}).json()["price"] == 75
    assert api.patch("/api/products/product-2", json={"price": -1}).status_code == 400
    assert api.delete("/api/products/product-2").status_code == 204
    assert api.get("/api/products/product-2").status_code == 404


def test_invoice_lifecycle(api, db, company, client_record, product):
    _setup_company_and_client(api, company, client_record)
    db.add_product(product)

    created = _create_invoice(api)
    assert created.status_code == 201
    invoice = created.json()
    assert invoice["status"] == "draft"
    assert invoice["dueDate"] == "2024-05-31"
    assert invoice["items"][0]["productName"] == "Consulting"
    assert (invoice["subtotal"], invoice["taxAmount"], invoice["total"]) == (100.0, 10.0, 110.0)

    second = _create_invoice(api).json()
    assert second["invoiceNumber"] != invoice["invoiceNumber"]

    edited = api.put(f"/api/invoices/{invoice['id']}", json={
        "clientId": "client-1",
        "issueDate": "2024-05-01",
        "items": [{"productName": "Custom", "quantity": 1, "unitPrice": 40}],
        "discountRate": 10,
    })
    assert edited.status_code == 200
    assert edited.json()["invoiceNumber"] == invoice["invoiceNumber"]
    assert edited.json()["total"] == 36.0

    status = api.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "paid"})
    assert status.json()["status"] == "paid"
    assert api.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "lost"}).status_code == 422

    assert [i["id"] for i in api.get("/api/invoices", params={"status": "paid"}).json()] == [invoice["id"]]
    assert len(api.get("/api/invoices", params={"q": "acme"}).json()) == 2
    assert api.get("/api/invoices", params={"status": "bogus"}).status_code == 400

    assert api.delete(f"/api/invoices/{invoice['id']}").status_code == 204
    assert api.get(f"/api/invoices/{invoice['id']}").status_code == 404


def test_create_invoice_validation(api, company, client_record):
    _setup_company_and_client(api, company, client_record)
    assert _create_invoice(api, clientId="unknown").status_code == 400
    assert _create_invoice(api, items=[]).status_code == 422
    assert _create_invoice(api, taxRate=150).status_code == 422
    assert _create_invoice(api, items=[{"productName": "X", "quantity": 0, "unitPrice": 1}]).status_code == 422


def test_overdue_status_is_derived_and_refreshed(api, db, invoice):
    past_due = invoice.model_copy(update={"due_date": date.today() - timedelta(days=2)})
    db.add_invoice(past_due)

    assert api.get("/api/invoices").json()[0]["status"] == "overdue"
    assert api.get("/api/invoices/invoice-1").json()["status"] == "overdue"
    # Reads do not persist the derived status
    assert db.get_invoice("invoice-1").status == "sent"

    refreshed = api.post("/api/invoices/refresh-status").json()
    assert [i["id"] for i in refreshed] == ["invoice-1"]
    assert db.get_invoice("invoice-1").status == "overdue"
    assert api.post("/api/invoices/refresh-status").json() == []


def test_mutation_responses_report_derived_status(api, db, company, client_record, invoice, smtp_settings, relay):
    _setup_company_and_client(api, company, client_record)
    _configure_smtp(db, smtp_settings)
    past_due = date.today() - timedelta(days=2)
    db.add_invoice(invoice.model_copy(update={"due_date": past_due}))

    for action in ("send", "remind", "overdue-notice"):
        body = api.post(f"/api/invoices/invoice-1/{action}").json()
        assert body["success"] is True
        assert body["invoice"]["status"] == "overdue"

    edited = api.put("/api/invoices/invoice-1", json={
        "clientId": "client-1",
        "issueDate": (past_due - timedelta(days=30)).isoformat(),
        "dueDate": past_due.isoformat(),
        "items": [{"productName": "Support", "quantity": 1, "unitPrice": 80}],
    })
    assert edited.status_code == 200
    assert edited.json()["status"] == "overdue"

    assert api.patch("/api/invoices/invoice-1/status", json={"status": "sent"}).json()["status"] == "overdue"
    assert db.get_invoice("invoice-1").status == "sent"


def test_send_invoice_marks_draft_as_sent(api, db, company, client_record, invoice, smtp_settings, relay):
    _setup_company_and_client(api, company, client_record)
    _configure_smtp(db, smtp_settings)
    db.add_invoice(invoice.model_copy(update={"status": "draft"}))

    response = api.post("/api/invoices/invoice-1/send")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["invoice"]["status"] == "sent"
    assert body["invoice"]["emailSent"] is True

    email_data = relay.send.call_args.args[1]
    assert email_data.subject == "Invoice INV-202405-0001 from Byte Works"
    assert email_data.attachments[0].filename == "invoice-INV-202405-0001.pdf"


def test_send_invoice_failure_leaves_invoice_unchanged(api, db, company, client_record, invoice, smtp_settings, relay):
    _setup_company_and_client(api, company, client_record)
    _configure_smtp(db, smtp_settings)
    db.add_invoice(invoice.model_copy(update={"status": "draft"}))
    relay.send.side_effect = smtplib.SMTPServerDisconnected("gone")

    body = api.post("/api/invoices/invoice-1/send").json()
    assert body["success"] is False
    assert db.get_invoice("invoice-1").status == "draft"
    assert db.get_invoice("invoice-1").email_sent is None


def test_send_requires_smtp_settings(api, company, client_record, db, invoice):
    _setup_company_and_client(api, company, client_record)
    db.add_invoice(invoice)
    response = api.post("/api/invoices/invoice-1/send")
    assert response.status_code == 400
    assert response.json()["detail"] == "SMTP configuration is incomplete"
    assert api.post("/api/invoices/missing/send").status_code == 404


def test_reminder_and_overdue_notice_stamp_last_reminder(api, db, company, client_record, invoice, smtp_settings, relay):
    _setup_company_and_client(api, company, client_record)
    _configure_smtp(db, smtp_settings)
    db.add_invoice(invoice)

    body = api.post("/api/invoices/invoice-1/remind").json()
    assert body["success"] is True
    assert body["invoice"]["lastReminderSent"] is not None
    assert relay.send.call_args.args[1].subject == "Payment Reminder - Invoice INV-202405-0001"

    body = api.post("/api/invoices/invoice-1/overdue-notice").json()
    assert body["success"] is True
    assert relay.send.call_args.args[1].subject == "OVERDUE: Invoice INV-202405-0001"


def test_invoice_pdf_download(api, db, company, client_record, invoice):
    db.add_invoice(invoice)
    assert api.get("/api/invoices/invoice-1/pdf").status_code == 400

    _setup_company_and_client(api, company, client_record)
    response = api.get("/api/invoices/invoice-1/pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="invoice-INV-202405-0001.pdf"'
    assert response.content.startswith(b"%PDF")


def test_settings_round_trip(api, smtp_settings):
    settings = api.get("/api/settings").json()
    assert settings["smtp"]["port"] == 587
    assert len(settings["emailTemplates"]) == 3

    settings["smtp"] = smtp_settings.to_json_dict()
    saved = api.put("/api/settings", json=settings).json()
    assert saved["smtp"]["host"] == "smtp.test"
    assert api.get("/api/settings").json()["smtp"]["fromEmail"] == "billing@byteworks.test"


def test_test_email(api, smtp_settings, relay):
    response = api.post("/api/test-email", json=smtp_settings.to_json_dict())
    assert response.json() == {"success": True}
    assert relay.send.call_args.args[1].to == "billing@byteworks.test"


def test_data_export_import_and_clear(api, db, company, client_record, invoice):
    _setup_company_and_client(api, company, client_record)
    db.add_invoice(invoice)

    exported = api.get("/api/data/export")
    assert exported.status_code == 200
    assert exported.headers["content-disposition"].startswith('attachment; filename="byte-invoice-backup-')
    document = exported.json()
    assert document["invoices"][0]["invoiceNumber"] == "INV-202405-0001"

    assert api.delete("/api/data").status_code == 204
    assert api.get("/api/clients").json() == []

    imported = api.post("/api/data/import", files={"file": ("backup.json", json.dumps(document), "application/json")})
    assert imported.json() == {"success": True, "clients": 1, "products": 0, "invoices": 1}
    assert api.get("/api/clients/client-1").status_code == 200


def test_data_import_rejects_invalid_file(api, client_record, db):
    db.add_client(client_record)
    response = api.post("/api/data/import", files={"file": ("backup.json", b"{\"nope\": 1}", "application/json")})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Failed to parse import file")
    assert len(db.get_clients()) == 1


def test_data_backup(api, storage, client_record, db):
    db.add_client(client_record)
    body = api.post("/api/data/backup").json()
    assert body["success"] is True
    bucket, _, object_name = body["path"].partition("/")
    assert json.loads(storage.download_file(bucket, object_name).read())["clients"][0]["id"] == "client-1"


def test_dashboard(api, db, client_record, invoice):
    db.add_client(client_record)
    db.add_invoice(invoice.model_copy(update={"status": "paid"}))

    stats = api.get("/api/dashboard/stats").json()
    assert stats["totalRevenue"] == 110.0
    assert stats["paidInvoices"] == 1
    assert stats["totalClients"] == 1

    revenue = api.get("/api/dashboard/revenue", params={"period": "3m"}).json()
    assert sum(point["revenue"] for point in revenue) == 110.0
    assert api.get("/api/dashboard/revenue", params={"period": "10y"}).status_code == 400


def test_generate_pdf_endpoint(api, invoice, client_record, company):
    payload = {"invoice": invoice.to_json_dict(), "client": client_record.to_json_dict(), "company": company.to_json_dict()}
    response = api.post("/api/generate-pdf", json=payload)
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="invoice-INV-202405-0001.pdf"'
    assert response.content.startswith(b"%PDF")

    response = api.post("/api/generate-pdf", json={"invoice": invoice.to_json_dict()})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required data: invoice, client, or company"}


def test_send_email_endpoint(api, smtp_settings, relay):
    payload = {
        "smtpSettings": smtp_settings.to_json_dict(),
        "emailData": {"to": "ap@acme.test", "subject": "Hi", "html": "<p>Hi</p>"},
    }
    response = api.post("/api/send-email", json=payload)
    assert response.json() == {"success": True, "messageId": "<message-id@byteworks.test>"}

    relay.send.side_effect = smtplib.SMTPRecipientsRefused({"ap@acme.test": (550, b"no such user")})
    response = api.post("/api/send-email", json=payload)
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to send email"

    payload["smtpSettings"]["password"] = ""
    response = api.post("/api/send-email", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "SMTP configuration is incomplete"}


def test_send_email_endpoint_rejects_malformed_attachment(api, smtp_settings):
    app = api.app
    app.dependency_overrides[get_smtp_relay] = SMTPRelay
    payload = {
        "smtpSettings": smtp_settings.to_json_dict(),
        "emailData": {
            "to": "ap@acme.test",
            "subject": "Hi",
            "html": "<p>Hi</p>",
            "attachments": [{"filename": "invoice.pdf", "content": [1.5]}],
        },
    }
    with patch("byteinvoice.services.email_service.smtplib.SMTP") as mock_smtp:
        response = api.post("/api/send-email", json=payload)
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to send email"
    assert "Attachment byte values" in body["details"]
    mock_smtp.assert_not_called()
