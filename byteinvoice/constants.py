# byteinvoice/constants.py

INVOICE_STATUS_DRAFT = "draft"
INVOICE_STATUS_SENT = "sent"
INVOICE_STATUS_PAID = "paid"
INVOICE_STATUS_OVERDUE = "overdue"
INVOICE_STATUSES = (INVOICE_STATUS_DRAFT, INVOICE_STATUS_SENT, INVOICE_STATUS_PAID, INVOICE_STATUS_OVERDUE)

VALIDATION_MESSAGES = {
    "REQUIRED_FIELD": "This field is required",
    "INVALID_EMAIL": "Invalid email address",
    "MIN_QUANTITY": "Quantity must be greater than 0",
    "POSITIVE_NUMBER": "Must be a positive number",
    "MAX_PERCENTAGE": "Cannot exceed 100%",
}

# Empty company profile used until the user fills one in
DEFAULT_COMPANY = {
    "name": "",
    "address": "",
    "city": "",
    "state": "",
    "zipCode": "",
    "country": "",
    "phone": "",
    "email": "",
    "website": "",
    "taxId": "",
    "logo": "",
}

DEFAULT_SMTP_SETTINGS = {
    "host": "",
    "port": 587,
    "secure": False,
    "username": "",
    "password": "",
    "fromName": "",
    "fromEmail": "",
}

DEFAULT_EMAIL_TEMPLATES = [
    {
        "id": "default-invoice",
        "name": "Default Invoice Email",
        "subject": "Invoice {{invoiceNumber}} from {{companyName}}",
        "body": (
            "<h2>Invoice {{invoiceNumber}}</h2>\n"
            "<p>Dear {{clientName}},</p>\n"
            "<p>Please find attached your invoice for the amount of ${{total}}.</p>\n"
            "<p>Due date: {{dueDate}}</p>\n"
            "<p>Thank you for your business!</p>\n"
            "<br>\n"
            "<p>Best regards,<br>{{companyName}}</p>"
        ),
        "type": "invoice",
    },
    {
        "id": "default-reminder",
        "name": "Default Payment Reminder",
        "subject": "Payment Reminder - Invoice {{invoiceNumber}}",
        "body": (
            "<h2>Payment Reminder</h2>\n"
            "<p>Dear {{clientName}},</p>\n"
            "<p>This is a friendly reminder that invoice {{invoiceNumber}} for ${{total}} is still pending payment.</p>\n"
            "<p>Due date: {{dueDate}}</p>\n"
            "<p>Please process the payment at your earliest convenience.</p>\n"
            "<br>\n"
            "<p>Best regards,<br>{{companyName}}</p>"
        ),
        "type": "reminder",
    },
    {
        "id": "default-overdue",
        "name": "Default Overdue Notice",
        "subject": "OVERDUE: Invoice {{invoiceNumber}}",
        "body": (
            "<h2>Overdue Payment Notice</h2>\n"
            "<p>Dear {{clientName}},</p>\n"
            "<p><strong>URGENT:</strong> Invoice {{invoiceNumber}} for ${{total}} is now overdue.</p>\n"
            "<p>Original due date: {{dueDate}}</p>\n"
            "<p>Please contact us immediately to resolve this matter.</p>\n"
            "<br>\n"
            "<p>Best regards,<br>{{companyName}}</p>"
        ),
        "type": "overdue",
    },
]
