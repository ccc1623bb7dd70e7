# byteinvoice/email_templates.py
#
# Built-in subjects and HTML bodies used when no user template is configured.
# Placeholders use the {{variableName}} syntax understood by
# byteinvoice.services.email_service.replace_template_variables.

INVOICE_SUBJECTS = {
    "paid": "Payment Confirmation - Invoice {{invoiceNumber}} from {{companyName}}",
    "overdue": "OVERDUE: Invoice {{invoiceNumber}} - Immediate Action Required",
}
INVOICE_SUBJECT_DEFAULT = "Invoice {{invoiceNumber}} from {{companyName}} - Due {{dueDate}}"

REMINDER_SUBJECT = "Friendly Reminder: Invoice {{invoiceNumber}} Payment Due"

OVERDUE_SUBJECT = "URGENT: Overdue Payment - Invoice {{invoiceNumber}} Requires Immediate Attention"

_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body style="margin:0;padding:24px;background-color:#f9fafb;font-family:-apple-system,'Segoe UI',Roboto,sans-serif;line-height:1.6;color:#374151;">
    <div style="max-width:600px;margin:0 auto;background:#ffffff;border-radius:12px;overflow:hidden;">
        <div style="background:{header_color};color:#ffffff;padding:32px 24px;text-align:center;">
            <h1 style="margin:0 0 8px;font-size:28px;">{heading}</h1>
            <p style="margin:0;opacity:0.9;">{subheading}</p>
        </div>
        <div style="padding:32px 24px;">
{content}
        </div>
        <div style="background:#f8fafc;padding:24px;text-align:center;font-size:14px;color:#6b7280;">
{footer}
        </div>
    </div>
</body>
</html>"""


def _detail_rows(rows):
    lines = ['            <table style="width:100%;background:#f8fafc;border-radius:8px;padding:16px;margin:24px 0;">']
    for label, value in rows:
        lines.append(
            f'                <tr><td style="color:#6b7280;">{label}</td>'
            f'<td style="text-align:right;font-weight:600;">{value}</td></tr>'
        )
    lines.append("            </table>")
    return "\n".join(lines)


INVOICE_BODY = _LAYOUT.format(
    title="Invoice {{invoiceNumber}}",
    header_color="{{statusColor}}",
    heading="{{companyName}}",
    subheading="Professional Invoice Services",
    content="\n".join([
        "            <p style=\"font-size:18px;\">Dear {{clientName}},</p>",
        "            <p><span style=\"display:inline-block;padding:4px 12px;border-radius:999px;background:{{statusColor}};color:#ffffff;\">Status: {{invoiceStatus}}</span></p>",
        "            <p>We are writing to provide you with the details of invoice {{invoiceNumber}}.</p>",
        _detail_rows([
            ("Invoice Number:", "{{invoiceNumber}}"),
            ("Issue Date:", "{{issueDate}}"),
            ("Due Date:", "{{dueDate}}"),
            ("Total Amount:", "${{total}}"),
        ]),
        "            <p><strong>{{statusMessage}}</strong></p>",
        "            <p>The complete invoice is attached to this email as a PDF document. Please don't hesitate to reach out if you have any questions about the charges.</p>",
        "            <p>We truly appreciate your business.</p>",
    ]),
    footer="\n".join([
        "            <p><strong>{{companyName}}</strong></p>",
        "            <p>{{companyAddress}}</p>",
        "            <p>{{companyEmail}} | {{companyPhone}} | {{companyWebsite}}</p>",
        "            <p style=\"font-size:12px;color:#9ca3af;\">This is an automated message. For inquiries, please contact us at {{companyEmail}}.</p>",
    ]),
)

REMINDER_BODY = _LAYOUT.format(
    title="Payment Reminder - Invoice {{invoiceNumber}}",
    header_color="#ea580c",
    heading="Payment Reminder",
    subheading="{{companyName}}",
    content="\n".join([
        "            <p>Dear {{clientName}},</p>",
        "            <p>This is a gentle reminder that invoice {{invoiceNumber}} for ${{total}} is still pending payment.</p>",
        _detail_rows([
            ("Invoice Number:", "{{invoiceNumber}}"),
            ("Due Date:", "{{dueDate}}"),
            ("Amount Due:", "${{total}}"),
        ]),
        "            <p>If you've already processed this payment, please disregard this message, and thank you!</p>",
        "            <p>If you have any questions about this invoice or need to discuss payment arrangements, please reach out.</p>",
    ]),
    footer="\n".join([
        "            <p><strong>{{companyName}}</strong></p>",
        "            <p>{{companyEmail}} | {{companyPhone}}</p>",
    ]),
)

OVERDUE_BODY = _LAYOUT.format(
    title="Overdue Notice - Invoice {{invoiceNumber}}",
    header_color="#dc2626",
    heading="OVERDUE NOTICE",
    subheading="{{companyName}}",
    content="\n".join([
        "            <p>Dear {{clientName}},</p>",
        "            <p><strong>This invoice is now OVERDUE and requires immediate attention.</strong></p>",
        "            <p>Invoice {{invoiceNumber}} remains unpaid and is now past its due date.</p>",
        _detail_rows([
            ("Invoice Number:", "{{invoiceNumber}}"),
            ("Original Due Date:", "{{dueDate}}"),
            ("Days Overdue:", "{{daysOverdue}} days"),
            ("Outstanding Amount:", "${{total}}"),
        ]),
        "            <ul>",
        "                <li>Please process payment immediately to avoid service interruption</li>",
        "                <li>Contact us within 48 hours if you need to discuss payment arrangements</li>",
        "                <li>Provide proof of payment if this invoice has already been paid</li>",
        "            </ul>",
        "            <p>Please contact us at {{companyEmail}} or {{companyPhone}} to resolve this matter.</p>",
    ]),
    footer="\n".join([
        "            <p><strong>{{companyName}}</strong></p>",
        "            <p>{{companyEmail}} | {{companyPhone}}</p>",
        "            <p style=\"color:#dc2626;font-weight:600;\">URGENT: Please respond within 48 hours</p>",
    ]),
)

TEST_SUBJECT = "Test email from {{companyName}}"
TEST_BODY = (
    "<p>This is a test message confirming that the SMTP settings for "
    "{{companyName}} are working.</p>"
)
