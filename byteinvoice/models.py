# byteinvoice/models.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional
from datetime import date, datetime, timezone

from byteinvoice.config import APP_VERSION, DEFAULT_DISCOUNT_RATE, DEFAULT_TAX_RATE
from byteinvoice.constants import DEFAULT_COMPANY, DEFAULT_EMAIL_TEMPLATES, DEFAULT_SMTP_SETTINGS
from byteinvoice.core.calculations import InvoiceTotals, calculate_item_total
from byteinvoice.core.generators import generate_id

InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]
TemplateType = Literal["invoice", "reminder", "overdue"]


class CamelModel(BaseModel):
    """
    Base for every stored entity. Serialized JSON uses camelCase keys
    (the backup file format); snake_case attribute names are accepted as well.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _to_calendar_date(value: Any) -> Any:
    # Older backups carry full ISO timestamps such as "2024-05-01T00:00:00.000Z"
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class Company(CamelModel):
    """
    The singleton company profile printed on invoices and emails.
    """
    name: str = Field("", description="Company name.")
    address: str = Field("", description="Street address.")
    city: str = ""
    state: str = ""
    zip_code: Optional[str] = ""
    country: str = ""
    phone: Optional[str] = ""
    email: str = Field("", description="Contact email, also used in email footers.")
    website: Optional[str] = ""
    tax_id: Optional[str] = ""
    logo: Optional[str] = Field("", description="Logo as a base64 data URL.")


class Client(CamelModel):
    """
    A customer that invoices are billed to.
    """
    id: str = Field(default_factory=generate_id, description="Unique client id.")
    name: str = Field(..., description="Client name.")
    email: str = Field(..., description="Address invoices are emailed to.")
    phone: Optional[str] = None
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: Optional[str] = None
    country: str = ""
    advance_payment: Optional[float] = Field(None, ge=0, description="Amount already paid up front, deducted on the PDF.")


class Product(CamelModel):
    """
    A catalogue entry that can be added to invoices.
    """
    id: str = Field(default_factory=generate_id, description="Unique product id.")
    name: str = Field(..., description="Product name.")
    description: str = ""
    price: Optional[float] = Field(None, ge=0, description="Unit price; None means variable pricing.")
    sku: str = ""
    category: str = ""


class InvoiceItem(CamelModel):
    """
    Represents a single line of an invoice.
    """
    product_id: str = ""
    product_name: str = ""
    description: str = ""
    quantity: float = Field(0, description="Quantity of the item.")
    unit_price: float = Field(0, description="Unit price of the item.")
    total: Optional[float] = Field(None, description="Calculated total for the item (quantity * unit_price).")

    def model_post_init(self, __context: Any) -> None:
        """
        Pydantic V2 post-initialization hook. Calculates total if not provided.
        """
        if self.total is None:
            self.total = calculate_item_total(self.quantity, self.unit_price)


class Invoice(CamelModel):
    """
    Represents a complete stored invoice with its derived amounts.
    """
    id: str = Field(default_factory=generate_id)
    invoice_number: str = Field("", description="Human readable number, e.g. INV-202405-0001.")
    client_id: str = ""
    client_name: str = ""
    issue_date: date = Field(default_factory=date.today)
    due_date: date = Field(default_factory=date.today)
    items: List[InvoiceItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_rate: float = Field(DEFAULT_TAX_RATE, description="Tax percentage, e.g. 10 for 10%.")
    tax_amount: float = 0.0
    discount_rate: float = Field(DEFAULT_DISCOUNT_RATE, description="Discount percentage, e.g. 5 for 5%.")
    discount_amount: float = 0.0
    total: float = 0.0
    status: InvoiceStatus = "draft"
    notes: Optional[str] = None
    email_sent: Optional[bool] = None
    last_reminder_sent: Optional[datetime] = None

    @field_validator("issue_date", "due_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        return _to_calendar_date(value)

    def apply_totals(self, totals: InvoiceTotals) -> None:
        self.subtotal = totals.subtotal
        self.discount_amount = totals.discount_amount
        self.tax_amount = totals.tax_amount
        self.total = totals.total


class InvoiceItemInput(CamelModel):
    """
    An item as submitted on the invoice form. Missing name, description and
    unit price are filled in from the referenced product.
    """
    product_id: str = ""
    product_name: str = ""
    description: str = ""
    quantity: float = Field(1, gt=0, description="Quantity of the item, must be greater than 0.")
    unit_price: Optional[float] = Field(None, ge=0, description="Unit price; taken from the product when omitted.")


class InvoiceDraft(CamelModel):
    """
    Payload for creating or editing an invoice. Totals are always computed
    server side.
    """
    client_id: str = Field(..., min_length=1)
    issue_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = Field(None, description="Defaults to issue date + DEFAULT_DUE_DAYS.")
    items: List[InvoiceItemInput] = Field(..., min_length=1, description="At least one item is required.")
    tax_rate: float = Field(DEFAULT_TAX_RATE, ge=0, le=100)
    discount_rate: float = Field(DEFAULT_DISCOUNT_RATE, ge=0, le=100)
    notes: Optional[str] = None

    @field_validator("issue_date", "due_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        return _to_calendar_date(value)


class StatusUpdate(CamelModel):
    status: InvoiceStatus


class SMTPSettings(CamelModel):
    host: str = ""
    port: int = 587
    secure: bool = False
    username: str = ""
    password: str = ""
    from_name: str = ""
    from_email: str = ""

    def is_complete(self) -> bool:
        return bool(self.host and self.username and self.password)


class EmailTemplate(CamelModel):
    id: str = Field(default_factory=generate_id)
    name: str = ""
    subject: str = ""
    body: str = ""
    type: TemplateType = "invoice"


class AppSettings(CamelModel):
    """
    SMTP credentials plus the editable email templates.
    """
    smtp: SMTPSettings = Field(default_factory=lambda: SMTPSettings(**DEFAULT_SMTP_SETTINGS))
    email_templates: List[EmailTemplate] = Field(
        default_factory=lambda: [EmailTemplate(**template) for template in DEFAULT_EMAIL_TEMPLATES]
    )

    def template_for(self, template_type: str, template_id: Optional[str] = None) -> Optional[EmailTemplate]:
        """Returns the template with `template_id`, else the first one of `template_type`."""
        if template_id:
            for template in self.email_templates:
                if template.id == template_id:
                    return template
        for template in self.email_templates:
            if template.type == template_type:
                return template
        return None


class AppData(CamelModel):
    """
    The export / import document holding the whole database.
    """
    company: Company = Field(default_factory=lambda: Company(**DEFAULT_COMPANY))
    clients: List[Client] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    invoices: List[Invoice] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)
    version: str = APP_VERSION
    export_date: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class EmailAttachment(CamelModel):
    filename: str
    # base64 text, a list of byte values, or a serialized Node Buffer {"type": "Buffer", "data": [...]}
    content: Any
    content_type: Optional[str] = None


class EmailData(CamelModel):
    to: str
    subject: str = ""
    html: str = ""
    attachments: Optional[List[EmailAttachment]] = None


class SendEmailRequest(CamelModel):
    smtp_settings: SMTPSettings
    email_data: EmailData


class GeneratePDFRequest(CamelModel):
    invoice: Optional[Invoice] = None
    client: Optional[Client] = None
    company: Optional[Company] = None


class SendInvoiceRequest(CamelModel):
    template_id: Optional[str] = None


class DashboardStats(CamelModel):
    total_revenue: float = 0.0
    pending_amount: float = 0.0
    total_clients: int = 0
    total_products: int = 0
    total_invoices: int = 0
    paid_invoices: int = 0
    sent_invoices: int = 0


class RevenueData(CamelModel):
    month: str
    revenue: float
    invoices: int
    date: str
