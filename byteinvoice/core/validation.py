# byteinvoice/core/validation.py

import re

from byteinvoice.constants import VALIDATION_MESSAGES
from byteinvoice.models import Client, Company, Product

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(value: str) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def _require(value, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{field_name}: {VALIDATION_MESSAGES['REQUIRED_FIELD']}")


def validate_company(company: Company) -> Company:
    """Raises ValueError unless the profile has every required field and a valid email."""
    for field_name in ("name", "address", "city", "state", "country"):
        _require(getattr(company, field_name), field_name)
    if not is_valid_email(company.email):
        raise ValueError(f"email: {VALIDATION_MESSAGES['INVALID_EMAIL']}")
    return company


def validate_client(client: Client) -> Client:
    for field_name in ("name", "address", "city", "state", "country"):
        _require(getattr(client, field_name), field_name)
    if not is_valid_email(client.email):
        raise ValueError(f"email: {VALIDATION_MESSAGES['INVALID_EMAIL']}")
    return client


def validate_product(product: Product) -> Product:
    for field_name in ("name", "description", "sku", "category"):
        _require(getattr(product, field_name), field_name)
    if product.price is not None and product.price < 0:
        raise ValueError(f"price: {VALIDATION_MESSAGES['POSITIVE_NUMBER']}")
    return product
