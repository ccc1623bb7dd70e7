# byteinvoice/core/generators.py

import random
import uuid
from datetime import date
from typing import Optional


def generate_id() -> str:
    """Returns a random UUID4 string used as a record id."""
    return str(uuid.uuid4())


def generate_invoice_number(existing_invoices_count: int, today: Optional[date] = None) -> str:
    """
    Builds the next invoice number in the form INV-YYYYMM-NNNN.

    Args:
        existing_invoices_count (int): How many invoices already exist.
        today (date, optional): Reference date, defaults to the current date.

    Returns:
        str: e.g. "INV-202405-0007" for the seventh invoice of May 2024.
    """
    today = today or date.today()
    count = existing_invoices_count + 1
    return f"INV-{today.year}{today.month:02d}-{count:04d}"


def generate_sku(name: str, category: str) -> str:
    """SKU in the form CAT-NAM-042 built from the category and product name."""
    name_code = (name or "")[:3].upper()
    category_code = (category or "")[:3].upper()
    random_num = f"{random.randint(0, 999):03d}"
    return f"{category_code}-{name_code}-{random_num}"
