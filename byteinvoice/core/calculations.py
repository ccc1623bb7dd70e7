# byteinvoice/core/calculations.py

import logging
import math
from collections.abc import Mapping
from typing import Any, Dict, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from byteinvoice.config import CURRENCY

logger = logging.getLogger(__name__)


class InvoiceTotals(BaseModel):
    """Derived money amounts of an invoice, each rounded to 2 decimals."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subtotal: float = 0.0
    discount_amount: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0


def round_currency(value: float) -> float:
    """
    Rounds to 2 decimal places, half up.

    Python's round() uses banker's rounding, so 0.125 would become 0.12.
    Amounts here are never negative, for which floor(x * 100 + 0.5) is the
    usual half-up rounding.
    """
    return math.floor(value * 100 + 0.5) / 100


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_rate(value: Any) -> bool:
    return _is_number(value) and 0 <= value <= 100


def calculate_item_total(quantity: Any, unit_price: Any) -> float:
    """
    Line total for an invoice item.

    Args:
        quantity: Item quantity, must be a non-negative number.
        unit_price: Price per unit, must be a non-negative number.

    Returns:
        float: quantity * unit_price rounded to 2 decimals, or 0.0 when either
        input is not a valid non-negative number.
    """
    if not _is_number(quantity) or not _is_number(unit_price):
        logger.warning("Invalid input types for calculate_item_total: quantity=%r unit_price=%r", quantity, unit_price)
        return 0.0
    if quantity < 0 or unit_price < 0:
        logger.warning("Invalid values for calculate_item_total: quantity=%r unit_price=%r", quantity, unit_price)
        return 0.0
    return round_currency(quantity * unit_price)


def _item_field(item: Any, snake_name: str, camel_name: str) -> Any:
    if isinstance(item, Mapping):
        value = item.get(snake_name)
        if value is None:
            value = item.get(camel_name)
        return value
    return getattr(item, snake_name, None)


def calculate_subtotal(items: Iterable[Any]) -> float:
    """
    Sum of the line totals of `items`.

    Line totals are always recomputed from quantity and unit price; a stale
    `total` on the item is ignored. Items may be InvoiceItem models or plain
    mappings using either snake_case or camelCase keys.
    """
    if items is None or isinstance(items, (str, bytes, Mapping)):
        return 0.0
    try:
        items = list(items)
    except TypeError:
        logger.warning("Invalid items for calculate_subtotal: %r", items)
        return 0.0

    subtotal = 0.0
    for item in items:
        quantity = _item_field(item, "quantity", "quantity")
        unit_price = _item_field(item, "unit_price", "unitPrice")
        subtotal += calculate_item_total(quantity or 0, unit_price or 0)
    return round_currency(subtotal)


def calculate_discount_amount(amount: Any, discount_rate: Any) -> float:
    """Discount for `amount` at `discount_rate` percent; 0.0 for invalid inputs."""
    if not _is_number(amount) or not _is_number(discount_rate):
        logger.warning("Invalid input types for calculate_discount_amount: amount=%r discount_rate=%r", amount, discount_rate)
        return 0.0
    if amount < 0 or not _is_rate(discount_rate):
        logger.warning("Invalid values for calculate_discount_amount: amount=%r discount_rate=%r", amount, discount_rate)
        return 0.0
    return round_currency(amount * discount_rate / 100)


def calculate_tax_amount(amount: Any, tax_rate: Any) -> float:
    """Tax for `amount` at `tax_rate` percent; 0.0 for invalid inputs."""
    if not _is_number(amount) or not _is_number(tax_rate):
        logger.warning("Invalid input types for calculate_tax_amount: amount=%r tax_rate=%r", amount, tax_rate)
        return 0.0
    if amount < 0 or not _is_rate(tax_rate):
        logger.warning("Invalid values for calculate_tax_amount: amount=%r tax_rate=%r", amount, tax_rate)
        return 0.0
    return round_currency(amount * tax_rate / 100)


def calculate_invoice_total(subtotal: Any, tax_rate: Any, discount_rate: Any) -> InvoiceTotals:
    """
    Computes discount, tax and grand total from a subtotal.

    The discount is taken off the subtotal first and tax is charged on what
    remains, not on the raw subtotal. Invalid arguments (non-numeric, negative,
    rates outside 0-100) are treated as zero instead of raising.

    Args:
        subtotal: Sum of the line totals.
        tax_rate: Tax percentage in [0, 100].
        discount_rate: Discount percentage in [0, 100].

    Returns:
        InvoiceTotals: subtotal, discount_amount, tax_amount and total, each
        non-negative and rounded to 2 decimals.
    """
    valid_subtotal = subtotal if _is_number(subtotal) and subtotal >= 0 else 0
    valid_tax_rate = tax_rate if _is_rate(tax_rate) else 0
    valid_discount_rate = discount_rate if _is_rate(discount_rate) else 0

    discount_amount = calculate_discount_amount(valid_subtotal, valid_discount_rate)
    taxable_amount = max(0, valid_subtotal - discount_amount)
    tax_amount = calculate_tax_amount(taxable_amount, valid_tax_rate)
    total = max(0, taxable_amount + tax_amount)

    return InvoiceTotals(
        subtotal=round_currency(valid_subtotal),
        discount_amount=round_currency(discount_amount),
        tax_amount=round_currency(tax_amount),
        total=round_currency(total),
    )


def calculate_invoice_totals(items: Iterable[Any], tax_rate: Any, discount_rate: Any) -> InvoiceTotals:
    """Subtotal of `items` followed by calculate_invoice_total."""
    return calculate_invoice_total(calculate_subtotal(items), tax_rate, discount_rate)


CURRENCY_SYMBOLS: Dict[str, str] = {"USD": "$", "EUR": "€", "GBP": "£", "INR": "₹", "JPY": "¥"}


def format_currency(amount: Any, currency: str = CURRENCY) -> str:
    """
    Formats an amount like "$1,234.50".

    Unknown currency codes are written as a prefix ("CHF 12.00").
    """
    if not _is_number(amount):
        logger.warning("Invalid amount for format_currency: %r", amount)
        return "$0.00"
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percentage(rate: Any) -> str:
    # 10.0 -> "10%", 7.5 -> "7.5%"
    if _is_number(rate) and float(rate).is_integer():
        rate = int(rate)
    return f"{rate}%"
