# tests/test_calculations.py

import logging

import pytest

from byteinvoice.core.calculations import (
    calculate_discount_amount,
    calculate_invoice_total,
    calculate_invoice_totals,
    calculate_item_total,
    calculate_subtotal,
    calculate_tax_amount,
    format_currency,
    format_percentage,
    round_currency,
)
from byteinvoice.models import InvoiceItem


def test_round_currency_rounds_half_up():
    assert round_currency(0.125) == 0.13
    assert round_currency(0.005) == 0.01
    assert round_currency(10) == 10.0
    assert round_currency(1.004) == 1.0


def test_item_total():
    assert calculate_item_total(2, 50) == 100.0
    assert calculate_item_total(3, 19.99) == 59.97
    assert calculate_item_total(0, 10) == 0.0


@pytest.mark.parametrize("quantity, unit_price", [
    ("2", 50),
    (2, None),
    (True, 50),
    (float("nan"), 1),
    (float("inf"), 1),
    (-1, 50),
    (1, -5),
])
def test_item_total_invalid_inputs_are_zero(quantity, unit_price, caplog):
    with caplog.at_level(logging.WARNING):
        assert calculate_item_total(quantity, unit_price) == 0.0
    assert "calculate_item_total" in caplog.text


def test_subtotal_recomputes_line_totals():
    items = [
        InvoiceItem(quantity=2, unit_price=50, total=999),
        {"quantity": 1, "unitPrice": 25.5},
        {"quantity": 3, "unit_price": 10},
    ]
    assert calculate_subtotal(items) == 155.5


@pytest.mark.parametrize("items", [None, "abc", {"quantity": 1}, 42, []])
def test_subtotal_of_invalid_collections_is_zero(items):
    assert calculate_subtotal(items) == 0.0


def test_discount_and_tax_amounts():
    assert calculate_discount_amount(200, 10) == 20.0
    assert calculate_tax_amount(180, 7.5) == 13.5
    assert calculate_discount_amount(200, 150) == 0.0
    assert calculate_tax_amount(-1, 10) == 0.0
    assert calculate_tax_amount(100, "10") == 0.0


def test_invoice_total_applies_discount_before_tax():
    totals = calculate_invoice_total(200, 10, 10)
    assert totals.subtotal == 200.0
    assert totals.discount_amount == 20.0
    assert totals.tax_amount == 18.0
    assert totals.total == 198.0


def test_invoice_totals_with_tax():
    totals = calculate_invoice_totals([{"quantity": 2, "unitPrice": 50}], 10, 0)
    assert totals.subtotal == 100.0
    assert totals.tax_amount == 10.0
    assert totals.discount_amount == 0.0
    assert totals.total == 110.0


def test_invoice_total_treats_invalid_arguments_as_zero():
    totals = calculate_invoice_total(-50, 200, "5")
    assert totals.model_dump() == {"subtotal": 0.0, "discount_amount": 0.0, "tax_amount": 0.0, "total": 0.0}

    totals = calculate_invoice_total(100, None, 100)
    assert totals.discount_amount == 100.0
    assert totals.total == 0.0


def test_invoice_totals_serialize_camel_case():
    dumped = calculate_invoice_total(100, 0, 0).model_dump(by_alias=True)
    assert set(dumped) == {"subtotal", "discountAmount", "taxAmount", "total"}


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3, "EUR") == "-€3.00"
    assert format_currency(12, "CHF") == "CHF 12.00"


def test_format_currency_invalid_amount(caplog):
    with caplog.at_level(logging.WARNING):
        assert format_currency("abc") == "$0.00"
    assert "format_currency" in caplog.text


def test_format_percentage():
    assert format_percentage(10.0) == "10%"
    assert format_percentage(7.5) == "7.5%"
