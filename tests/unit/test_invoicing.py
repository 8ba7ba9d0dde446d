"""Unit tests for invoice total calculation"""

from decimal import Decimal

import pytest

from bizledger.domain.exceptions import ValidationError
from bizledger.domain.invoicing import calculate_invoice_totals, format_invoice_number
from bizledger.domain.models import LineItemInput
from bizledger.domain.money import present


def item(quantity, price, tax="0", name="Item"):
    return LineItemInput(product_name=name, quantity=quantity, unit_price=Decimal(price), tax_percent=Decimal(tax))


def test_totals_worked_example():
    """2 x 50.00 @ 10% + 1 x 30.00, 10% discount, 5.00 advance"""
    totals = calculate_invoice_totals(
        [item(2, "50.00", "10"), item(1, "30.00")],
        discount_percent=Decimal("10"),
        advance=Decimal("5.00"),
    )

    assert totals.subtotal == Decimal("130.00")
    assert totals.tax == Decimal("10.00")
    assert totals.discount_amount == Decimal("14.00")
    assert totals.total == Decimal("121.00")
    assert totals.line_totals == [Decimal("110.00"), Decimal("30.00")]


def test_percent_discount_takes_precedence_over_flat():
    totals = calculate_invoice_totals(
        [item(1, "200.00", "5")],
        discount_percent=Decimal("10"),
        discount_flat=Decimal("99.00"),
    )

    assert totals.discount_amount == Decimal("21.00")  # 10% of 210, flat ignored
    assert totals.total == Decimal("189.00")


def test_flat_discount_used_when_no_percent():
    totals = calculate_invoice_totals([item(3, "10.00", "10")], discount_flat=Decimal("3.00"))

    assert totals.discount_amount == Decimal("3.00")
    assert totals.total == Decimal("30.00")


def test_total_matches_formula_for_various_item_lists():
    cases = [
        ([item(1, "0.00")], "0", "0", "0"),
        ([item(4, "12.49", "7.5"), item(0, "999.99", "20")], "0", "2.50", "1.00"),
        ([item(7, "3.33", "15"), item(2, "0.01", "100"), item(10, "19.95", "0")], "12.5", "0", "20"),
    ]
    for items, discount_percent, discount_flat, advance in cases:
        totals = calculate_invoice_totals(
            items, Decimal(discount_percent), Decimal(discount_flat), Decimal(advance)
        )
        subtotal = sum((i.unit_price * i.quantity for i in items), Decimal("0"))
        tax = sum((i.unit_price * i.quantity * i.tax_percent / 100 for i in items), Decimal("0"))
        discount = (
            (subtotal + tax) * Decimal(discount_percent) / 100
            if Decimal(discount_percent) > 0
            else Decimal(discount_flat)
        )
        assert totals.total == subtotal + tax - discount - Decimal(advance)


def test_no_penny_drift_across_many_items():
    totals = calculate_invoice_totals([item(1, "0.10") for _ in range(1000)])

    assert totals.subtotal == Decimal("100.00")
    assert totals.total == Decimal("100.00")


def test_fractional_cents_are_kept_until_presentation():
    totals = calculate_invoice_totals([item(1, "33.33", "7.5")])

    assert totals.tax == Decimal("2.49975")
    assert present(totals.tax) == Decimal("2.50")
    assert present(totals.total) == Decimal("35.83")


def test_recomputation_is_identical():
    items = [item(3, "19.99", "8.25"), item(2, "4.75", "0"), item(11, "0.33", "12")]

    first = calculate_invoice_totals(items, Decimal("7"), Decimal("0"), Decimal("1.10"))
    second = calculate_invoice_totals(items, Decimal("7"), Decimal("0"), Decimal("1.10"))

    assert first == second
    assert str(first.total) == str(second.total)


def test_empty_items_leave_only_discount_and_advance():
    totals = calculate_invoice_totals([], discount_flat=Decimal("5"), advance=Decimal("2"))

    assert totals.subtotal == Decimal("0")
    assert totals.tax == Decimal("0")
    assert totals.total == Decimal("-7")


@pytest.mark.parametrize(
    "bad_item, message",
    [
        (item(-1, "10.00"), "quantity must not be negative"),
        (item(1, "-0.01"), "unit price must not be negative"),
        (item(1, "10.00", "-5"), "tax percent must not be negative"),
        (item(1, "10.00", "101"), "tax percent must be between 0 and 100"),
        (item(1, "10.00", name="  "), "product name is required"),
        (item(10**20, "1.00"), "quantity must not exceed 1,000,000,000"),
        (item(1, "1E+30"), "unit price must not exceed"),
    ],
)
def test_invalid_line_items_rejected(bad_item, message):
    with pytest.raises(ValidationError, match=message):
        calculate_invoice_totals([bad_item])


def test_fractional_quantity_rejected():
    bad = LineItemInput(product_name="Rope", quantity=1.5, unit_price=Decimal("2"))

    with pytest.raises(ValidationError, match="whole number"):
        calculate_invoice_totals([bad])


def test_negative_invoice_level_amounts_rejected():
    with pytest.raises(ValidationError, match="advance"):
        calculate_invoice_totals([item(1, "10")], advance=Decimal("-1"))
    with pytest.raises(ValidationError, match="discount"):
        calculate_invoice_totals([item(1, "10")], discount_flat=Decimal("-1"))


def test_format_invoice_number():
    assert format_invoice_number(1) == "INV-00001"
    assert format_invoice_number(123456) == "INV-123456"
    assert format_invoice_number(42, prefix="B-", width=3) == "B-042"

    with pytest.raises(ValidationError):
        format_invoice_number(0)
