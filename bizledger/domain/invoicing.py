"""Invoice total calculation and invoice numbering"""

from decimal import Decimal
from typing import List, Sequence

from bizledger.domain.exceptions import ValidationError
from bizledger.domain.models import InvoiceTotals, LineItemInput
from bizledger.domain.money import (
    ZERO,
    line_base,
    percent_of,
    require_non_negative,
    require_percent,
)

# Well inside SQLite's 64-bit INTEGER; keeps line amounts within Decimal precision
MAX_QUANTITY = 1_000_000_000


def validate_line_item(item: LineItemInput, position: int = 1) -> LineItemInput:
    """
    Check a line item and return a copy with Decimal-normalised amounts.

    Raises:
        ValidationError: blank product name, negative, fractional or oversized quantity,
            negative price, or tax percent outside 0-100
    """
    label = f"item {position}"
    if not item.product_name or not item.product_name.strip():
        raise ValidationError(f"{label}: product name is required")
    if isinstance(item.quantity, bool) or not isinstance(item.quantity, int):
        raise ValidationError(f"{label}: quantity must be a whole number")
    if item.quantity < 0:
        raise ValidationError(f"{label}: quantity must not be negative (got {item.quantity})")
    if item.quantity > MAX_QUANTITY:
        raise ValidationError(f"{label}: quantity must not exceed {MAX_QUANTITY:,} (got {item.quantity})")

    return LineItemInput(
        product_name=item.product_name.strip(),
        quantity=item.quantity,
        unit_price=require_non_negative(item.unit_price, f"{label}: unit price"),
        tax_percent=require_percent(item.tax_percent, f"{label}: tax percent"),
        description=item.description,
    )


def calculate_invoice_totals(
    items: Sequence[LineItemInput],
    discount_percent: Decimal = ZERO,
    discount_flat: Decimal = ZERO,
    advance: Decimal = ZERO,
) -> InvoiceTotals:
    """
    Derive subtotal, tax, discount amount and total from line items.

    Rules:
    - line base = unit price * quantity, line tax = base * tax% / 100
    - a percent discount applies to (subtotal + tax) and takes precedence
      over any flat discount
    - total = subtotal + tax - discount amount - advance

    Items are summed in the order given so the same input always yields
    identical Decimals. Nothing is rounded here.

    Example:
        [2 x 50.00 @ 10%, 1 x 30.00 @ 0%], 10% discount, 5.00 advance
        subtotal 130, tax 10, discount 14, total 121
    """
    discount_percent = require_percent(discount_percent, "discount percent")
    discount_flat = require_non_negative(discount_flat, "discount")
    advance = require_non_negative(advance, "advance")

    subtotal = ZERO
    tax = ZERO
    line_totals: List[Decimal] = []
    for position, raw_item in enumerate(items, start=1):
        item = validate_line_item(raw_item, position)
        base = line_base(item.unit_price, item.quantity)
        item_tax = percent_of(base, item.tax_percent)
        subtotal += base
        tax += item_tax
        line_totals.append(base + item_tax)

    if discount_percent > ZERO:
        discount_amount = percent_of(subtotal + tax, discount_percent)
    else:
        discount_amount = discount_flat

    total = subtotal + tax - discount_amount - advance

    return InvoiceTotals(
        subtotal=subtotal,
        tax=tax,
        discount_amount=discount_amount,
        total=total,
        line_totals=line_totals,
    )


def format_invoice_number(sequence: int, prefix: str = "INV-", width: int = 5) -> str:
    """Zero-padded human readable invoice number, e.g. 7 -> INV-00007"""
    if sequence < 1:
        raise ValidationError(f"Invoice sequence must be positive (got {sequence})")
    return f"{prefix}{sequence:0{width}d}"
