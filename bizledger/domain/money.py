"""Decimal money and percentage helpers.

All arithmetic is exact Decimal arithmetic performed in a fixed order.
Rounding to cents happens only in present(), never in intermediate steps.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from bizledger.domain.exceptions import ValidationError
from bizledger.domain.models import TransactionType

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
# Largest magnitude accepted for any single amount, percent or component
MAX_AMOUNT = Decimal("1000000000000")


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """
    Convert user input to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. Booleans, NaN, infinities and magnitudes above
    MAX_AMOUNT are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be a number, got '{value}'") from None
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    if abs(result) > MAX_AMOUNT:
        raise ValidationError(f"{field_name} must not exceed {MAX_AMOUNT:,} in magnitude (got {result})")
    return result


def require_non_negative(value, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < ZERO:
        raise ValidationError(f"{field_name} must not be negative (got {amount})")
    return amount


def require_percent(value, field_name: str) -> Decimal:
    """Percent in the inclusive range 0-100"""
    percent = require_non_negative(value, field_name)
    if percent > HUNDRED:
        raise ValidationError(f"{field_name} must be between 0 and 100 (got {percent})")
    return percent


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return amount * percent / HUNDRED


def line_base(unit_price: Decimal, quantity: int) -> Decimal:
    return unit_price * quantity


def signed_amount(amount: Decimal, transaction_type: TransactionType) -> Decimal:
    """Balance effect of a ledger entry: Income adds, Expense subtracts"""
    return amount if transaction_type == TransactionType.INCOME else -amount


def present(amount: Decimal) -> Decimal:
    """Round to cents for display (half-up, the way invoices are printed)"""
    with localcontext() as ctx:
        # quantize fails if the result needs more digits than the context allows
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
