"""Unit tests for money helpers, enum parsing and the permission check"""

from decimal import Decimal

import pytest

from bizledger.domain.exceptions import PermissionDeniedError, ValidationError
from bizledger.domain.models import InvoiceStatus, TransactionType, UserRole, parse_enum
from bizledger.domain.money import present, signed_amount, to_decimal
from bizledger.domain.permissions import Permission, ensure_permission, has_permission


def test_to_decimal_goes_through_str_for_floats():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(3) == Decimal("3")


@pytest.mark.parametrize("value", [True, None, "abc", "NaN", "Infinity"])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        to_decimal(value, "amount")


def test_present_rounds_half_up_to_cents():
    assert present(Decimal("2.675")) == Decimal("2.68")
    assert present(Decimal("-1.005")) == Decimal("-1.01")
    assert present(Decimal("7")) == Decimal("7.00")


def test_to_decimal_rejects_oversized_amounts():
    assert to_decimal("1000000000000") == Decimal("1000000000000")
    with pytest.raises(ValidationError, match="unit price must not exceed"):
        to_decimal("1E+30", "unit price")
    with pytest.raises(ValidationError):
        to_decimal(-(10**13))


def test_present_handles_amounts_wider_than_the_context():
    assert present(Decimal("1E+30")) == Decimal("1000000000000000000000000000000.00")
    assert present(Decimal("123456789012345678901234567.005")) == Decimal("123456789012345678901234567.01")


def test_signed_amount_by_type():
    assert signed_amount(Decimal("10"), TransactionType.INCOME) == Decimal("10")
    assert signed_amount(Decimal("10"), TransactionType.EXPENSE) == Decimal("-10")


def test_parse_enum_accepts_members_and_values():
    assert parse_enum(InvoiceStatus, "Paid", "status") is InvoiceStatus.PAID
    assert parse_enum(InvoiceStatus, InvoiceStatus.SENT, "status") is InvoiceStatus.SENT


def test_parse_enum_rejects_unknown_value():
    with pytest.raises(ValidationError, match="Invalid invoice status 'paid'"):
        parse_enum(InvoiceStatus, "paid", "invoice status")


def test_admin_has_every_permission():
    assert all(has_permission(UserRole.ADMIN, [], permission) for permission in Permission)


def test_user_needs_explicit_grant():
    granted = ["create_invoice"]

    assert has_permission(UserRole.USER, granted, Permission.CREATE_INVOICE)
    assert not has_permission(UserRole.USER, granted, Permission.DELETE_INVOICE)


def test_ensure_permission_raises_with_readable_message():
    with pytest.raises(PermissionDeniedError, match="User 'sam' lacks permission 'manage_payroll'"):
        ensure_permission("sam", UserRole.USER, [], Permission.MANAGE_PAYROLL)
