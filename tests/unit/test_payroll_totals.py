"""Unit tests for payroll total calculation"""

from decimal import Decimal

import pytest

from bizledger.domain.exceptions import ValidationError
from bizledger.domain.models import PayrollComponents
from bizledger.domain.payroll import calculate_payroll_totals


def test_payroll_worked_example():
    totals = calculate_payroll_totals(
        PayrollComponents(
            base_salary=Decimal("2000"),
            overtime_pay=Decimal("100"),
            bonuses=Decimal("50"),
            allowances=Decimal("25"),
            tax=Decimal("200"),
        )
    )

    assert totals.gross_salary == Decimal("2175")
    assert totals.total_deductions == Decimal("200")
    assert totals.net_pay == Decimal("1975")


def test_all_deductions_are_summed():
    totals = calculate_payroll_totals(
        PayrollComponents(
            base_salary=Decimal("1000.00"),
            tax=Decimal("100.10"),
            late_penalties=Decimal("20.20"),
            absences=Decimal("30.30"),
            other_deductions=Decimal("40.40"),
        )
    )

    assert totals.total_deductions == Decimal("191.00")
    assert totals.net_pay == Decimal("809.00")


def test_net_pay_can_go_negative():
    totals = calculate_payroll_totals(
        PayrollComponents(base_salary=Decimal("100"), absences=Decimal("150"))
    )

    assert totals.net_pay == Decimal("-50")


def test_components_accept_plain_numbers():
    totals = calculate_payroll_totals(PayrollComponents(base_salary=1500, bonuses=0.1, tax="10.05"))

    assert totals.gross_salary == Decimal("1500.1")
    assert totals.net_pay == Decimal("1490.05")


def test_negative_component_rejected():
    with pytest.raises(ValidationError, match="overtime pay must not be negative"):
        calculate_payroll_totals(PayrollComponents(base_salary=Decimal("100"), overtime_pay=Decimal("-1")))
