"""Payroll total calculation"""

from bizledger.domain.models import PayrollComponents, PayrollTotals
from bizledger.domain.money import require_non_negative


def normalize_components(components: PayrollComponents) -> PayrollComponents:
    """Return components as non-negative Decimals, raising ValidationError otherwise"""
    return PayrollComponents(
        base_salary=require_non_negative(components.base_salary, "base salary"),
        overtime_pay=require_non_negative(components.overtime_pay, "overtime pay"),
        bonuses=require_non_negative(components.bonuses, "bonuses"),
        allowances=require_non_negative(components.allowances, "allowances"),
        tax=require_non_negative(components.tax, "tax"),
        late_penalties=require_non_negative(components.late_penalties, "late penalties"),
        absences=require_non_negative(components.absences, "absences"),
        other_deductions=require_non_negative(components.other_deductions, "other deductions"),
    )


def calculate_payroll_totals(components: PayrollComponents) -> PayrollTotals:
    """
    Compute gross salary, total deductions and net pay.

    gross = base + overtime + bonuses + allowances
    deductions = tax + late penalties + absences + other deductions
    net = gross - deductions

    Net pay is not clamped: deductions larger than gross give a negative
    net, and that signed value is what gets posted to the ledger.
    """
    c = normalize_components(components)

    gross = c.base_salary + c.overtime_pay + c.bonuses + c.allowances
    deductions = c.tax + c.late_penalties + c.absences + c.other_deductions

    return PayrollTotals(
        gross_salary=gross,
        total_deductions=deductions,
        net_pay=gross - deductions,
    )
