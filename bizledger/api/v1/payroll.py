"""Payroll endpoints"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from bizledger.api.dependencies import get_audit_logger, get_coordinator, require_permission
from bizledger.api.v1.schemas import PayrollCreateRequest, PayrollResponse
from bizledger.domain.models import PayrollComponents, PayrollDraft
from bizledger.domain.money import present
from bizledger.domain.permissions import Permission
from bizledger.infrastructure.database.models import PayrollRecord
from bizledger.services.access import Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.coordinator import LedgerCoordinator

router = APIRouter()

MONEY_FIELDS = (
    "base_salary",
    "overtime_pay",
    "bonuses",
    "allowances",
    "gross_salary",
    "tax",
    "late_penalties",
    "absences",
    "other_deductions",
    "total_deductions",
    "net_pay",
)


def payroll_response(record: PayrollRecord) -> PayrollResponse:
    return PayrollResponse(
        id=record.id,
        employee_id=record.employee_id,
        employee_name=record.employee.name if record.employee else None,
        employee_role=record.employee.role if record.employee else None,
        pay_period_start=record.pay_period_start,
        pay_period_end=record.pay_period_end,
        payment_date=record.payment_date,
        status=record.status,
        notes=record.notes,
        **{name: present(getattr(record, name)) for name in MONEY_FIELDS},
    )


@router.post("/payroll", response_model=PayrollResponse, status_code=201)
def create_payroll(
    request_body: PayrollCreateRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_PAYROLL)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """
    Record a pay run.

    A record created as Paid also posts a salary expense against the
    disbursement account in the same atomic write.
    """
    draft = PayrollDraft(
        employee_id=request_body.employee_id,
        payment_date=request_body.payment_date,
        status=request_body.status,
        pay_period_start=request_body.pay_period_start,
        pay_period_end=request_body.pay_period_end,
        notes=request_body.notes,
        components=PayrollComponents(
            base_salary=request_body.base_salary,
            overtime_pay=request_body.overtime_pay,
            bonuses=request_body.bonuses,
            allowances=request_body.allowances,
            tax=request_body.tax,
            late_penalties=request_body.late_penalties,
            absences=request_body.absences,
            other_deductions=request_body.other_deductions,
        ),
    )
    payroll_id = coordinator.create_payroll_atomic(draft)
    record = coordinator.get_payroll(payroll_id)

    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "CREATE",
        "Payroll",
        payroll_id,
        f"Recorded {record.status} payroll for employee {record.employee_id}: net {present(record.net_pay)}",
    )
    return payroll_response(record)


@router.get("/payroll", response_model=List[PayrollResponse])
def list_payroll(coordinator: LedgerCoordinator = Depends(get_coordinator)):
    """Payroll records, latest payment date first"""
    return [payroll_response(record) for record in coordinator.list_payroll()]


@router.get("/payroll/{payroll_id}", response_model=PayrollResponse)
def get_payroll(payroll_id: int, coordinator: LedgerCoordinator = Depends(get_coordinator)):
    return payroll_response(coordinator.get_payroll(payroll_id))
