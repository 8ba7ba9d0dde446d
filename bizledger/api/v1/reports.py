"""GET /v1/reports/* - dashboard and financial summaries"""

from typing import List

from fastapi import APIRouter, Depends, Query

from bizledger.api.dependencies import get_coordinator, get_reports, require_permission
from bizledger.api.v1.invoices import invoice_response
from bizledger.api.v1.schemas import CashFlowItem, CategoryReportItem, DashboardResponse
from bizledger.domain.money import present
from bizledger.domain.permissions import Permission
from bizledger.services.access import Actor
from bizledger.services.coordinator import LedgerCoordinator
from bizledger.services.reports import ReportService

router = APIRouter()


@router.get("/reports/dashboard", response_model=DashboardResponse)
def dashboard(
    actor: Actor = Depends(require_permission(Permission.VIEW_REPORTS)),
    reports: ReportService = Depends(get_reports),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
):
    stats = reports.dashboard()
    return DashboardResponse(
        total_revenue=present(stats.total_revenue),
        total_expenses=present(stats.total_expenses),
        net_profit=present(stats.net_profit),
        cash_in_hand=present(stats.cash_in_hand),
        bank_balance=present(stats.bank_balance),
        outstanding_amount=present(stats.outstanding_amount),
        total_invoices=stats.total_invoices,
        recent_invoices=[invoice_response(coordinator.get_invoice(i)) for i in stats.recent_invoice_ids],
    )


@router.get("/reports/cash-flow", response_model=List[CashFlowItem])
def cash_flow(
    months: int = Query(12, ge=1, le=120),
    actor: Actor = Depends(require_permission(Permission.VIEW_REPORTS)),
    reports: ReportService = Depends(get_reports),
):
    """Income, expense and net per month, newest first"""
    return [
        CashFlowItem(
            month=entry.month,
            income=present(entry.income),
            expense=present(entry.expense),
            net=present(entry.net),
        )
        for entry in reports.cash_flow(months)
    ]


@router.get("/reports/categories", response_model=List[CategoryReportItem])
def category_report(
    actor: Actor = Depends(require_permission(Permission.VIEW_REPORTS)),
    reports: ReportService = Depends(get_reports),
):
    return [
        CategoryReportItem(
            category_name=entry.category_name,
            category_type=entry.category_type,
            total_amount=present(entry.total_amount),
            count=entry.count,
        )
        for entry in reports.category_totals()
    ]
