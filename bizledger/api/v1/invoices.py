"""Invoice endpoints: create with items, read, change status, delete"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from bizledger.api.dependencies import get_audit_logger, get_coordinator, require_permission
from bizledger.api.v1.schemas import (
    InvoiceCreateRequest,
    InvoiceResponse,
    InvoiceStatusRequest,
    LineItemResponse,
)
from bizledger.domain.models import InvoiceDraft, LineItemInput
from bizledger.domain.money import present
from bizledger.domain.permissions import Permission
from bizledger.infrastructure.database.models import Invoice
from bizledger.services.access import Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.coordinator import LedgerCoordinator

router = APIRouter()


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    """Build the API view of an invoice, rounding money for presentation"""
    return InvoiceResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer.name if invoice.customer else None,
        customer_phone=invoice.customer.phone if invoice.customer else None,
        status=invoice.status,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        notes=invoice.notes,
        subtotal=present(invoice.subtotal),
        tax=present(invoice.tax),
        discount=present(invoice.discount),
        discount_percent=invoice.discount_percent,
        advance=present(invoice.advance),
        total=present(invoice.total),
        items=[
            LineItemResponse(
                id=item.id,
                product_name=item.product_name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_percent=item.tax_percent,
                line_total=present(item.line_total),
            )
            for item in invoice.items
        ],
    )


@router.post("/invoices", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    request_body: InvoiceCreateRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.CREATE_INVOICE)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """
    Create an invoice with its line items atomically.

    Totals are always computed server-side from the items; the response
    carries the allocated invoice number.
    """
    draft = InvoiceDraft(
        customer_id=request_body.customer_id,
        issue_date=request_body.issue_date,
        due_date=request_body.due_date,
        status=request_body.status,
        notes=request_body.notes,
        discount=request_body.discount,
        discount_percent=request_body.discount_percent,
        advance=request_body.advance,
        items=[
            LineItemInput(
                product_name=item.product_name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_percent=item.tax_percent,
            )
            for item in request_body.items
        ],
    )
    invoice_id = coordinator.create_invoice_atomic(draft)
    invoice = coordinator.get_invoice(invoice_id)

    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "CREATE",
        "Invoices",
        invoice_id,
        f"Created invoice {invoice.invoice_number} for {present(invoice.total)}",
    )
    return invoice_response(invoice)


@router.get("/invoices", response_model=List[InvoiceResponse])
def list_invoices(
    limit: Optional[int] = Query(None, ge=1),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
):
    """Invoices newest first"""
    return [invoice_response(invoice) for invoice in coordinator.list_invoices(limit)]


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, coordinator: LedgerCoordinator = Depends(get_coordinator)):
    return invoice_response(coordinator.get_invoice(invoice_id))


@router.patch("/invoices/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: int,
    request_body: InvoiceStatusRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.CREATE_INVOICE)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    coordinator.update_invoice_status(invoice_id, request_body.status)
    invoice = coordinator.get_invoice(invoice_id)
    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "UPDATE",
        "Invoices",
        invoice_id,
        f"Changed invoice {invoice.invoice_number} status to {invoice.status}",
    )
    return invoice_response(invoice)


@router.delete("/invoices/{invoice_id}", status_code=204)
def delete_invoice(
    invoice_id: int,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.DELETE_INVOICE)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    invoice_number = coordinator.delete_invoice(invoice_id)
    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "DELETE",
        "Invoices",
        invoice_id,
        f"Deleted invoice {invoice_number}",
    )
