"""GET /v1/audit-logs - browse the audit trail"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from bizledger.api.dependencies import get_audit_logger, require_permission
from bizledger.api.v1.schemas import AuditLogItem
from bizledger.domain.exceptions import ValidationError
from bizledger.domain.permissions import Permission
from bizledger.services.access import Actor
from bizledger.services.audit import AuditLogger

router = APIRouter()


@router.get("/audit-logs", response_model=List[AuditLogItem])
def list_audit_logs(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    module: Optional[str] = Query(None, description="e.g. Invoices, Payroll"),
    user_id: Optional[int] = Query(None),
    on_date: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD"),
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    actor: Actor = Depends(require_permission(Permission.VIEW_LOGS)),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Newest entries first, optionally filtered by module, user, day or month"""
    month_start = None
    if month:
        try:
            month_start = date.fromisoformat(f"{month}-01")
        except ValueError:
            raise ValidationError(f"Invalid month '{month}': expected YYYY-MM") from None
    entries = audit.search(
        limit=limit,
        offset=offset,
        module=module,
        user_id=user_id,
        on_date=on_date,
        month=month_start,
    )
    return [
        AuditLogItem(
            id=entry.id,
            user_id=entry.user_id,
            username=entry.user.username if entry.user else None,
            action=entry.action,
            module=entry.module,
            record_id=entry.record_id,
            description=entry.description,
            timestamp=entry.timestamp,
        )
        for entry in entries
    ]
