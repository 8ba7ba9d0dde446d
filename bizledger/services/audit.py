"""Best-effort audit trail"""

import logging
from datetime import date
from typing import List, Optional

from bizledger.infrastructure.database.models import AuditLog
from bizledger.infrastructure.database.repositories import AuditLogRepository
from bizledger.infrastructure.database.session import Database
from bizledger.infrastructure.observability.metrics import audit_failure_counter

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Records who performed which mutation.

    record() is called after the audited operation has committed and never
    raises: a failed audit write is logged and ignored so it cannot undo or
    block the operation itself.
    """

    def __init__(self, database: Database):
        self.database = database

    def record(
        self,
        user_id: Optional[int],
        action: str,
        module: str,
        record_id: Optional[str | int] = None,
        description: str = "",
    ) -> bool:
        """Returns False when the entry could not be written"""
        try:
            with self.database.unit_of_work("audit_log") as session:
                AuditLogRepository(session).create(
                    user_id=user_id,
                    action=action,
                    module=module,
                    record_id=str(record_id) if record_id is not None else None,
                    description=description,
                )
            return True
        except Exception as e:
            audit_failure_counter.inc()
            logger.warning(
                f"Audit log write failed: {e}",
                extra={"audit_action": action, "audit_module": module, "user_id": user_id},
                exc_info=True,
            )
            return False

    def search(
        self,
        limit: int = 50,
        offset: int = 0,
        module: Optional[str] = None,
        user_id: Optional[int] = None,
        on_date: Optional[date] = None,
        month: Optional[date] = None,
    ) -> List[AuditLog]:
        with self.database.unit_of_work("search_audit_logs") as session:
            return AuditLogRepository(session).search(
                limit=limit,
                offset=offset,
                module=module,
                user_id=user_id,
                on_date=on_date,
                month=month,
            )
