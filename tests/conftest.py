"""Pytest fixtures for testing"""

from datetime import date
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func

from bizledger.api.main import create_app
from bizledger.domain.models import (
    InvoiceDraft,
    LineItemInput,
    PayrollComponents,
    PayrollDraft,
    PayrollStatus,
)
from bizledger.infrastructure.database.bootstrap import init_database
from bizledger.infrastructure.database.session import Database
from bizledger.services.access import AccessService
from bizledger.services.audit import AuditLogger
from bizledger.services.business import BusinessProfileService
from bizledger.services.coordinator import LedgerCoordinator
from bizledger.services.directory import DirectoryService
from bizledger.services.reports import ReportService

CASH_ACCOUNT_ID = 1
BANK_ACCOUNT_ID = 2
ADMIN_USER_ID = 1


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    """Fresh, seeded database file per test"""
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    init_database(db)
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def coordinator(database: Database) -> LedgerCoordinator:
    return LedgerCoordinator(database, disbursement_account_id=CASH_ACCOUNT_ID)


@pytest.fixture
def directory(database: Database) -> DirectoryService:
    return DirectoryService(database)


@pytest.fixture
def reports(database: Database) -> ReportService:
    return ReportService(database, cash_account_id=CASH_ACCOUNT_ID)


@pytest.fixture
def audit_logger(database: Database) -> AuditLogger:
    return AuditLogger(database)


@pytest.fixture
def access(database: Database) -> AccessService:
    return AccessService(database)


@pytest.fixture
def business(database: Database) -> BusinessProfileService:
    return BusinessProfileService(database)


@pytest.fixture
def customer_id(directory: DirectoryService) -> int:
    return directory.create_customer("Acme Traders", phone="555-0100", email="billing@acme.test")


@pytest.fixture
def employee_id(directory: DirectoryService) -> int:
    return directory.create_employee("Dana Reyes", salary=Decimal("2000"), role="Clerk")


@pytest.fixture
def invoice_draft(customer_id: int) -> InvoiceDraft:
    """Two items, 10% discount and a 5.00 advance: total 121.00"""
    return InvoiceDraft(
        customer_id=customer_id,
        issue_date=date(2026, 3, 1),
        due_date=date(2026, 3, 31),
        items=[
            LineItemInput(product_name="Widget", quantity=2, unit_price=Decimal("50.00"), tax_percent=Decimal("10")),
            LineItemInput(product_name="Service call", quantity=1, unit_price=Decimal("30.00")),
        ],
        discount_percent=Decimal("10"),
        advance=Decimal("5.00"),
    )


@pytest.fixture
def payroll_draft(employee_id: int) -> PayrollDraft:
    """Gross 2175, deductions 200, net 1975"""
    return PayrollDraft(
        employee_id=employee_id,
        payment_date=date(2026, 3, 31),
        status=PayrollStatus.PAID,
        pay_period_start=date(2026, 3, 1),
        pay_period_end=date(2026, 3, 31),
        components=PayrollComponents(
            base_salary=Decimal("2000"),
            overtime_pay=Decimal("100"),
            bonuses=Decimal("50"),
            allowances=Decimal("25"),
            tax=Decimal("200"),
        ),
    )


@pytest.fixture
def count_rows(database: Database):
    """Count rows of an ORM model in a separate unit of work"""

    def _count(model) -> int:
        with database.unit_of_work("count_rows") as session:
            return session.query(func.count(model.id)).scalar()

    return _count


@pytest.fixture
def client(database: Database) -> TestClient:
    """FastAPI test client backed by the test database"""
    return TestClient(create_app(database))


@pytest.fixture
def admin_headers() -> dict:
    return {"X-User-Id": str(ADMIN_USER_ID)}
