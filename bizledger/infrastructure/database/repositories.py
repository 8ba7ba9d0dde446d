"""Data access layer for bookkeeping entities.

Repositories flush to obtain ids but never commit; the caller's unit of
work decides when changes become visible.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from bizledger.domain.models import InvoiceTotals, LineItemInput, PayrollTotals
from bizledger.infrastructure.database.models import (
    Account,
    AuditLog,
    BusinessSettings,
    Category,
    Customer,
    Employee,
    Invoice,
    InvoiceItem,
    NumberSequence,
    PayrollRecord,
    Permission,
    Product,
    Transaction,
    User,
)

INVOICE_SERIES = "invoice"


class _CrudRepository:
    """Shared get/list/create/update/delete for simple master-data tables"""

    model: Any = None
    order_by: Optional[str] = None  # column name on model

    def __init__(self, db: Session):
        self.db = db

    def get(self, record_id: int):
        return self.db.get(self.model, record_id)

    def list(self) -> List[Any]:
        query = self.db.query(self.model)
        if self.order_by is not None:
            query = query.order_by(getattr(self.model, self.order_by), self.model.id)
        return query.all()

    def create(self, **fields):
        record = self.model(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, record, **fields):
        for name, value in fields.items():
            setattr(record, name, value)
        self.db.flush()
        return record

    def delete(self, record) -> None:
        self.db.delete(record)
        self.db.flush()


class CustomerRepository(_CrudRepository):
    model = Customer
    order_by = "name"


class ProductRepository(_CrudRepository):
    model = Product
    order_by = "name"


class EmployeeRepository(_CrudRepository):
    model = Employee
    order_by = "name"


class CategoryRepository(_CrudRepository):
    model = Category
    order_by = "name"


class AccountRepository(_CrudRepository):
    model = Account
    order_by = "id"

    def get_by_type(self, account_type: str) -> List[Account]:
        return self.db.query(Account).filter(Account.account_type == account_type).order_by(Account.id).all()


class InvoiceRepository:
    """Repository for invoices and their line items"""

    def __init__(self, db: Session):
        self.db = db

    def next_sequence(self) -> int:
        """
        Allocate the next invoice sequence number.

        The series continues from max(last issued, max invoice id), so it
        starts at max id + 1 on a fresh or migrated database and never hands
        out a number again after the newest invoice is deleted. The bump is
        part of the caller's unit of work and is undone on rollback.
        """
        counter = self.db.get(NumberSequence, INVOICE_SERIES)
        if counter is None:
            counter = NumberSequence(name=INVOICE_SERIES, last_value=0)
            self.db.add(counter)
        current_max_id = self.db.query(func.coalesce(func.max(Invoice.id), 0)).scalar()
        counter.last_value = max(counter.last_value or 0, int(current_max_id)) + 1
        self.db.flush()
        return counter.last_value

    def create_invoice(
        self,
        invoice_number: str,
        customer_id: int,
        status: str,
        issue_date: date,
        due_date: date,
        notes: Optional[str],
        discount_percent: Decimal,
        advance: Decimal,
        totals: InvoiceTotals,
    ) -> Invoice:
        """Insert the invoice header with materialized totals"""
        db_invoice = Invoice(
            invoice_number=invoice_number,
            customer_id=customer_id,
            status=status,
            issue_date=issue_date,
            due_date=due_date,
            notes=notes,
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=totals.discount_amount,
            discount_percent=discount_percent,
            advance=advance,
            total=totals.total,
        )
        self.db.add(db_invoice)
        self.db.flush()  # Get ID without committing
        return db_invoice

    def add_items(
        self,
        invoice_id: int,
        items: Sequence[LineItemInput],
        line_totals: Sequence[Decimal],
    ) -> List[InvoiceItem]:
        """Insert line items in request order"""
        db_items = []
        for item, line_total in zip(items, line_totals):
            db_item = InvoiceItem(
                invoice_id=invoice_id,
                product_name=item.product_name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_percent=item.tax_percent,
                line_total=line_total,
            )
            self.db.add(db_item)
            db_items.append(db_item)
        self.db.flush()
        return db_items

    def get(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.get(Invoice, invoice_id)

    def list(self, limit: Optional[int] = None) -> List[Invoice]:
        query = self.db.query(Invoice).order_by(Invoice.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_by_status(self, statuses: Sequence[str]) -> List[Invoice]:
        return self.db.query(Invoice).filter(Invoice.status.in_(list(statuses))).all()

    def count(self) -> int:
        return self.db.query(func.count(Invoice.id)).scalar()

    def delete(self, invoice: Invoice) -> None:
        self.db.delete(invoice)
        self.db.flush()


class TransactionRepository:
    """Repository for immutable ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        account_id: int,
        amount: Decimal,
        transaction_type: str,
        txn_date: date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Transaction:
        db_txn = Transaction(
            account_id=account_id,
            category_id=category_id,
            amount=amount,
            transaction_type=transaction_type,
            description=description,
            date=txn_date,
            reference_id=reference_id,
        )
        self.db.add(db_txn)
        self.db.flush()
        return db_txn

    def list_recent(self, limit: int = 100) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .limit(limit)
            .all()
        )

    def list_for_account(self, account_id: int) -> List[Transaction]:
        """All entries for an account in posting order"""
        return (
            self.db.query(Transaction)
            .filter(Transaction.account_id == account_id)
            .order_by(Transaction.id)
            .all()
        )

    def all(self) -> List[Transaction]:
        return self.db.query(Transaction).order_by(Transaction.id).all()


class PayrollRepository:
    """Repository for payroll records"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        employee_id: int,
        components: Dict[str, Decimal],
        totals: PayrollTotals,
        payment_date: date,
        status: str,
        pay_period_start: Optional[date] = None,
        pay_period_end: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> PayrollRecord:
        db_record = PayrollRecord(
            employee_id=employee_id,
            gross_salary=totals.gross_salary,
            total_deductions=totals.total_deductions,
            net_pay=totals.net_pay,
            payment_date=payment_date,
            status=status,
            pay_period_start=pay_period_start,
            pay_period_end=pay_period_end,
            notes=notes,
            **components,
        )
        self.db.add(db_record)
        self.db.flush()
        return db_record

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        return self.db.get(PayrollRecord, payroll_id)

    def list(self) -> List[PayrollRecord]:
        return (
            self.db.query(PayrollRecord)
            .order_by(PayrollRecord.payment_date.desc(), PayrollRecord.id.desc())
            .all()
        )


class UserRepository:
    """Repository for users and their permission grants"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def list(self) -> List[User]:
        return self.db.query(User).order_by(User.username).all()

    def count(self) -> int:
        return self.db.query(func.count(User.id)).scalar()

    def create(self, username: str, role: str, password_hash: Optional[str] = None) -> User:
        db_user = User(username=username, role=role, password_hash=password_hash)
        self.db.add(db_user)
        self.db.flush()
        return db_user

    def set_permissions(self, user: User, permission_names: Sequence[str]) -> None:
        """Replace a user's grants with the named permissions"""
        user.permissions = (
            self.db.query(Permission).filter(Permission.name.in_(list(permission_names))).all()
        )
        self.db.flush()

    def permission_names(self, user: User) -> List[str]:
        return [permission.name for permission in user.permissions]


class SettingsRepository:
    """The single business profile row"""

    PROFILE_ID = 1

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> Optional[BusinessSettings]:
        return self.db.get(BusinessSettings, self.PROFILE_ID)

    def create_default(self, currency_symbol: str) -> BusinessSettings:
        profile = BusinessSettings(id=self.PROFILE_ID, currency_symbol=currency_symbol)
        self.db.add(profile)
        self.db.flush()
        return profile

    def update(self, profile: BusinessSettings, **fields) -> BusinessSettings:
        for name, value in fields.items():
            setattr(profile, name, value)
        self.db.flush()
        return profile


class PermissionRepository:
    def __init__(self, db: Session):
        self.db = db

    def names(self) -> List[str]:
        return [name for (name,) in self.db.query(Permission.name).all()]

    def create(self, name: str, description: str) -> Permission:
        db_permission = Permission(name=name, description=description)
        self.db.add(db_permission)
        self.db.flush()
        return db_permission


class AuditLogRepository:
    """Repository for audit trail entries"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: Optional[int],
        action: str,
        module: str,
        record_id: Optional[str],
        description: str,
    ) -> AuditLog:
        db_entry = AuditLog(
            user_id=user_id,
            action=action,
            module=module,
            record_id=record_id,
            description=description,
        )
        self.db.add(db_entry)
        self.db.flush()
        return db_entry

    def search(
        self,
        limit: int = 50,
        offset: int = 0,
        module: Optional[str] = None,
        user_id: Optional[int] = None,
        on_date: Optional[date] = None,
        month: Optional[date] = None,
    ) -> List[AuditLog]:
        """
        Newest-first audit entries with optional filters.

        Args:
            on_date: only entries logged on this calendar day
            month: only entries logged in the month containing this date
        """
        query = self.db.query(AuditLog)
        if module:
            query = query.filter(AuditLog.module == module)
        if user_id is not None:
            query = query.filter(AuditLog.user_id == user_id)
        if on_date is not None:
            start = datetime.combine(on_date, datetime.min.time())
            query = query.filter(AuditLog.timestamp >= start, AuditLog.timestamp < start + timedelta(days=1))
        if month is not None:
            start = datetime(month.year, month.month, 1)
            end = datetime(month.year + 1, 1, 1) if month.month == 12 else datetime(month.year, month.month + 1, 1)
            query = query.filter(AuditLog.timestamp >= start, AuditLog.timestamp < end)

        return (
            query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
