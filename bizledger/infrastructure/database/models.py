"""SQLAlchemy ORM models for the embedded bookkeeping database"""

from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class Money(TypeDecorator):
    """Decimal stored as its canonical string so SQLite never turns money into floats"""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value))


user_permissions = Table(
    "user_permissions",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    company = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    tax_id = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    unit_price = Column(Money, nullable=False, default=Decimal("0"))
    tax_percent = Column(Money, nullable=False, default=Decimal("0"))


class Invoice(Base):
    """Invoice header; totals are materialized from its items at creation"""

    __tablename__ = "invoices"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_number = Column(Text, nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    status = Column(Text, nullable=False, default="Draft")
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    subtotal = Column(Money, nullable=False, default=Decimal("0"))
    tax = Column(Money, nullable=False, default=Decimal("0"))
    discount = Column(Money, nullable=False, default=Decimal("0"))  # discount amount actually applied
    discount_percent = Column(Money, nullable=False, default=Decimal("0"))
    advance = Column(Money, nullable=False, default=Decimal("0"))
    total = Column(Money, nullable=False, default=Decimal("0"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    customer = relationship("Customer", lazy="selectin")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InvoiceItem.id",
        lazy="selectin",
    )


class NumberSequence(Base):
    """Last number handed out per document series; only ever increases"""

    __tablename__ = "number_sequences"

    name = Column(Text, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)


class InvoiceItem(Base):
    __tablename__ = "invoice_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Money, nullable=False, default=Decimal("0"))
    tax_percent = Column(Money, nullable=False, default=Decimal("0"))
    line_total = Column(Money, nullable=False, default=Decimal("0"))

    invoice = relationship("Invoice", back_populates="items")


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    category_type = Column(Text, nullable=False)  # Income | Expense


class Account(Base):
    """Money account; balance is a materialized sum of its transactions"""

    __tablename__ = "accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    account_type = Column(Text, nullable=False)  # Cash | Bank | Credit
    balance = Column(Money, nullable=False, default=Decimal("0"))
    currency = Column(Text, nullable=False, default="$")


class Transaction(Base):
    """Immutable ledger entry"""

    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    amount = Column(Money, nullable=False)
    transaction_type = Column(Text, nullable=False)  # Income | Expense
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    reference_id = Column(Text, nullable=True, index=True)  # e.g. PAY-12
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    category = relationship("Category", lazy="selectin")


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    salary = Column(Money, nullable=False, default=Decimal("0"))
    allowances = Column(Money, nullable=False, default=Decimal("0"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class PayrollRecord(Base):
    __tablename__ = "payroll"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    base_salary = Column(Money, nullable=False, default=Decimal("0"))
    overtime_pay = Column(Money, nullable=False, default=Decimal("0"))
    bonuses = Column(Money, nullable=False, default=Decimal("0"))
    allowances = Column(Money, nullable=False, default=Decimal("0"))
    gross_salary = Column(Money, nullable=False, default=Decimal("0"))
    tax = Column(Money, nullable=False, default=Decimal("0"))
    late_penalties = Column(Money, nullable=False, default=Decimal("0"))
    absences = Column(Money, nullable=False, default=Decimal("0"))
    other_deductions = Column(Money, nullable=False, default=Decimal("0"))
    total_deductions = Column(Money, nullable=False, default=Decimal("0"))
    net_pay = Column(Money, nullable=False, default=Decimal("0"))
    pay_period_start = Column(Date, nullable=True)
    pay_period_end = Column(Date, nullable=True)
    payment_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="Paid")  # Paid | Pending
    notes = Column(Text, nullable=True)

    employee = relationship("Employee", lazy="selectin")


class Permission(Base):
    __tablename__ = "permissions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=True)


class User(Base):
    """Application user; password_hash is owned by the login layer"""

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default="User")  # Admin | User

    permissions = relationship("Permission", secondary=user_permissions, lazy="selectin")


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(Text, nullable=False)
    module = Column(Text, nullable=False)
    record_id = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())

    user = relationship("User", lazy="selectin")


class BusinessSettings(Base):
    """Single-row business profile printed on invoices (id is always 1)"""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    business_name = Column(Text, nullable=False, default="My Business")
    business_tagline = Column(Text, nullable=True)
    business_address = Column(Text, nullable=True)
    business_phone = Column(Text, nullable=True)
    business_email = Column(Text, nullable=True)
    currency_symbol = Column(Text, nullable=False, default="$")
    tax_label = Column(Text, nullable=False, default="Tax")
    default_footer = Column(Text, nullable=True)
    template_type = Column(Text, nullable=False, default="Basic")
    bank_name = Column(Text, nullable=True)
    bank_account_name = Column(Text, nullable=True)
    bank_account_no = Column(Text, nullable=True)
    bank_branch = Column(Text, nullable=True)
