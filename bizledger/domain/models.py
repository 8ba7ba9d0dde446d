"""Domain models - pure Python dataclasses and closed enums for bookkeeping entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Type, TypeVar

from bizledger.domain.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class InvoiceStatus(str, Enum):
    """Invoice lifecycle: Draft -> Sent -> Paid/Overdue, or Cancelled"""

    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class PayrollStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"


class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class CategoryType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class AccountType(str, Enum):
    CASH = "Cash"
    BANK = "Bank"
    CREDIT = "Credit"


class UserRole(str, Enum):
    ADMIN = "Admin"
    USER = "User"


class InvoiceTemplate(str, Enum):
    """Layouts the invoice renderer knows"""

    BASIC = "Basic"
    PROFESSIONAL = "Professional"
    MODERN = "Modern"
    CLEAR_STYLE = "ClearStyle"


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    """Coerce a raw value into a closed enum, rejecting anything unknown"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}': expected one of {allowed}") from None


@dataclass
class LineItemInput:
    """One priced row requested for an invoice"""

    product_name: str
    quantity: int
    unit_price: Decimal
    tax_percent: Decimal = Decimal("0")
    description: Optional[str] = None


@dataclass
class InvoiceDraft:
    """Everything needed to create an invoice with its items"""

    customer_id: int
    issue_date: date
    due_date: date
    items: List[LineItemInput]
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    discount: Decimal = Decimal("0")  # flat discount, ignored when discount_percent > 0
    discount_percent: Decimal = Decimal("0")
    advance: Decimal = Decimal("0")


@dataclass
class InvoiceTotals:
    """Derived invoice amounts, unrounded"""

    subtotal: Decimal
    tax: Decimal
    discount_amount: Decimal
    total: Decimal
    line_totals: List[Decimal] = field(default_factory=list)


@dataclass
class PayrollComponents:
    """Compensation and deduction components of one pay run"""

    base_salary: Decimal
    overtime_pay: Decimal = Decimal("0")
    bonuses: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    late_penalties: Decimal = Decimal("0")
    absences: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")


@dataclass
class PayrollTotals:
    gross_salary: Decimal
    total_deductions: Decimal
    net_pay: Decimal  # may be negative when deductions exceed gross


@dataclass
class PayrollDraft:
    """Payroll record to create; a Paid record also posts a ledger expense"""

    employee_id: int
    payment_date: date
    components: PayrollComponents
    status: PayrollStatus = PayrollStatus.PAID
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None
    notes: Optional[str] = None


@dataclass
class TransactionDraft:
    """Ledger entry to post against an account"""

    account_id: int
    amount: Decimal
    transaction_type: TransactionType
    date: date
    category_id: Optional[int] = None
    description: Optional[str] = None
    reference_id: Optional[str] = None


@dataclass
class BalanceReconciliation:
    """Stored account balance compared with the sum of its ledger entries"""

    account_id: int
    stored_balance: Decimal
    computed_balance: Decimal
    transaction_count: int

    @property
    def in_balance(self) -> bool:
        return self.stored_balance == self.computed_balance

    @property
    def drift(self) -> Decimal:
        return self.stored_balance - self.computed_balance


@dataclass
class CashFlowEntry:
    month: str  # YYYY-MM
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass
class CategoryReportEntry:
    category_name: str
    category_type: str
    total_amount: Decimal
    count: int


@dataclass
class DashboardStats:
    """Headline figures for the home screen"""

    total_revenue: Decimal
    total_expenses: Decimal
    cash_in_hand: Decimal
    bank_balance: Decimal
    outstanding_amount: Decimal
    total_invoices: int
    recent_invoice_ids: List[int] = field(default_factory=list)

    @property
    def net_profit(self) -> Decimal:
        return self.total_revenue - self.total_expenses
