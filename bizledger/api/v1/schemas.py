"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CreatedResponse(BaseModel):
    id: int


# ── Invoices ───────────────────────────────────────────────


class LineItemRequest(BaseModel):
    product_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    quantity: int
    unit_price: Decimal
    tax_percent: Decimal = Decimal("0")


class InvoiceCreateRequest(BaseModel):
    """Request body for POST /v1/invoices"""

    customer_id: int
    status: str = "Draft"
    issue_date: date
    due_date: date
    notes: Optional[str] = None
    discount: Decimal = Field(Decimal("0"), description="Flat discount, ignored when discount_percent > 0")
    discount_percent: Decimal = Decimal("0")
    advance: Decimal = Decimal("0")
    items: List[LineItemRequest]


class InvoiceStatusRequest(BaseModel):
    status: str


class LineItemResponse(BaseModel):
    id: int
    product_name: str
    description: Optional[str] = None
    quantity: int
    unit_price: Decimal
    tax_percent: Decimal
    line_total: Decimal


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    status: str
    issue_date: date
    due_date: date
    notes: Optional[str] = None
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    discount_percent: Decimal
    advance: Decimal
    total: Decimal
    items: List[LineItemResponse] = []


# ── Payroll ────────────────────────────────────────────────


class PayrollCreateRequest(BaseModel):
    """Request body for POST /v1/payroll"""

    employee_id: int
    base_salary: Decimal
    overtime_pay: Decimal = Decimal("0")
    bonuses: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    late_penalties: Decimal = Decimal("0")
    absences: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None
    payment_date: date
    status: str = "Paid"
    notes: Optional[str] = None


class PayrollResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    employee_role: Optional[str] = None
    base_salary: Decimal
    overtime_pay: Decimal
    bonuses: Decimal
    allowances: Decimal
    gross_salary: Decimal
    tax: Decimal
    late_penalties: Decimal
    absences: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None
    payment_date: date
    status: str
    notes: Optional[str] = None


# ── Ledger ─────────────────────────────────────────────────


class AccountCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    account_type: str
    currency: Optional[str] = None
    opening_balance: Decimal = Decimal("0")


class AccountResponse(BaseModel):
    id: int
    name: str
    account_type: str
    balance: Decimal
    currency: str


class ReconciliationResponse(BaseModel):
    account_id: int
    stored_balance: Decimal
    computed_balance: Decimal
    transaction_count: int
    in_balance: bool


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    account_id: int
    category_id: Optional[int] = None
    amount: Decimal
    transaction_type: str
    description: Optional[str] = None
    date: date
    reference_id: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    amount: Decimal
    transaction_type: str
    description: Optional[str] = None
    date: date
    reference_id: Optional[str] = None


# ── Directory ──────────────────────────────────────────────


class CustomerRequest(BaseModel):
    name: str = Field(..., min_length=1)
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None


class CustomerResponse(CustomerRequest):
    id: int


class ProductRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    unit_price: Decimal
    tax_percent: Decimal = Decimal("0")


class ProductResponse(ProductRequest):
    id: int


class EmployeeRequest(BaseModel):
    name: str = Field(..., min_length=1)
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    salary: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")


class EmployeeResponse(EmployeeRequest):
    id: int


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    category_type: str


class CategoryResponse(CategoryRequest):
    id: int


# ── Reports & audit ────────────────────────────────────────


class DashboardResponse(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    cash_in_hand: Decimal
    bank_balance: Decimal
    outstanding_amount: Decimal
    total_invoices: int
    recent_invoices: List[InvoiceResponse]


class CashFlowItem(BaseModel):
    month: str
    income: Decimal
    expense: Decimal
    net: Decimal


class CategoryReportItem(BaseModel):
    category_name: str
    category_type: str
    total_amount: Decimal
    count: int


class AuditLogItem(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    action: str
    module: str
    record_id: Optional[str] = None
    description: Optional[str] = None
    timestamp: datetime


# ── Administration ─────────────────────────────────────────


class BusinessProfileRequest(BaseModel):
    """Request body for PUT /v1/settings"""

    business_name: str = Field(..., min_length=1)
    business_tagline: Optional[str] = None
    business_address: Optional[str] = None
    business_phone: Optional[str] = None
    business_email: Optional[str] = None
    currency_symbol: str = "$"
    tax_label: str = "Tax"
    default_footer: Optional[str] = None
    template_type: str = "Basic"
    bank_name: Optional[str] = None
    bank_account_name: Optional[str] = None
    bank_account_no: Optional[str] = None
    bank_branch: Optional[str] = None


class BusinessProfileResponse(BusinessProfileRequest):
    pass


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=1)
    role: str = "User"
    permissions: List[str] = []


class UserPermissionsRequest(BaseModel):
    permissions: List[str]


class UserResponse(BaseModel):
    id: int
    username: str
    role: str
    permissions: List[str]
