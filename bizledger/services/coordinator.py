"""Ledger transaction coordinator.

Owns every financial write. Each public operation runs in exactly one
unit of work, so an invoice and its items, or a paid payroll record with
its ledger expense and balance change, are committed together or not at
all. Account balances are maintained here incrementally and can be
checked against the ledger with reconcile_account().
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from bizledger.config import settings
from bizledger.domain.exceptions import NotFoundError, ValidationError
from bizledger.domain.invoicing import calculate_invoice_totals, format_invoice_number, validate_line_item
from bizledger.domain.models import (
    AccountType,
    BalanceReconciliation,
    InvoiceDraft,
    InvoiceStatus,
    InvoiceTotals,
    LineItemInput,
    PayrollDraft,
    PayrollStatus,
    TransactionDraft,
    TransactionType,
    parse_enum,
)
from bizledger.domain.money import ZERO, require_non_negative, require_percent, signed_amount, to_decimal
from bizledger.domain.payroll import calculate_payroll_totals, normalize_components
from bizledger.infrastructure.database.models import Account, Invoice, PayrollRecord, Transaction
from bizledger.infrastructure.database.repositories import (
    AccountRepository,
    CategoryRepository,
    CustomerRepository,
    EmployeeRepository,
    InvoiceRepository,
    PayrollRepository,
    TransactionRepository,
)
from bizledger.infrastructure.database.session import Database
from bizledger.infrastructure.observability.logging import log_ledger_event
from bizledger.infrastructure.observability.metrics import (
    invoices_created_counter,
    payroll_records_counter,
    record_ledger_posting,
)


def payroll_reference(payroll_id: int) -> str:
    """Ledger reference linking an expense back to its payroll record"""
    return f"PAY-{payroll_id}"


class LedgerCoordinator:
    """Atomic invoice, payroll and ledger operations over one Database"""

    def __init__(
        self,
        database: Database,
        disbursement_account_id: int | None = None,
        invoice_prefix: str | None = None,
        invoice_number_width: int | None = None,
    ):
        self.database = database
        self.disbursement_account_id = (
            disbursement_account_id if disbursement_account_id is not None else settings.default_disbursement_account_id
        )
        self.invoice_prefix = invoice_prefix if invoice_prefix is not None else settings.invoice_number_prefix
        self.invoice_number_width = invoice_number_width or settings.invoice_number_width

    # ── Invoices ───────────────────────────────────────────

    def create_invoice_atomic(self, draft: InvoiceDraft) -> int:
        """
        Create an invoice and all of its line items in one unit of work.

        Flow:
        1. Validate status, items and invoice-level amounts (before any I/O)
        2. Resolve the customer
        3. Allocate the next sequential invoice number
        4. Insert the invoice with computed totals, then its items

        Returns:
            New invoice id

        Raises:
            ValidationError: bad input, including an invoice with no items
            NotFoundError: customer does not exist
            PersistenceError: storage failure; nothing was written
        """
        status = parse_enum(InvoiceStatus, draft.status, "invoice status")
        if not draft.items:
            raise ValidationError("An invoice needs at least one line item")
        if draft.due_date < draft.issue_date:
            raise ValidationError("Due date must not be before issue date")

        items = [validate_line_item(item, position) for position, item in enumerate(draft.items, start=1)]
        discount_percent = require_percent(draft.discount_percent, "discount percent")
        discount_flat = require_non_negative(draft.discount, "discount")
        advance = require_non_negative(draft.advance, "advance")
        totals = calculate_invoice_totals(items, discount_percent, discount_flat, advance)

        with self.database.unit_of_work("create_invoice") as session:
            if CustomerRepository(session).get(draft.customer_id) is None:
                raise NotFoundError(f"Customer {draft.customer_id} not found")

            invoices = InvoiceRepository(session)
            invoice_number = format_invoice_number(
                invoices.next_sequence(), self.invoice_prefix, self.invoice_number_width
            )
            db_invoice = invoices.create_invoice(
                invoice_number=invoice_number,
                customer_id=draft.customer_id,
                status=status.value,
                issue_date=draft.issue_date,
                due_date=draft.due_date,
                notes=draft.notes,
                discount_percent=discount_percent,
                advance=advance,
                totals=totals,
            )
            invoices.add_items(db_invoice.id, items, totals.line_totals)
            invoice_id = db_invoice.id

        invoices_created_counter.labels(status=status.value).inc()
        log_ledger_event(
            "invoice_created",
            invoice_id=invoice_id,
            invoice_number=invoice_number,
            total=totals.total,
        )
        return invoice_id

    def get_invoice(self, invoice_id: int) -> Invoice:
        with self.database.unit_of_work("get_invoice") as session:
            return self._require_invoice(session, invoice_id)

    def list_invoices(self, limit: Optional[int] = None) -> List[Invoice]:
        with self.database.unit_of_work("list_invoices") as session:
            return InvoiceRepository(session).list(limit)

    def update_invoice_status(self, invoice_id: int, status: InvoiceStatus | str) -> None:
        """Change lifecycle status only; totals and items are untouched"""
        new_status = parse_enum(InvoiceStatus, status, "invoice status")
        with self.database.unit_of_work("update_invoice_status") as session:
            db_invoice = self._require_invoice(session, invoice_id)
            previous = db_invoice.status
            db_invoice.status = new_status.value

        log_ledger_event("invoice_status_changed", invoice_id=invoice_id, previous=previous, status=new_status.value)

    def delete_invoice(self, invoice_id: int) -> str:
        """Delete an invoice and its items; returns the deleted invoice number"""
        with self.database.unit_of_work("delete_invoice") as session:
            invoices = InvoiceRepository(session)
            db_invoice = self._require_invoice(session, invoice_id)
            invoice_number = db_invoice.invoice_number
            invoices.delete(db_invoice)

        log_ledger_event("invoice_deleted", invoice_id=invoice_id, invoice_number=invoice_number)
        return invoice_number

    def recompute_invoice_totals(self, invoice_id: int) -> InvoiceTotals:
        """Recalculate totals from the stored items, for drift checks against the stored header"""
        with self.database.unit_of_work("recompute_invoice_totals") as session:
            db_invoice = self._require_invoice(session, invoice_id)
            items = [
                LineItemInput(
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    tax_percent=item.tax_percent,
                    description=item.description,
                )
                for item in db_invoice.items
            ]
            return calculate_invoice_totals(
                items,
                discount_percent=db_invoice.discount_percent,
                discount_flat=db_invoice.discount,
                advance=db_invoice.advance,
            )

    # ── Payroll ────────────────────────────────────────────

    def create_payroll_atomic(self, draft: PayrollDraft) -> int:
        """
        Record a pay run. A Paid record also posts its ledger expense.

        For status Paid, within the same unit of work:
        - one Expense transaction of amount = net pay against the
          disbursement account, referenced as PAY-<payroll id>
        - the disbursement account balance moves by -net pay

        Net pay is posted as computed, including negative values.

        Raises:
            ValidationError: negative component or unknown status
            NotFoundError: employee or disbursement account does not exist;
                no payroll row is persisted
        """
        status = parse_enum(PayrollStatus, draft.status, "payroll status")
        components = normalize_components(draft.components)
        totals = calculate_payroll_totals(components)

        with self.database.unit_of_work("create_payroll") as session:
            employee = EmployeeRepository(session).get(draft.employee_id)
            if employee is None:
                raise NotFoundError(f"Employee {draft.employee_id} not found")

            db_record = PayrollRepository(session).create(
                employee_id=draft.employee_id,
                components={
                    "base_salary": components.base_salary,
                    "overtime_pay": components.overtime_pay,
                    "bonuses": components.bonuses,
                    "allowances": components.allowances,
                    "tax": components.tax,
                    "late_penalties": components.late_penalties,
                    "absences": components.absences,
                    "other_deductions": components.other_deductions,
                },
                totals=totals,
                payment_date=draft.payment_date,
                status=status.value,
                pay_period_start=draft.pay_period_start,
                pay_period_end=draft.pay_period_end,
                notes=draft.notes,
            )
            payroll_id = db_record.id

            if status == PayrollStatus.PAID:
                self._post(
                    session,
                    account_id=self.disbursement_account_id,
                    amount=totals.net_pay,
                    transaction_type=TransactionType.EXPENSE,
                    txn_date=draft.payment_date,
                    description=f"Salary: {employee.name}",
                    reference_id=payroll_reference(payroll_id),
                )

        payroll_records_counter.labels(status=status.value).inc()
        if status == PayrollStatus.PAID:
            record_ledger_posting(TransactionType.EXPENSE.value, "payroll")
        log_ledger_event(
            "payroll_created",
            payroll_id=payroll_id,
            employee_id=draft.employee_id,
            status=status.value,
            net_pay=totals.net_pay,
        )
        return payroll_id

    def get_payroll(self, payroll_id: int) -> PayrollRecord:
        with self.database.unit_of_work("get_payroll") as session:
            db_record = PayrollRepository(session).get(payroll_id)
            if db_record is None:
                raise NotFoundError(f"Payroll record {payroll_id} not found")
            return db_record

    def list_payroll(self) -> List[PayrollRecord]:
        with self.database.unit_of_work("list_payroll") as session:
            return PayrollRepository(session).list()

    # ── Ledger ─────────────────────────────────────────────

    def create_transaction_atomic(self, draft: TransactionDraft) -> int:
        """
        Post a ledger entry and fold it into the account balance.

        Raises:
            ValidationError: negative amount or unknown transaction type
            NotFoundError: account or category does not exist
        """
        transaction_type = parse_enum(TransactionType, draft.transaction_type, "transaction type")
        amount = require_non_negative(draft.amount, "amount")

        with self.database.unit_of_work("create_transaction") as session:
            if draft.category_id is not None and CategoryRepository(session).get(draft.category_id) is None:
                raise NotFoundError(f"Category {draft.category_id} not found")
            db_txn = self._post(
                session,
                account_id=draft.account_id,
                amount=amount,
                transaction_type=transaction_type,
                txn_date=draft.date,
                category_id=draft.category_id,
                description=draft.description,
                reference_id=draft.reference_id,
            )
            transaction_id = db_txn.id

        record_ledger_posting(transaction_type.value, "manual")
        log_ledger_event(
            "transaction_posted",
            transaction_id=transaction_id,
            account_id=draft.account_id,
            transaction_type=transaction_type.value,
            amount=amount,
        )
        return transaction_id

    def list_transactions(self, limit: int = 100) -> List[Transaction]:
        with self.database.unit_of_work("list_transactions") as session:
            return TransactionRepository(session).list_recent(limit)

    def create_account(
        self,
        name: str,
        account_type: AccountType | str,
        currency: str | None = None,
        opening_balance: Decimal = ZERO,
        opening_date: date | None = None,
    ) -> int:
        """
        Open an account. Balances start at zero; a non-zero opening balance is
        posted as an ordinary ledger entry so the balance always equals the
        sum of its transactions.
        """
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        kind = parse_enum(AccountType, account_type, "account type")
        opening = to_decimal(opening_balance, "opening balance")

        with self.database.unit_of_work("create_account") as session:
            account = AccountRepository(session).create(
                name=name.strip(),
                account_type=kind.value,
                balance=ZERO,
                currency=currency or settings.default_currency,
            )
            account_id = account.id
            if opening != ZERO:
                self._post(
                    session,
                    account_id=account_id,
                    amount=abs(opening),
                    transaction_type=TransactionType.INCOME if opening > ZERO else TransactionType.EXPENSE,
                    txn_date=opening_date or date.today(),
                    description="Opening balance",
                )

        if opening != ZERO:
            record_ledger_posting(
                TransactionType.INCOME.value if opening > ZERO else TransactionType.EXPENSE.value,
                "opening_balance",
            )
        log_ledger_event("account_created", account_id=account_id, account_type=kind.value, opening_balance=opening)
        return account_id

    def get_account(self, account_id: int) -> Account:
        with self.database.unit_of_work("get_account") as session:
            return self._require_account(session, account_id)

    def list_accounts(self) -> List[Account]:
        with self.database.unit_of_work("list_accounts") as session:
            return AccountRepository(session).list()

    def reconcile_account(self, account_id: int) -> BalanceReconciliation:
        """Compare the stored balance with the signed sum of the account's transactions"""
        with self.database.unit_of_work("reconcile_account") as session:
            account = self._require_account(session, account_id)
            return self._reconcile(session, account)

    def reconcile_all(self) -> List[BalanceReconciliation]:
        with self.database.unit_of_work("reconcile_all") as session:
            return [self._reconcile(session, account) for account in AccountRepository(session).list()]

    # ── Internals (caller holds the unit of work) ──────────

    def _post(
        self,
        session: Session,
        account_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        txn_date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Transaction:
        """Insert a ledger row and apply its signed amount to the account balance"""
        account = self._require_account(session, account_id)
        db_txn = TransactionRepository(session).create(
            account_id=account_id,
            amount=amount,
            transaction_type=transaction_type.value,
            txn_date=txn_date,
            category_id=category_id,
            description=description,
            reference_id=reference_id,
        )
        self._apply_to_balance(account, signed_amount(amount, transaction_type))
        session.flush()
        return db_txn

    @staticmethod
    def _apply_to_balance(account: Account, delta: Decimal) -> None:
        # Read-modify-write is safe: the unit of work holds the global lock
        account.balance = (account.balance or ZERO) + delta

    @staticmethod
    def _reconcile(session: Session, account: Account) -> BalanceReconciliation:
        entries = TransactionRepository(session).list_for_account(account.id)
        computed = ZERO
        for entry in entries:
            computed += signed_amount(entry.amount, TransactionType(entry.transaction_type))
        return BalanceReconciliation(
            account_id=account.id,
            stored_balance=account.balance,
            computed_balance=computed,
            transaction_count=len(entries),
        )

    @staticmethod
    def _require_invoice(session: Session, invoice_id: int) -> Invoice:
        db_invoice = InvoiceRepository(session).get(invoice_id)
        if db_invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return db_invoice

    @staticmethod
    def _require_account(session: Session, account_id: int) -> Account:
        account = AccountRepository(session).get(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account
