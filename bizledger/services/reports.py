"""Read-only financial reports derived from the ledger and invoices"""

from collections import defaultdict
from typing import Dict, List

from bizledger.config import settings
from bizledger.domain.models import (
    AccountType,
    CashFlowEntry,
    CategoryReportEntry,
    DashboardStats,
    InvoiceStatus,
    TransactionType,
)
from bizledger.domain.money import ZERO
from bizledger.infrastructure.database.repositories import (
    AccountRepository,
    InvoiceRepository,
    TransactionRepository,
)
from bizledger.infrastructure.database.session import Database

OUTSTANDING_STATUSES = (InvoiceStatus.SENT.value, InvoiceStatus.OVERDUE.value)


class ReportService:
    def __init__(self, database: Database, cash_account_id: int | None = None):
        self.database = database
        self.cash_account_id = cash_account_id if cash_account_id is not None else settings.default_disbursement_account_id

    def dashboard(self, recent_limit: int = 5) -> DashboardStats:
        """
        Revenue and expenses come from the ledger, not from invoices:
        an invoice only counts once its payment is posted as Income.
        Outstanding is the total of Sent and Overdue invoices.
        """
        with self.database.unit_of_work("dashboard") as session:
            revenue = ZERO
            expenses = ZERO
            for txn in TransactionRepository(session).all():
                if txn.transaction_type == TransactionType.INCOME.value:
                    revenue += txn.amount
                else:
                    expenses += txn.amount

            accounts = AccountRepository(session)
            cash_account = accounts.get(self.cash_account_id)
            bank_balance = ZERO
            for account in accounts.get_by_type(AccountType.BANK.value):
                bank_balance += account.balance

            invoices = InvoiceRepository(session)
            outstanding = ZERO
            for invoice in invoices.list_by_status(OUTSTANDING_STATUSES):
                outstanding += invoice.total

            return DashboardStats(
                total_revenue=revenue,
                total_expenses=expenses,
                cash_in_hand=cash_account.balance if cash_account is not None else ZERO,
                bank_balance=bank_balance,
                outstanding_amount=outstanding,
                total_invoices=invoices.count(),
                recent_invoice_ids=[invoice.id for invoice in invoices.list(recent_limit)],
            )

    def cash_flow(self, months: int = 12) -> List[CashFlowEntry]:
        """Monthly income and expense totals, newest month first"""
        with self.database.unit_of_work("cash_flow") as session:
            transactions = TransactionRepository(session).all()

        by_month: Dict[str, CashFlowEntry] = {}
        for txn in transactions:
            month = txn.date.strftime("%Y-%m")
            entry = by_month.setdefault(month, CashFlowEntry(month=month, income=ZERO, expense=ZERO))
            if txn.transaction_type == TransactionType.INCOME.value:
                entry.income += txn.amount
            else:
                entry.expense += txn.amount

        return [by_month[month] for month in sorted(by_month, reverse=True)[:months]]

    def category_totals(self) -> List[CategoryReportEntry]:
        """Totals per category for categorised transactions, largest first"""
        with self.database.unit_of_work("category_report") as session:
            totals = defaultdict(lambda: ZERO)
            counts: Dict[int, int] = defaultdict(int)
            categories = {}
            for txn in TransactionRepository(session).all():
                if txn.category is None:
                    continue
                categories[txn.category_id] = txn.category
                totals[txn.category_id] += txn.amount
                counts[txn.category_id] += 1

        entries = [
            CategoryReportEntry(
                category_name=category.name,
                category_type=category.category_type,
                total_amount=totals[category_id],
                count=counts[category_id],
            )
            for category_id, category in categories.items()
        ]
        return sorted(entries, key=lambda entry: entry.total_amount, reverse=True)
