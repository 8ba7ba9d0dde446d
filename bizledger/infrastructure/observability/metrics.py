"""Prometheus metrics for ledger activity and unit-of-work health"""

from prometheus_client import Counter, Histogram

# Ledger metrics
invoices_created_counter = Counter(
    "bizledger_invoices_created_total",
    "Invoices created",
    ["status"],
)

payroll_records_counter = Counter(
    "bizledger_payroll_records_total",
    "Payroll records created",
    ["status"],  # Paid | Pending
)

ledger_transactions_counter = Counter(
    "bizledger_ledger_transactions_total",
    "Ledger transactions posted",
    ["transaction_type", "source"],  # source: manual | payroll | opening_balance
)

# Storage health
unit_of_work_duration_histogram = Histogram(
    "bizledger_unit_of_work_duration_seconds",
    "Time spent holding the database lock per unit of work",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

rollback_counter = Counter(
    "bizledger_unit_of_work_rollbacks_total",
    "Units of work rolled back",
    ["operation", "reason"],  # reason: domain | storage | unexpected
)

audit_failure_counter = Counter(
    "bizledger_audit_write_failures_total",
    "Audit log writes that failed and were ignored",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ledger_posting(transaction_type: str, source: str) -> None:
    ledger_transactions_counter.labels(transaction_type=transaction_type, source=source).inc()
