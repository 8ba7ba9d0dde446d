"""End-to-end tests for the HTTP API"""

import copy

import pytest

INVOICE_BODY = {
    "customer_id": None,
    "issue_date": "2026-03-01",
    "due_date": "2026-03-31",
    "discount_percent": "10",
    "advance": "5.00",
    "items": [
        {"product_name": "Widget", "quantity": 2, "unit_price": "50.00", "tax_percent": "10"},
        {"product_name": "Service call", "quantity": 1, "unit_price": "30.00"},
    ],
}


@pytest.fixture
def invoice_body(customer_id):
    return {**copy.deepcopy(INVOICE_BODY), "customer_id": customer_id}


@pytest.fixture
def clerk_headers(client, access):
    user_id = access.create_user("clerk", "User", ["view_reports"])
    return {"X-User-Id": str(user_id)}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "bizledger_unit_of_work_duration_seconds" in response.text


def test_request_id_header(client):
    generated = client.get("/health").headers["X-Request-ID"]
    echoed = client.get("/health", headers={"X-Request-ID": "req-42"}).headers["X-Request-ID"]

    assert generated
    assert echoed == "req-42"


# ── Invoices ───────────────────────────────────────────────


def test_create_invoice(client, admin_headers, invoice_body):
    response = client.post("/v1/invoices", json=invoice_body, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["invoice_number"] == "INV-00001"
    assert data["customer_name"] == "Acme Traders"
    assert data["subtotal"] == "130.00"
    assert data["tax"] == "10.00"
    assert data["discount"] == "14.00"
    assert data["total"] == "121.00"
    assert [item["line_total"] for item in data["items"]] == ["110.00", "30.00"]

    fetched = client.get(f"/v1/invoices/{data['id']}")
    assert fetched.json()["total"] == "121.00"


def test_create_invoice_is_audited(client, admin_headers, invoice_body):
    created = client.post("/v1/invoices", json=invoice_body, headers=admin_headers).json()

    logs = client.get("/v1/audit-logs", params={"module": "Invoices"}, headers=admin_headers).json()

    assert len(logs) == 1
    assert logs[0]["action"] == "CREATE"
    assert logs[0]["record_id"] == str(created["id"])
    assert logs[0]["username"] == "admin"
    assert "INV-00001" in logs[0]["description"]


def test_invalid_invoice_returns_single_line_422(client, admin_headers, invoice_body):
    invoice_body["items"][0]["quantity"] = -2

    response = client.post("/v1/invoices", json=invoice_body, headers=admin_headers)

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert isinstance(detail, str)
    assert "quantity must not be negative" in detail
    assert "\n" not in detail
    assert client.get("/v1/invoices").json() == []


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("quantity", 10**20, "quantity must not exceed"),
        ("unit_price", "1E+30", "unit price must not exceed"),
    ],
)
def test_oversized_line_item_returns_422(client, admin_headers, invoice_body, field, value, message):
    invoice_body["items"][0][field] = value

    response = client.post("/v1/invoices", json=invoice_body, headers=admin_headers)

    assert response.status_code == 422
    assert message in response.json()["detail"]
    assert client.get("/v1/invoices").json() == []


def test_malformed_body_returns_single_line_422(client, admin_headers):
    response = client.post("/v1/invoices", json={"customer_id": "abc"}, headers=admin_headers)

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], str)
    assert "\n" not in response.json()["detail"]


def test_unknown_customer_returns_404(client, admin_headers, invoice_body):
    invoice_body["customer_id"] = 999

    response = client.post("/v1/invoices", json=invoice_body, headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Customer 999 not found"


def test_missing_permission_returns_403(client, clerk_headers, invoice_body):
    response = client.post("/v1/invoices", json=invoice_body, headers=clerk_headers)

    assert response.status_code == 403
    assert "create_invoice" in response.json()["detail"]


def test_unknown_user_returns_403(client, invoice_body):
    response = client.post("/v1/invoices", json=invoice_body, headers={"X-User-Id": "77"})

    assert response.status_code == 403


def test_invoice_status_and_delete(client, admin_headers, invoice_body):
    invoice_id = client.post("/v1/invoices", json=invoice_body, headers=admin_headers).json()["id"]

    patched = client.patch(f"/v1/invoices/{invoice_id}/status", json={"status": "Sent"}, headers=admin_headers)
    assert patched.status_code == 200
    assert patched.json()["status"] == "Sent"

    bad = client.patch(f"/v1/invoices/{invoice_id}/status", json={"status": "Gone"}, headers=admin_headers)
    assert bad.status_code == 422

    logs = client.get("/v1/audit-logs", params={"module": "Invoices"}, headers=admin_headers).json()
    assert logs[0]["description"] == "Changed invoice INV-00001 status to Sent"

    assert client.delete(f"/v1/invoices/{invoice_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/v1/invoices/{invoice_id}").status_code == 404


# ── Payroll and ledger ─────────────────────────────────────


def test_paid_payroll_posts_salary_expense(client, admin_headers, employee_id):
    body = {
        "employee_id": employee_id,
        "base_salary": "2000",
        "overtime_pay": "100",
        "bonuses": "50",
        "allowances": "25",
        "tax": "200",
        "payment_date": "2026-03-31",
    }

    response = client.post("/v1/payroll", json=body, headers=admin_headers)

    assert response.status_code == 201
    payroll = response.json()
    assert payroll["gross_salary"] == "2175.00"
    assert payroll["net_pay"] == "1975.00"
    assert payroll["employee_name"] == "Dana Reyes"

    transactions = client.get("/v1/transactions").json()
    assert len(transactions) == 1
    assert transactions[0]["reference_id"] == f"PAY-{payroll['id']}"
    assert transactions[0]["amount"] == "1975.00"

    reconciliation = client.get("/v1/accounts/1/reconciliation").json()
    assert reconciliation["in_balance"] is True
    assert reconciliation["transaction_count"] == 1


def test_payroll_for_unknown_employee_returns_404(client, admin_headers):
    body = {"employee_id": 999, "base_salary": "100", "payment_date": "2026-03-31"}

    response = client.post("/v1/payroll", json=body, headers=admin_headers)

    assert response.status_code == 404
    assert client.get("/v1/payroll").json() == []


def test_transactions_update_account_balance(client, admin_headers):
    for body in (
        {"account_id": 2, "amount": "1200.50", "transaction_type": "Income", "date": "2026-03-02"},
        {"account_id": 2, "amount": "200.25", "transaction_type": "Expense", "date": "2026-03-03"},
    ):
        response = client.post("/v1/transactions", json=body, headers=admin_headers)
        assert response.status_code == 201

    accounts = {account["id"]: account for account in client.get("/v1/accounts").json()}
    assert accounts[2]["balance"] == "1000.25"
    assert client.get("/v1/accounts/2/reconciliation").json()["in_balance"] is True


def test_transaction_audit_uses_canonical_type(client, admin_headers):
    body = {"account_id": 1, "amount": "40", "transaction_type": "Income", "date": "2026-03-02"}

    assert client.post("/v1/transactions", json=body, headers=admin_headers).status_code == 201

    logs = client.get("/v1/audit-logs", params={"module": "Transactions"}, headers=admin_headers).json()
    assert logs[0]["description"].startswith("Posted Income of ")
    assert "TransactionType" not in logs[0]["description"]


def test_list_accounts(client):
    response = client.get("/v1/accounts")

    assert response.status_code == 200
    assert [account["name"] for account in response.json()] == ["Cash", "Bank Account"]


def test_negative_transaction_rejected(client, admin_headers):
    body = {"account_id": 1, "amount": "-5", "transaction_type": "Income", "date": "2026-03-02"}

    response = client.post("/v1/transactions", json=body, headers=admin_headers)

    assert response.status_code == 422
    assert client.get("/v1/transactions").json() == []


def test_create_account_with_opening_balance(client, admin_headers):
    body = {"name": "Savings", "account_type": "Bank", "opening_balance": "500"}

    response = client.post("/v1/accounts", json=body, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["balance"] == "500.00"
    reconciliation = client.get(f"/v1/accounts/{response.json()['id']}/reconciliation").json()
    assert reconciliation["in_balance"] is True


# ── Directory and reports ──────────────────────────────────


def test_customer_endpoints(client, admin_headers):
    created = client.post("/v1/customers", json={"name": "Delta Co"}, headers=admin_headers)
    assert created.status_code == 201
    customer_id = created.json()["id"]

    updated = client.put(
        f"/v1/customers/{customer_id}", json={"name": "Delta Co", "phone": "555-0111"}, headers=admin_headers
    )
    assert updated.status_code == 204
    assert client.get("/v1/customers").json()[0]["phone"] == "555-0111"

    assert client.delete(f"/v1/customers/{customer_id}", headers=admin_headers).status_code == 204
    assert client.delete(f"/v1/customers/{customer_id}", headers=admin_headers).status_code == 404


def test_deleting_invoiced_customer_returns_409(client, admin_headers, invoice_body, customer_id):
    client.post("/v1/invoices", json=invoice_body, headers=admin_headers)

    response = client.delete(f"/v1/customers/{customer_id}", headers=admin_headers)

    assert response.status_code == 409
    assert "\n" not in response.json()["detail"]


def test_reports(client, admin_headers, clerk_headers):
    client.post(
        "/v1/transactions",
        json={"account_id": 1, "amount": "75", "transaction_type": "Income", "date": "2026-02-10"},
        headers=admin_headers,
    )

    dashboard = client.get("/v1/reports/dashboard", headers=clerk_headers)
    assert dashboard.status_code == 200
    assert dashboard.json()["cash_in_hand"] == "75.00"

    cash_flow = client.get("/v1/reports/cash-flow", headers=clerk_headers).json()
    assert cash_flow == [{"month": "2026-02", "income": "75.00", "expense": "0.00", "net": "75.00"}]

    assert client.get("/v1/reports/categories", headers=clerk_headers).json() == []


def test_audit_logs_require_permission(client, clerk_headers):
    assert client.get("/v1/audit-logs", headers=clerk_headers).status_code == 403


def test_audit_logs_reject_bad_month(client, admin_headers):
    response = client.get("/v1/audit-logs", params={"month": "2026-13"}, headers=admin_headers)

    assert response.status_code == 422


# ── Administration ─────────────────────────────────────────


def test_business_profile_endpoints(client, admin_headers):
    assert client.get("/v1/settings").json()["business_name"] == "My Business"

    body = {
        "business_name": "Corner Bakery",
        "tax_label": "VAT",
        "template_type": "ClearStyle",
        "bank_name": "First Bank",
    }
    response = client.put("/v1/settings", json=body, headers=admin_headers)

    assert response.status_code == 200
    profile = client.get("/v1/settings").json()
    assert profile["business_name"] == "Corner Bakery"
    assert profile["template_type"] == "ClearStyle"
    assert profile["bank_name"] == "First Bank"
    logs = client.get("/v1/audit-logs", params={"module": "Settings"}, headers=admin_headers).json()
    assert logs[0]["action"] == "UPDATE"


def test_business_profile_rejects_unknown_template(client, admin_headers):
    body = {"business_name": "Corner Bakery", "template_type": "Fancy"}

    response = client.put("/v1/settings", json=body, headers=admin_headers)

    assert response.status_code == 422
    assert "invoice template" in response.json()["detail"]


def test_business_profile_requires_manage_settings(client, clerk_headers):
    response = client.put("/v1/settings", json={"business_name": "Hijacked"}, headers=clerk_headers)

    assert response.status_code == 403
    assert "manage_settings" in response.json()["detail"]
    assert client.get("/v1/settings").json()["business_name"] == "My Business"


def test_user_administration(client, admin_headers):
    created = client.post(
        "/v1/users", json={"username": "bookkeeper", "permissions": ["view_reports"]}, headers=admin_headers
    )
    assert created.status_code == 201
    user_id = created.json()["id"]

    updated = client.put(
        f"/v1/users/{user_id}/permissions",
        json={"permissions": ["view_reports", "manage_transactions"]},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert sorted(updated.json()["permissions"]) == ["manage_transactions", "view_reports"]

    users = {user["username"]: user for user in client.get("/v1/users", headers=admin_headers).json()}
    assert users["bookkeeper"]["role"] == "User"
    assert users["admin"]["role"] == "Admin"

    body = {"account_id": 1, "amount": "15", "transaction_type": "Expense", "date": "2026-03-02"}
    response = client.post("/v1/transactions", json=body, headers={"X-User-Id": str(user_id)})
    assert response.status_code == 201


def test_user_administration_errors(client, admin_headers, clerk_headers):
    assert client.get("/v1/users", headers=clerk_headers).status_code == 403
    assert client.post("/v1/users", json={"username": "admin"}, headers=admin_headers).status_code == 422
    bad_grant = client.post("/v1/users", json={"username": "temp", "permissions": ["fly"]}, headers=admin_headers)
    assert bad_grant.status_code == 422
    missing = client.put("/v1/users/999/permissions", json={"permissions": []}, headers=admin_headers)
    assert missing.status_code == 404
