"""Permission catalog and the flat role/flag access check"""

from enum import Enum
from typing import Iterable

from bizledger.domain.exceptions import PermissionDeniedError
from bizledger.domain.models import UserRole


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    VIEW_LOGS = "view_logs"
    CREATE_INVOICE = "create_invoice"
    DELETE_INVOICE = "delete_invoice"
    MANAGE_CUSTOMERS = "manage_customers"
    MANAGE_PRODUCTS = "manage_products"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_TRANSACTIONS = "manage_transactions"
    MANAGE_PAYROLL = "manage_payroll"
    VIEW_REPORTS = "view_reports"


PERMISSION_DESCRIPTIONS = {
    Permission.MANAGE_USERS: "Administer users and permissions",
    Permission.VIEW_LOGS: "View system audit logs",
    Permission.CREATE_INVOICE: "Create new invoices",
    Permission.DELETE_INVOICE: "Delete existing invoices",
    Permission.MANAGE_CUSTOMERS: "Create, update or delete customers",
    Permission.MANAGE_PRODUCTS: "Create, update or delete products",
    Permission.MANAGE_SETTINGS: "Update business settings",
    Permission.MANAGE_TRANSACTIONS: "Manage income and expenses",
    Permission.MANAGE_PAYROLL: "Manage employee payroll",
    Permission.VIEW_REPORTS: "View financial reports",
}


def has_permission(role: UserRole, granted: Iterable[str], permission: Permission) -> bool:
    """Admins may do anything; other users need an explicit grant"""
    if role == UserRole.ADMIN:
        return True
    return permission.value in set(granted)


def ensure_permission(username: str, role: UserRole, granted: Iterable[str], permission: Permission) -> None:
    if not has_permission(role, granted, permission):
        raise PermissionDeniedError(f"User '{username}' lacks permission '{permission.value}'")
