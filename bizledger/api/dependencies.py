"""Dependency injection for FastAPI endpoints"""

from typing import Callable

from fastapi import Header, Request

from bizledger.domain.permissions import Permission
from bizledger.services.access import AccessService, Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.business import BusinessProfileService
from bizledger.services.coordinator import LedgerCoordinator
from bizledger.services.directory import DirectoryService
from bizledger.services.reports import ReportService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_coordinator(request: Request) -> LedgerCoordinator:
    return request.app.state.coordinator


def get_directory(request: Request) -> DirectoryService:
    return request.app.state.directory


def get_reports(request: Request) -> ReportService:
    return request.app.state.reports


def get_audit_logger(request: Request) -> AuditLogger:
    return request.app.state.audit


def get_access(request: Request) -> AccessService:
    return request.app.state.access


def get_business(request: Request) -> BusinessProfileService:
    return request.app.state.business


def require_permission(permission: Permission) -> Callable[..., Actor]:
    """Dependency factory: resolve the acting user from X-User-Id and check one permission"""

    def dependency(request: Request, x_user_id: int = Header(..., description="Acting user id")) -> Actor:
        return get_access(request).authorize(x_user_id, permission)

    return dependency
