"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from bizledger.api.dependencies import get_request_id
from bizledger.api.middleware import MetricsMiddleware, RequestIDMiddleware
from bizledger.api.v1 import admin, audit, directory, invoices, ledger, payroll, reports
from bizledger.config import settings
from bizledger.domain.exceptions import (
    DomainException,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from bizledger.infrastructure.database.bootstrap import init_database
from bizledger.infrastructure.database.session import Database
from bizledger.infrastructure.observability.logging import setup_logging
from bizledger.services.access import AccessService
from bizledger.services.audit import AuditLogger
from bizledger.services.business import BusinessProfileService
from bizledger.services.coordinator import LedgerCoordinator
from bizledger.services.directory import DirectoryService
from bizledger.services.reports import ReportService

# Setup structured logging
setup_logging(settings.log_level)

ERROR_STATUS_CODES = {
    ValidationError: 422,
    NotFoundError: 404,
    PermissionDeniedError: 403,
    PersistenceError: 409,
}


def error_detail(exc: Exception) -> str:
    """Collapse an error to the single line shown verbatim by the UI"""
    return " ".join(str(exc).split()) or exc.__class__.__name__


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        400,
    )
    if status_code >= 409:
        logging.warning(f"Request failed: {exc}", extra={"request_id": get_request_id(request)})
    return JSONResponse(status_code=status_code, content={"detail": error_detail(exc)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=422, content={"detail": "; ".join(problems)})


def create_app(database: Database | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The app owns one Database; every service shares it and therefore its
    lock. Tests pass their own Database pointing at a temporary file.
    """
    database = database or Database()
    init_database(database, currency=settings.default_currency)

    app = FastAPI(
        title="bizledger",
        description="Invoices, payroll and ledger for a small business",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.database = database
    app.state.coordinator = LedgerCoordinator(database)
    app.state.directory = DirectoryService(database)
    app.state.reports = ReportService(database)
    app.state.audit = AuditLogger(database)
    app.state.access = AccessService(database)
    app.state.business = BusinessProfileService(database)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(payroll.router, prefix="/v1", tags=["payroll"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])
    app.include_router(directory.router, prefix="/v1", tags=["directory"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(audit.router, prefix="/v1", tags=["audit"])
    app.include_router(admin.router, prefix="/v1", tags=["admin"])

    return app
