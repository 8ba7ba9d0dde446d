"""Accounts and ledger transaction endpoints"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from bizledger.api.dependencies import get_audit_logger, get_coordinator, require_permission
from bizledger.api.v1.schemas import (
    AccountCreateRequest,
    AccountResponse,
    CreatedResponse,
    ReconciliationResponse,
    TransactionCreateRequest,
    TransactionResponse,
)
from bizledger.domain.models import TransactionDraft, TransactionType, parse_enum
from bizledger.domain.money import present
from bizledger.domain.permissions import Permission
from bizledger.infrastructure.database.models import Account, Transaction
from bizledger.services.access import Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.coordinator import LedgerCoordinator

router = APIRouter()


def account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        name=account.name,
        account_type=account.account_type,
        balance=present(account.balance),
        currency=account.currency,
    )


def transaction_response(txn: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        account_id=txn.account_id,
        category_id=txn.category_id,
        category_name=txn.category.name if txn.category else None,
        amount=present(txn.amount),
        transaction_type=txn.transaction_type,
        description=txn.description,
        date=txn.date,
        reference_id=txn.reference_id,
    )


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(coordinator: LedgerCoordinator = Depends(get_coordinator)):
    return [account_response(account) for account in coordinator.list_accounts()]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    request_body: AccountCreateRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_TRANSACTIONS)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Open an account; a non-zero opening balance is posted to the ledger"""
    account_id = coordinator.create_account(
        name=request_body.name,
        account_type=request_body.account_type,
        currency=request_body.currency,
        opening_balance=request_body.opening_balance,
    )
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Accounts", account_id, f"Opened account {request_body.name.strip()}"
    )
    return account_response(coordinator.get_account(account_id))


@router.get("/accounts/{account_id}/reconciliation", response_model=ReconciliationResponse)
def reconcile_account(account_id: int, coordinator: LedgerCoordinator = Depends(get_coordinator)):
    """Stored balance versus the signed sum of the account's transactions"""
    result = coordinator.reconcile_account(account_id)
    return ReconciliationResponse(
        account_id=result.account_id,
        stored_balance=result.stored_balance,
        computed_balance=result.computed_balance,
        transaction_count=result.transaction_count,
        in_balance=result.in_balance,
    )


@router.post("/transactions", response_model=CreatedResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_TRANSACTIONS)),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
    audit: AuditLogger = Depends(get_audit_logger),
):
    transaction_type = parse_enum(TransactionType, request_body.transaction_type, "transaction type")
    transaction_id = coordinator.create_transaction_atomic(
        TransactionDraft(
            account_id=request_body.account_id,
            category_id=request_body.category_id,
            amount=request_body.amount,
            transaction_type=transaction_type,
            description=request_body.description,
            date=request_body.date,
            reference_id=request_body.reference_id,
        )
    )
    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "CREATE",
        "Transactions",
        transaction_id,
        f"Posted {transaction_type.value} of {present(request_body.amount)} to account {request_body.account_id}",
    )
    return CreatedResponse(id=transaction_id)


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    limit: int = Query(100, ge=1, le=1000),
    coordinator: LedgerCoordinator = Depends(get_coordinator),
):
    """Most recent transactions first"""
    return [transaction_response(txn) for txn in coordinator.list_transactions(limit)]
