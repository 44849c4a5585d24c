"""
Account and money movement API endpoints.

The API layer is thin: it parses the request, calls the ledger
engine or the query service, and serializes what comes back.
Failures are LedgerError subclasses and are turned into HTTP
responses by the handler registered in main.py.
"""

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from bank_ledger.api.deps import get_current_subject
from bank_ledger.models.base import get_db
from bank_ledger.services.account_store import AccountStore
from bank_ledger.services.ledger_engine import LedgerEngine
from bank_ledger.services.query_service import QueryService
from bank_ledger.schemas.account import AccountOpen, AccountResponse
from bank_ledger.schemas.transaction import (
    DepositRequest,
    WithdrawalRequest,
    TransferRequest,
    TransferResponse,
    TransactionResponse,
    TransactionActivity,
)

router = APIRouter(
    prefix="/accounts",
    tags=["Accounts"],
    dependencies=[Depends(get_current_subject)],
)


def idempotency_key(
    key: str | None = Header(
        default=None, alias="Idempotency-Key", min_length=1, max_length=100
    ),
) -> str | None:
    return key


@router.post("", response_model=AccountResponse, status_code=201)
def open_account(
    request: AccountOpen,
    db: Session = Depends(get_db),
):
    """Open an account, optionally with an opening balance."""
    return LedgerEngine(db).open_account(
        request.customer_id, request.account_type, request.initial_balance
    )


@router.get("/recent/all", response_model=list[TransactionActivity])
def recent_transactions(
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    """Most recent transactions across all accounts, for the dashboard."""
    return QueryService(db).recent_activity(limit)


@router.get("/customer/{customer_id}", response_model=list[AccountResponse])
def list_accounts_for_customer(
    customer_id: int,
    db: Session = Depends(get_db),
):
    return AccountStore(db).list_for_customer(customer_id)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    return AccountStore(db).get(account_id)


@router.post("/{account_id}/deposit", response_model=AccountResponse)
def deposit(
    account_id: int,
    request: DepositRequest,
    key: str | None = Depends(idempotency_key),
    db: Session = Depends(get_db),
):
    """Deposit money into an account."""
    return LedgerEngine(db).deposit(account_id, request.amount, key)


@router.post("/{account_id}/withdraw", response_model=AccountResponse)
def withdraw(
    account_id: int,
    request: WithdrawalRequest,
    key: str | None = Depends(idempotency_key),
    db: Session = Depends(get_db),
):
    """Withdraw money from an account."""
    return LedgerEngine(db).withdraw(account_id, request.amount, key)


@router.post(
    "/{from_account_id}/transfer/{to_account_id}",
    response_model=TransferResponse,
)
def transfer(
    from_account_id: int,
    to_account_id: int,
    request: TransferRequest,
    key: str | None = Depends(idempotency_key),
    db: Session = Depends(get_db),
):
    """Transfer money between two accounts."""
    result = LedgerEngine(db).transfer(
        from_account_id, to_account_id, request.amount, key
    )
    return TransferResponse(
        from_account=AccountResponse.model_validate(result.from_account),
        to_account=AccountResponse.model_validate(result.to_account),
    )


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionResponse],
)
def account_transactions(
    account_id: int,
    db: Session = Depends(get_db),
):
    """All transactions for an account, newest first."""
    return QueryService(db).account_history(account_id)
