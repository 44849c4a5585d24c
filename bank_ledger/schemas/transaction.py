"""
Pydantic schemas for money movement and transaction history.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bank_ledger.models.enums import TransactionType
from bank_ledger.schemas.account import AccountResponse


class DepositRequest(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=17, decimal_places=2)


class WithdrawalRequest(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=17, decimal_places=2)


class TransferRequest(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=17, decimal_places=2)


class TransferResponse(BaseModel):
    """Both sides of a committed transfer, as they stand after it."""
    from_account: AccountResponse
    to_account: AccountResponse


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    type: TransactionType
    amount: Decimal
    description: str
    counterparty_account_id: int | None
    reference: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionActivity(BaseModel):
    """A transaction joined with the account and customer it belongs to."""
    id: int
    account_id: int
    type: TransactionType
    amount: Decimal
    description: str
    created_at: datetime
    account_number: str
    first_name: str
    last_name: str

    @property
    def customer_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
