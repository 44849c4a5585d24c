"""
Pydantic schemas for account operations.

Amounts are Decimal with at most two decimal places. They are
serialized as JSON strings, so no binary float ever carries a
balance across the wire.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bank_ledger.models.enums import AccountType


class AccountOpen(BaseModel):
    """Request to open a new account."""
    customer_id: int
    account_type: AccountType
    initial_balance: Decimal = Field(
        default=Decimal("0.00"), ge=0, max_digits=17, decimal_places=2
    )


class AccountResponse(BaseModel):
    id: int
    customer_id: int
    account_number: str
    account_type: AccountType
    balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}
