"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from bank_ledger.models.base import Base
from bank_ledger.models.enums import (
    AccountType,
    TransactionType,
    UserRole,
)
from bank_ledger.models.customer import Customer
from bank_ledger.models.account import Account
from bank_ledger.models.transaction import Transaction
from bank_ledger.models.user import User, RefreshToken
from bank_ledger.models.revoked_token import RevokedToken
from bank_ledger.models.idempotency import IdempotencyRecord

__all__ = [
    "Base",
    "AccountType",
    "TransactionType",
    "UserRole",
    "Customer",
    "Account",
    "Transaction",
    "User",
    "RefreshToken",
    "RevokedToken",
    "IdempotencyRecord",
]
