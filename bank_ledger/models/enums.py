"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. The enum values are the
wire format used by the API.
"""

import enum


class AccountType(str, enum.Enum):
    """Kinds of customer account."""
    SAVINGS = "savings"
    CURRENT = "current"


class TransactionType(str, enum.Enum):
    """Every balance-affecting event recorded in the transaction log."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


class UserRole(str, enum.Enum):
    """Staff roles checked by the access gate."""
    STAFF = "staff"
    ADMIN = "admin"
