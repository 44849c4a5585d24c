"""
Account store: durable account records and their balances.

Balances change only through adjust_balance(), which issues a
single conditional UPDATE. The database evaluates "is there
enough money" and "take the money" as one statement, under the
row lock it takes for the update. There is no read-then-write
window for a concurrent withdrawal to slip through.

The store never commits. The ledger engine owns the
transaction boundary.
"""

import secrets
from decimal import Decimal

from sqlalchemy import literal, select, update
from sqlalchemy.orm import Session

from bank_ledger.config import get_settings
from bank_ledger.errors import (
    InsufficientFunds,
    NotFound,
    StorageFailure,
    ValidationError,
)
from bank_ledger.models.account import Account
from bank_ledger.models.customer import Customer
from bank_ledger.models.enums import AccountType
from bank_ledger.models.types import Money

# Attempts at finding an unused account number before giving up.
MAX_NUMBER_ATTEMPTS = 10


class AccountStore:

    def __init__(self, db: Session):
        self.db = db
        self.prefix = get_settings().ACCOUNT_NUMBER_PREFIX

    def get(self, account_id: int, refresh: bool = False) -> Account:
        """
        Get an account by ID.

        refresh=True re-reads the row even if the session already
        holds the object, since balance updates bypass the ORM.
        """
        account = self.db.get(Account, account_id, populate_existing=refresh)
        if not account:
            raise NotFound(f"Account {account_id} not found")
        return account

    def exists(self, account_id: int) -> bool:
        return self.db.execute(
            select(Account.id).where(Account.id == account_id)
        ).scalar_one_or_none() is not None

    def list_for_customer(self, customer_id: int) -> list[Account]:
        """Get all accounts for a customer."""
        accounts = self.db.execute(
            select(Account)
            .where(Account.customer_id == customer_id)
            .order_by(Account.id)
        ).scalars().all()
        return list(accounts)

    def create_account(
        self,
        customer_id: int,
        account_type: AccountType,
        initial_balance: Decimal = Decimal("0.00"),
    ) -> Account:
        """
        Insert a new account with a freshly generated account number.

        The number is random, so it is checked against existing
        accounts and redrawn on collision. The unique constraint
        still guards against two requests drawing the same free
        number at the same moment; that surfaces as a storage
        failure and the whole unit of work is rolled back.
        """
        if initial_balance < 0:
            raise ValidationError("Initial balance cannot be negative")

        if self.db.get(Customer, customer_id) is None:
            raise NotFound(f"Customer {customer_id} not found")

        account = Account(
            customer_id=customer_id,
            account_number=self._allocate_number(),
            account_type=account_type,
            balance=initial_balance,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def adjust_balance(self, account_id: int, delta: Decimal) -> Decimal:
        """
        Add delta (which may be negative) to the balance.

        Returns the new balance. Raises InsufficientFunds when
        the result would go below zero, NotFound when the
        account does not exist. In both cases nothing changed.

        Both sides are Money, so the database adds and compares
        whole cents.
        """
        delta = literal(delta, Money())
        new_balance = self.db.execute(
            update(Account)
            .where(
                Account.id == account_id,
                Account.balance + delta >= 0,
            )
            .values(balance=Account.balance + delta)
            .returning(Account.balance)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()

        if new_balance is not None:
            return new_balance

        current = self.db.execute(
            select(Account.balance).where(Account.id == account_id)
        ).scalar_one_or_none()
        if current is None:
            raise NotFound(f"Account {account_id} not found")

        raise InsufficientFunds(
            account_id=account_id,
            requested=-delta.value,
            shortfall=-(current + delta.value),
        )

    def _allocate_number(self) -> str:
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = f"{self.prefix}{100000 + secrets.randbelow(900000)}"
            taken = self.db.execute(
                select(Account.id).where(Account.account_number == number)
            ).scalar_one_or_none()
            if taken is None:
                return number

        raise StorageFailure(
            "Could not allocate a unique account number, try again"
        )
