"""
Transaction log: the append-only record of balance changes.

append() is the only way a row enters the log, and nothing
updates or deletes rows. Listings are plain queries: calling
them again re-reads the log, there is no cursor to keep open.

Ordering is by created_at with the id as tie-breaker. Ids are
assigned in insertion order, so two records written in the
same clock tick still come out in a stable order.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from bank_ledger.errors import ValidationError
from bank_ledger.models.account import Account
from bank_ledger.models.base import utcnow
from bank_ledger.models.customer import Customer
from bank_ledger.models.enums import TransactionType
from bank_ledger.models.transaction import Transaction
from bank_ledger.schemas.transaction import TransactionActivity


class TransactionLog:

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        account_id: int,
        type: TransactionType,
        amount: Decimal,
        description: str,
        counterparty_account_id: int | None = None,
        reference: str | None = None,
    ) -> Transaction:
        """
        Write one immutable record. Flushes but does not commit.
        """
        if amount <= 0:
            raise ValidationError("Transaction amount must be positive")

        txn = Transaction(
            account_id=account_id,
            type=type,
            amount=amount,
            description=description,
            counterparty_account_id=counterparty_account_id,
            reference=reference or str(uuid.uuid4()),
            created_at=utcnow(),
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def list_by_account(self, account_id: int) -> list[Transaction]:
        """Return all transactions for an account, newest first."""
        transactions = self.db.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        ).scalars().all()
        return list(transactions)

    def list_by_reference(self, reference: str) -> list[Transaction]:
        """Return every record written by one ledger operation."""
        transactions = self.db.execute(
            select(Transaction)
            .where(Transaction.reference == reference)
            .order_by(Transaction.id)
        ).scalars().all()
        return list(transactions)

    def list_recent(self, limit: int) -> list[TransactionActivity]:
        """Most recent transactions across all accounts, newest first."""
        query = (
            self._activity_query()
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return self._to_activity(query)

    def list_in_range(
        self, start: datetime, end: datetime
    ) -> list[TransactionActivity]:
        """Transactions with start <= created_at < end, oldest first."""
        query = (
            self._activity_query()
            .where(Transaction.created_at >= start, Transaction.created_at < end)
            .order_by(Transaction.created_at.asc(), Transaction.id.asc())
        )
        return self._to_activity(query)

    def _activity_query(self):
        return (
            select(
                Transaction.id,
                Transaction.account_id,
                Transaction.type,
                Transaction.amount,
                Transaction.description,
                Transaction.created_at,
                Account.account_number,
                Customer.first_name,
                Customer.last_name,
            )
            .join(Account, Transaction.account_id == Account.id)
            .join(Customer, Account.customer_id == Customer.id)
        )

    def _to_activity(self, query) -> list[TransactionActivity]:
        rows = self.db.execute(query).mappings().all()
        return [TransactionActivity(**row) for row in rows]
