"""
Query service: read-only projections over accounts and the log.

Nothing here writes. Dashboard totals are computed in a single
SELECT so the database answers all three from one snapshot; a
transfer is either fully in the total or not in it at all.
"""

from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from bank_ledger.config import get_settings
from bank_ledger.errors import NotFound
from bank_ledger.models.account import Account
from bank_ledger.models.customer import Customer
from bank_ledger.models.transaction import Transaction
from bank_ledger.models.types import Money
from bank_ledger.schemas.stats import DashboardStats
from bank_ledger.schemas.transaction import TransactionActivity
from bank_ledger.services.account_store import AccountStore
from bank_ledger.services.transaction_log import TransactionLog


def _sum_of_balances():
    # Summed in cents, read back through Money as a Decimal.
    return func.coalesce(func.sum(Account.balance), 0, type_=Money())


class QueryService:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.log = TransactionLog(db)
        self.settings = get_settings()

    def dashboard_stats(self) -> DashboardStats:
        row = self.db.execute(
            select(
                select(func.count(Customer.id)).scalar_subquery(),
                select(func.count(Account.id)).scalar_subquery(),
                select(_sum_of_balances()).scalar_subquery(),
            )
        ).one()
        total_customers, total_accounts, total_balance = row

        return DashboardStats(
            total_customers=total_customers,
            total_accounts=total_accounts,
            total_balance=total_balance,
        )

    def account_history(self, account_id: int) -> list[Transaction]:
        """All transactions for an account, newest first."""
        if not self.accounts.exists(account_id):
            raise NotFound(f"Account {account_id} not found")
        return self.log.list_by_account(account_id)

    def recent_activity(self, limit: int | None = None) -> list[TransactionActivity]:
        """
        The most recent transactions across the bank.

        The limit is clamped to [1, MAX_RECENT_LIMIT] so a caller
        cannot ask for the whole log in one go.
        """
        if limit is None:
            limit = self.settings.RECENT_ACTIVITY_LIMIT
        limit = max(1, min(limit, self.settings.MAX_RECENT_LIMIT))
        return self.log.list_recent(limit)

    def total_balance(self) -> Decimal:
        return self.db.execute(select(_sum_of_balances())).scalar()
