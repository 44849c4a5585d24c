"""
Ledger engine: the core of the banking system.

Every money movement goes through this service, and each one is
a single database transaction that either commits all of its
effects or none of them:

    deposit   balance += amount, one "deposit" record
    withdraw  balance -= amount, one "withdraw" record
    transfer  source -= amount, destination += amount,
              one "transfer_out" and one "transfer_in" record

Balance checks are never a separate read. The account store's
conditional UPDATE refuses to go below zero, so two concurrent
withdrawals cannot both see the same old balance.

Transfers touch two rows. They are always updated in ascending
account id order, whatever the direction of the transfer, so two
opposite transfers between the same pair of accounts wait on each
other instead of deadlocking.

No other service writes balances or transaction records.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bank_ledger.errors import (
    LedgerError,
    StateUnavailable,
    StorageFailure,
    ValidationError,
)
from bank_ledger.models.account import Account
from bank_ledger.models.base import read_guard, unit_of_work
from bank_ledger.models.enums import AccountType, TransactionType
from bank_ledger.models.idempotency import IdempotencyRecord
from bank_ledger.services.account_store import AccountStore
from bank_ledger.services.transaction_log import TransactionLog

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class TransferResult:
    from_account: Account
    to_account: Account


class _DuplicateRequest(Exception):
    """Another request committed under the same idempotency key first."""


def to_amount(value, allow_zero: bool = False) -> Decimal:
    """
    Turn caller input into a two-decimal-place amount.

    Binary floats are refused outright: by the time a float
    reaches us the rounding error is already baked in.
    """
    if isinstance(value, float):
        raise ValidationError("Amounts must be decimals, not floats")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError("Amount must be positive")
    if amount != amount.quantize(CENT):
        raise ValidationError("Amount cannot have more than two decimal places")
    return amount.quantize(CENT)


class LedgerEngine:
    """
    Executes money movements against the account store and the
    transaction log.

    Unlike the read services, the engine commits: the session
    passed in must not have uncommitted work of its own.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.log = TransactionLog(db)

    def open_account(
        self,
        customer_id: int,
        account_type: AccountType,
        initial_balance=Decimal("0.00"),
    ) -> Account:
        """
        Open an account, recording any opening balance as a deposit.

        The opening deposit keeps the account's balance equal to
        the sum of its transaction records from the first moment.
        """
        context = {"operation": "open_account"}
        try:
            initial_balance = to_amount(initial_balance, allow_zero=True)
            with unit_of_work(self.db, "open_account"):
                account = self.accounts.create_account(
                    customer_id, account_type, initial_balance
                )
                if initial_balance > 0:
                    self.log.append(
                        account.id,
                        TransactionType.DEPOSIT,
                        initial_balance,
                        "Opening balance",
                    )
        except StorageFailure:
            raise
        except LedgerError as exc:
            logger.warning(
                "open_account rejected: %s", exc,
                extra={**context, "error": exc.error},
            )
            raise

        logger.info(
            "open_account committed",
            extra={**context, "account_id": account.id,
                   "amount": str(initial_balance)},
        )
        return self._read_result(
            "open_account", f"account {account.id}",
            lambda: self.accounts.get(account.id, refresh=True),
        )

    def deposit(
        self,
        account_id: int,
        amount,
        idempotency_key: str | None = None,
    ) -> Account:
        """Add money to an account."""
        def apply(amount: Decimal, reference: str) -> None:
            self.accounts.adjust_balance(account_id, amount)
            self.log.append(
                account_id,
                TransactionType.DEPOSIT,
                amount,
                "Deposit made",
                reference=reference,
            )

        reference = self._execute(
            "deposit", account_id, None, amount, idempotency_key, apply
        )
        return self._read_result(
            "deposit", reference,
            lambda: self.accounts.get(account_id, refresh=True),
        )

    def withdraw(
        self,
        account_id: int,
        amount,
        idempotency_key: str | None = None,
    ) -> Account:
        """
        Take money out of an account.

        Withdrawing the entire balance is allowed and leaves
        the account at exactly zero.
        """
        def apply(amount: Decimal, reference: str) -> None:
            self.accounts.adjust_balance(account_id, -amount)
            self.log.append(
                account_id,
                TransactionType.WITHDRAW,
                amount,
                "Withdrawal made",
                reference=reference,
            )

        reference = self._execute(
            "withdraw", account_id, None, amount, idempotency_key, apply
        )
        return self._read_result(
            "withdraw", reference,
            lambda: self.accounts.get(account_id, refresh=True),
        )

    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount,
        idempotency_key: str | None = None,
    ) -> TransferResult:
        """
        Move money between two accounts.

        If the destination turns out not to exist after the
        source was already debited, the rollback undoes the
        debit along with everything else.
        """
        def apply(amount: Decimal, reference: str) -> None:
            if from_account_id == to_account_id:
                raise ValidationError("Cannot transfer to the same account")

            ordered = sorted([from_account_id, to_account_id])
            for account_id in ordered:
                self.accounts.get(account_id)

            deltas = {from_account_id: -amount, to_account_id: amount}
            for account_id in ordered:
                self.accounts.adjust_balance(account_id, deltas[account_id])

            self.log.append(
                from_account_id,
                TransactionType.TRANSFER_OUT,
                amount,
                f"Transfer to account {to_account_id}",
                counterparty_account_id=to_account_id,
                reference=reference,
            )
            self.log.append(
                to_account_id,
                TransactionType.TRANSFER_IN,
                amount,
                f"Transfer from account {from_account_id}",
                counterparty_account_id=from_account_id,
                reference=reference,
            )

        reference = self._execute(
            "transfer", from_account_id, to_account_id,
            amount, idempotency_key, apply,
        )
        return self._read_result(
            "transfer", reference,
            lambda: TransferResult(
                from_account=self.accounts.get(from_account_id, refresh=True),
                to_account=self.accounts.get(to_account_id, refresh=True),
            ),
        )

    # --- Internals ---

    def _execute(
        self,
        operation: str,
        account_id: int,
        counterparty_account_id: int | None,
        amount,
        idempotency_key: str | None,
        apply: Callable[[Decimal, str], None],
    ) -> str:
        """
        Run apply() once as a single unit of work.

        With an idempotency key, a request that already committed
        is not applied again; the caller just gets the current
        state back.

        Returns the reference the movement was committed under.
        """
        context = {
            "operation": operation,
            "account_id": account_id,
            "counterparty_account_id": counterparty_account_id,
        }
        reference = str(uuid.uuid4())
        try:
            amount = to_amount(amount)
            context["amount"] = str(amount)
            fingerprint = (
                f"{operation}:{account_id}:{counterparty_account_id}:{amount}"
            )

            with read_guard(self.db, operation):
                replayed = self._replay(idempotency_key, operation, fingerprint)
            if replayed is not None:
                logger.info("%s replayed", operation, extra=context)
                return replayed.reference

            with unit_of_work(self.db, operation):
                self._claim(
                    idempotency_key, operation, fingerprint,
                    account_id, counterparty_account_id, reference,
                )
                apply(amount, reference)
        except _DuplicateRequest:
            with read_guard(self.db, operation):
                replayed = self._replay(idempotency_key, operation, fingerprint)
            logger.info("%s replayed after concurrent retry", operation, extra=context)
            return replayed.reference
        except StorageFailure:
            raise
        except LedgerError as exc:
            logger.warning(
                "%s rejected: %s", operation, exc,
                extra={**context, "error": exc.error},
            )
            raise

        logger.info(
            "%s committed", operation,
            extra={**context, "reference": reference},
        )
        return reference

    def _read_result(self, operation: str, committed: str, read: Callable):
        """
        Read back the state an operation left behind.

        By now the commit has happened, so a failing read must not
        look like a failed write that is safe to retry.
        """
        try:
            return read()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(
                "%s committed but its result could not be read", operation,
                exc_info=True,
                extra={
                    "operation": operation,
                    "reference": committed,
                    "error": StateUnavailable.error,
                },
            )
            raise StateUnavailable(
                f"{operation} committed ({committed}) but the resulting "
                "account state could not be read"
            ) from exc

    def _replay(
        self, key: str | None, operation: str, fingerprint: str
    ) -> IdempotencyRecord | None:
        if key is None:
            return None
        record = self.db.get(IdempotencyRecord, key)
        if record is None:
            return None
        if record.operation != operation or record.fingerprint != fingerprint:
            raise ValidationError(
                f"Idempotency key '{key}' was already used for a different request"
            )
        return record

    def _claim(
        self,
        key: str | None,
        operation: str,
        fingerprint: str,
        account_id: int,
        counterparty_account_id: int | None,
        reference: str,
    ) -> None:
        """
        Record the idempotency key inside the current unit of work.

        The record commits or rolls back together with the
        operation, so a rejected request leaves the key free
        for a corrected retry.
        """
        if key is None:
            return
        self.db.add(IdempotencyRecord(
            key=key,
            operation=operation,
            fingerprint=fingerprint,
            account_id=account_id,
            counterparty_account_id=counterparty_account_id,
            reference=reference,
        ))
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise _DuplicateRequest(key) from exc
