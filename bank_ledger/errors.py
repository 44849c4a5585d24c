"""
Error taxonomy for the ledger.

Every failure a caller can observe is one of these classes.
Each carries a stable ``error`` code and the HTTP status the
API layer responds with, so routers never have to map
exceptions by hand.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all ledger failures."""

    error = "ledger_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed input or a request that breaks a business rule."""

    error = "validation_error"
    status_code = 400


class NotFound(LedgerError):
    error = "not_found"
    status_code = 404


class InsufficientFunds(LedgerError):
    """
    A debit would leave the account below zero.

    The shortfall is how much more money the account would
    need for the request to succeed.
    """

    error = "insufficient_funds"
    status_code = 400

    def __init__(
        self,
        account_id: int,
        requested: Decimal,
        shortfall: Decimal | None = None,
    ):
        message = f"Insufficient funds in account {account_id}: requested {requested}"
        if shortfall is not None:
            message += f", short by {shortfall}"
        super().__init__(message)
        self.account_id = account_id
        self.requested = requested
        self.shortfall = shortfall


class Unauthorized(LedgerError):
    error = "unauthorized"
    status_code = 401


class Forbidden(LedgerError):
    error = "forbidden"
    status_code = 403


class StorageFailure(LedgerError):
    """
    The database was unavailable or the commit failed.

    Raised only after the unit of work has been rolled back,
    so the caller may retry.
    """

    error = "storage_failure"
    status_code = 503


class StateUnavailable(LedgerError):
    """
    The operation committed, but reading the result back failed.

    Unlike StorageFailure this must not be retried blindly: the
    money already moved. The message carries the committed
    reference so the caller can look the records up later.
    """

    error = "state_unavailable"
    status_code = 503


class DeliveryFailure(LedgerError):
    """A report was built but could not be handed to the mail server."""

    error = "delivery_failure"
    status_code = 502
