"""Business logic services."""

from bank_ledger.services.account_store import AccountStore
from bank_ledger.services.transaction_log import TransactionLog
from bank_ledger.services.ledger_engine import LedgerEngine, TransferResult
from bank_ledger.services.customer_service import CustomerService
from bank_ledger.services.query_service import QueryService
from bank_ledger.services.report_service import ReportService
from bank_ledger.services.auth_service import AuthService, Subject

__all__ = [
    "AccountStore",
    "TransactionLog",
    "LedgerEngine",
    "TransferResult",
    "CustomerService",
    "QueryService",
    "ReportService",
    "AuthService",
    "Subject",
]
