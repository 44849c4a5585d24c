"""
Tests for the QueryService.
"""

from decimal import Decimal

import pytest

from bank_ledger.config import get_settings
from bank_ledger.errors import NotFound
from bank_ledger.services.ledger_engine import LedgerEngine
from bank_ledger.services.query_service import QueryService


def test_dashboard_stats_on_empty_bank(db_session):
    stats = QueryService(db_session).dashboard_stats()

    assert stats.total_customers == 0
    assert stats.total_accounts == 0
    assert stats.total_balance == Decimal("0.00")


def test_dashboard_stats(db_session, make_customer, make_account):
    customer = make_customer()
    make_account("100.00", customer_id=customer.id)
    make_account("20.50", customer_id=customer.id)
    make_account("5.00")

    stats = QueryService(db_session).dashboard_stats()

    assert stats.total_customers == 2
    assert stats.total_accounts == 3
    assert stats.total_balance == Decimal("125.50")


def test_transfers_do_not_change_total_balance(db_session, make_account):
    a = make_account("80.00")
    b = make_account("20.00")
    queries = QueryService(db_session)
    before = queries.total_balance()

    LedgerEngine(db_session).transfer(a.id, b.id, Decimal("35.00"))

    assert queries.total_balance() == before == Decimal("100.00")


def test_account_history(db_session, make_account):
    account = make_account("10.00")
    engine = LedgerEngine(db_session)
    engine.deposit(account.id, Decimal("1.00"))
    engine.withdraw(account.id, Decimal("2.00"))

    history = QueryService(db_session).account_history(account.id)

    assert [t.description for t in history] == [
        "Withdrawal made", "Deposit made", "Opening balance",
    ]


def test_history_of_missing_account(db_session):
    with pytest.raises(NotFound):
        QueryService(db_session).account_history(31)


def test_history_of_account_without_transactions(db_session, make_account):
    account = make_account()
    assert QueryService(db_session).account_history(account.id) == []


def test_recent_activity_default_limit(db_session, make_account):
    account = make_account()
    engine = LedgerEngine(db_session)
    for _ in range(12):
        engine.deposit(account.id, Decimal("1.00"))

    recent = QueryService(db_session).recent_activity()

    assert len(recent) == get_settings().RECENT_ACTIVITY_LIMIT


@pytest.mark.parametrize("requested,expected", [(0, 1), (-4, 1), (3, 3), (10_000, 5)])
def test_recent_activity_limit_is_clamped(db_session, make_account, requested, expected):
    account = make_account()
    engine = LedgerEngine(db_session)
    for _ in range(5):
        engine.deposit(account.id, Decimal("1.00"))

    assert len(QueryService(db_session).recent_activity(requested)) == expected
