"""
Tests for the TransactionLog.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from bank_ledger.errors import ValidationError
from bank_ledger.models.base import utcnow
from bank_ledger.models.enums import TransactionType
from bank_ledger.services.transaction_log import TransactionLog


def test_append_assigns_reference_and_timestamp(db_session, make_account):
    account = make_account()
    log = TransactionLog(db_session)

    before = utcnow()
    txn = log.append(account.id, TransactionType.DEPOSIT, Decimal("12.00"), "Deposit made")
    db_session.commit()

    assert txn.id is not None
    assert len(txn.reference) == 36
    assert txn.created_at >= before
    assert txn.counterparty_account_id is None


@pytest.mark.parametrize("amount", [Decimal("0.00"), Decimal("-3.00")])
def test_append_rejects_non_positive_amounts(db_session, make_account, amount):
    account = make_account()
    with pytest.raises(ValidationError):
        TransactionLog(db_session).append(
            account.id, TransactionType.DEPOSIT, amount, "bad"
        )


def test_list_by_account_is_newest_first(db_session, make_account):
    account = make_account()
    other = make_account()
    log = TransactionLog(db_session)

    first = log.append(account.id, TransactionType.DEPOSIT, Decimal("1.00"), "one")
    second = log.append(account.id, TransactionType.DEPOSIT, Decimal("2.00"), "two")
    log.append(other.id, TransactionType.DEPOSIT, Decimal("3.00"), "elsewhere")
    db_session.commit()

    history = log.list_by_account(account.id)

    assert [t.id for t in history] == [second.id, first.id]


def test_list_by_reference(db_session, make_account):
    account = make_account()
    log = TransactionLog(db_session)
    log.append(account.id, TransactionType.DEPOSIT, Decimal("5.00"), "a", reference="ref-1")
    log.append(account.id, TransactionType.WITHDRAW, Decimal("1.00"), "b", reference="ref-2")
    db_session.commit()

    records = log.list_by_reference("ref-1")

    assert len(records) == 1
    assert records[0].description == "a"


def test_list_recent_joins_customer_and_account(db_session, make_customer, make_account):
    customer = make_customer(first="Chikondi", last="Phiri")
    account = make_account(customer_id=customer.id)
    log = TransactionLog(db_session)
    for n in range(1, 4):
        log.append(account.id, TransactionType.DEPOSIT, Decimal(n), f"deposit {n}")
    db_session.commit()

    recent = log.list_recent(2)

    assert [r.description for r in recent] == ["deposit 3", "deposit 2"]
    assert recent[0].customer_name == "Chikondi Phiri"
    assert recent[0].account_number == account.account_number


def test_list_in_range_excludes_end(db_session, make_account):
    account = make_account()
    log = TransactionLog(db_session)
    txn = log.append(account.id, TransactionType.DEPOSIT, Decimal("9.00"), "today")
    db_session.commit()

    start = datetime.combine(txn.created_at.date(), datetime.min.time())

    assert len(log.list_in_range(start, start + timedelta(days=1))) == 1
    assert log.list_in_range(start - timedelta(days=1), start) == []
