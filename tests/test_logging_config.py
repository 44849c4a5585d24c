"""
Tests for the structured logging setup.
"""

import json
import logging

from bank_ledger.logging_config import JSONFormatter, PACKAGE_LOGGER, setup_logging


def make_record(**extra):
    record = logging.LogRecord(
        name="bank_ledger.services.ledger_engine",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="%s rejected",
        args=("withdraw",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context_fields():
    record = make_record(operation="withdraw", account_id=3, amount="150.00")

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["message"] == "withdraw rejected"
    assert entry["operation"] == "withdraw"
    assert entry["account_id"] == 3
    assert entry["amount"] == "150.00"
    assert "reference" not in entry


def test_setup_logging_does_not_stack_handlers():
    setup_logging("DEBUG", json_output=True)
    logger = setup_logging("WARNING", json_output=False)

    assert logger is logging.getLogger(PACKAGE_LOGGER)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
