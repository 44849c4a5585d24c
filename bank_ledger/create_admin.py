"""
Create an admin user from the command line.

Open registration only hands out staff accounts, so the first
admin has to come from here:

    python -m bank_ledger.create_admin --username manager
"""

import argparse
import getpass
import logging

from bank_ledger.config import get_settings
from bank_ledger.errors import LedgerError
from bank_ledger.logging_config import setup_logging
from bank_ledger.models.base import SessionLocal
from bank_ledger.models.enums import UserRole
from bank_ledger.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def main(argv=None, session_factory=SessionLocal) -> int:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--username", required=True)
    parser.add_argument("--full-name", default=None)
    parser.add_argument(
        "--password",
        default=None,
        help="Prompted for when omitted",
    )
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")

    db = session_factory()
    try:
        user = AuthService(db).create_user(
            args.username, password, args.full_name, UserRole.ADMIN
        )
    except LedgerError as exc:
        logger.error("Could not create admin %s: %s", args.username, exc)
        return 1
    finally:
        db.close()

    print(f"Admin '{user.username}' created with id {user.id}")
    return 0


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    raise SystemExit(main())
