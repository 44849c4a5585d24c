"""
Tests for the admin bootstrap command.
"""

from sqlalchemy import select

from bank_ledger.create_admin import main
from bank_ledger.models.enums import UserRole
from bank_ledger.models.user import User


def test_creates_admin(db_session, session_factory, capsys):
    code = main(
        ["--username", "boss", "--password", "s3cret-pass", "--full-name", "The Boss"],
        session_factory=session_factory,
    )

    user = db_session.execute(select(User).where(User.username == "boss")).scalar_one()
    assert code == 0
    assert user.role == UserRole.ADMIN
    assert user.full_name == "The Boss"
    assert "Admin 'boss' created" in capsys.readouterr().out


def test_duplicate_username_fails(session_factory):
    args = ["--username", "boss", "--password", "s3cret-pass"]
    assert main(args, session_factory=session_factory) == 0

    assert main(args, session_factory=session_factory) == 1
