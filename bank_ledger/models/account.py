"""
Customer account model.

The balance is stored on the row and changed only by the
ledger engine, through a single conditional UPDATE per
account. Balances are kept in whole cents (see types.Money).
The check constraint is the last line: even a buggy
caller cannot commit a negative balance.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, ForeignKey, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_ledger.models.base import Base, utcnow
from bank_ledger.models.enums import AccountType
from bank_ledger.models.types import Money


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    account_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False
    )
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            name="account_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0.00")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    customer: Mapped["Customer"] = relationship(back_populates="accounts")

    def __repr__(self) -> str:
        return (
            f"<Account {self.account_number} "
            f"{self.account_type.value} {self.balance}>"
        )
