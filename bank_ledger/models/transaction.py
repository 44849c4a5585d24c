"""
Transaction model.

One row per balance-affecting event on one account. Rows are
append-only: once written they are never updated or deleted.

A transfer writes two rows, a transfer_out on the source and
a transfer_in on the destination. Each names the other account
in counterparty_account_id, and both share the same reference.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, ForeignKey, CheckConstraint, Index,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_ledger.models.base import Base, utcnow
from bank_ledger.models.enums import TransactionType
from bank_ledger.models.types import Money


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        Index("ix_transactions_account_created", "account_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False
    )
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Money, nullable=False
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    counterparty_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True
    )
    reference: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )

    account: Mapped["Account"] = relationship(foreign_keys=[account_id])

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.type.value} "
            f"{self.amount} on account {self.account_id}>"
        )
