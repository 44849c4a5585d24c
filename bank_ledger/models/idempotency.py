"""
Idempotency record model.

A caller may attach a key to a money-movement request. The
record is written in the same database transaction as the
balance change, so it exists if and only if the operation
committed. The unique key is what stops two concurrent
retries from both applying.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from bank_ledger.models.base import Base, utcnow


class IdempotencyRecord(Base):
    __tablename__ = "idempotency_records"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    fingerprint: Mapped[str] = mapped_column(String(255), nullable=False)
    account_id: Mapped[int] = mapped_column(nullable=False)
    counterparty_account_id: Mapped[int | None] = mapped_column(nullable=True)
    reference: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<IdempotencyRecord {self.key} {self.operation}>"
