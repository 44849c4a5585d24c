"""
Customer model.

Represents an account holder. A customer can have multiple
accounts. Customer details are fixed at creation; only the
KYC flag changes afterwards.
"""

from datetime import date, datetime

from sqlalchemy import String, Boolean, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_ledger.models.base import Base, utcnow


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    national_id: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    kyc_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    # A customer can have many accounts
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="customer", order_by="Account.id"
    )

    def __repr__(self) -> str:
        return f"<Customer {self.first_name} {self.last_name}>"
