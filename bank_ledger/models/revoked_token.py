"""
Revoked access tokens.

Logging out records the token's identifier here. The table is
durable, so a restart cannot silently re-validate a token that
was revoked. Rows are only needed until the token would have
expired anyway, after which they can be purged.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from bank_ledger.models.base import Base, utcnow


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    revoked_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
