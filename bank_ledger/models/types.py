"""
Column types shared by the models.

Money is stored as a whole number of cents. The database only
ever adds and compares integers, so balance arithmetic inside
an UPDATE is exact on every backend, SQLite included.
"""

from decimal import Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

CENT = Decimal("0.01")


def to_minor_units(value) -> int:
    """Decimal("12.34") -> 1234. Refuses fractions of a cent."""
    cents = Decimal(value) * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"{value!r} has more than two decimal places")
    return int(cents)


def from_minor_units(value: int) -> Decimal:
    """1234 -> Decimal("12.34")."""
    return Decimal(int(value)).scaleb(-2).quantize(CENT)


class Money(TypeDecorator):
    """A Decimal amount with two decimal places, stored as BIGINT cents."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_minor_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_minor_units(value)
