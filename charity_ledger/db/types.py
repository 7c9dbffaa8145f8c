"""Column Types — custom SQLAlchemy types for ledger values.

Invariants:
    - Uint256 round-trips any integer in [0, 2**256) exactly on every backend
    - Python side is always int; storage side is base-10 text

Design Decisions:
    - Text storage over NUMERIC: SQLite coerces large NUMERIC values to REAL and
      loses precision, asyncpg and aiosqlite both handle VARCHAR uniformly
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class Uint256(TypeDecorator):
    """Unsigned 256-bit integer stored as decimal text."""

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0 or value >= 2**256:
            raise ValueError(f"value out of uint256 range: {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
