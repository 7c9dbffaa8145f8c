"""Token ORM — one row per minted token.

Invariants:
    - id is assigned by the registry from RegistryState.next_token_id (never autoincrement)
    - owner is a canonical non-zero address
    - suffix is frozen at mint time; the full locator is derived at query time

Design Decisions:
    - kind denormalized from suffix: lets listings filter without string parsing
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base


class Token(Base):
    """Minted token — donation or invoice."""
    __tablename__ = "tokens"
    __table_args__ = (Index("ix_tokens_owner", "owner"),)

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    suffix: Mapped[str] = mapped_column(String(1000), nullable=False)
    minted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
