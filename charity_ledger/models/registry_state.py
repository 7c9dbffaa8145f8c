"""RegistryState ORM — single-row table holding the registry-wide counters.

Invariants:
    - Exactly one row (id == 1), created lazily by the TokenRegistry service
    - next_token_id only ever increases, by exactly one per mint
    - base_locator is the only mutable part of every token's locator

Design Decisions:
    - Counter row over DB autoincrement: sequences leave gaps on rollback,
      token ids must stay dense
    - Row is read FOR UPDATE during mint: serializes allocation across processes
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base


REGISTRY_STATE_ID = 1


class RegistryState(Base):
    """Registry-wide id sequence and base locator."""
    __tablename__ = "registry_state"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False,
        default=REGISTRY_STATE_ID,
    )
    next_token_id: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    base_locator: Mapped[str] = mapped_column(
        String(2000), nullable=False, default="",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
