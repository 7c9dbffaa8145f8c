"""LedgerEvent ORM — append-only log of donation and verification events.

Invariants:
    - Written in the same transaction as the state change it describes
    - Never updated or deleted

Design Decisions:
    - Event log, not enforcement: nothing reads it back to decide behavior
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from charity_ledger.db.base import Base
from charity_ledger.db.types import Uint256


class LedgerEvent(Base):
    """Donation or verification event."""
    __tablename__ = "ledger_events"
    __table_args__ = (Index("ix_ledger_events_donor", "donor"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    donor: Mapped[str] = mapped_column(String(42), nullable=False)
    token_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount: Mapped[int | None] = mapped_column(Uint256, nullable=True)
    invoice_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
