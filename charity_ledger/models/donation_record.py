"""DonationRecord ORM — latest donation state per donor.

Invariants:
    - One row per donor (donor is the primary key)
    - A new donation OVERWRITES amount, resets verified, clears invoice_id
    - A verification without a prior donation creates a zero-amount verified row

Design Decisions:
    - Overwrite, not accumulate: cumulative history lives in DonorTotal and
      the ledger event log
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base
from charity_ledger.db.types import Uint256


class DonationRecord(Base):
    """Per-donor latest donation and verification status."""
    __tablename__ = "donation_records"

    donor: Mapped[str] = mapped_column(String(42), primary_key=True)
    amount: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)
    verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    invoice_id: Mapped[str | None] = mapped_column(
        String(200), nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
