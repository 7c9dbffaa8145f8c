"""DonorRosterEntry ORM — append-only, duplicate-free, insertion-ordered donor list.

Invariants:
    - donor is UNIQUE: a donor appears 0 or 1 times
    - position orders enumeration; rows are never updated or deleted

Design Decisions:
    - Unique index gives O(1) membership checks while position keeps order
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base


class DonorRosterEntry(Base):
    """One roster slot per distinct donor."""
    __tablename__ = "donor_roster"

    position: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    donor: Mapped[str] = mapped_column(
        String(42), nullable=False, unique=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
