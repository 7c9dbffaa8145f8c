"""DonorTotal ORM — cumulative donation total per donor (registry side).

Invariants:
    - total is non-decreasing and equals the sum of every recorded amount
    - Independent of DonationRecord.amount, which only holds the latest donation
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base
from charity_ledger.db.types import Uint256


class DonorTotal(Base):
    """Running sum of a donor's donations."""
    __tablename__ = "donor_totals"

    donor: Mapped[str] = mapped_column(String(42), primary_key=True)
    total: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)
