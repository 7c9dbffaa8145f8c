"""InvoiceToken ORM — donor -> token id of their most recent invoice token.

Invariants:
    - One slot per donor; a later invoice overwrites the reference only,
      the earlier token stays in `tokens`
"""

from sqlalchemy import BigInteger, String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from charity_ledger.db.base import Base


class InvoiceToken(Base):
    """Index of each donor's latest invoice token."""
    __tablename__ = "invoice_tokens"

    donor: Mapped[str] = mapped_column(String(42), primary_key=True)
    token_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tokens.id"), nullable=False,
    )
