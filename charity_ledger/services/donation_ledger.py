"""Donation Ledger — per-donor latest record plus append-only donor roster.

Invariants:
    - record() requires amount > 0 and OVERWRITES the donor's record
      (amount set, verified reset, invoice_id cleared)
    - A donor is appended to the roster at most once, on their first record()
    - mark_verified() on a donor without a record creates a zero-amount verified
      record and leaves the roster untouched
    - all_donations() is read-only and ordered by roster insertion
    - Methods flush but never commit: the orchestrator owns the unit of work

Design Decisions:
    - Roster membership by primary-key style lookup on a UNIQUE column instead of
      a linear scan; position column keeps enumeration order
    - Verify-without-donate stays permissive: the record is keyed by donor and a
      verification is meaningful evidence even before an on-ledger donation
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from charity_ledger.core.domain_types import Address, Amount
from charity_ledger.core.enforce_donation import validate_address, validate_amount
from charity_ledger.models.donation_record import DonationRecord
from charity_ledger.models.donor_roster_entry import DonorRosterEntry

logger = logging.getLogger(__name__)


class DonationLedger:
    """Ledger of donation records backed by one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(self, donor: str, amount: int) -> DonationRecord:
        """Overwrite the donor's record with a new donation."""
        donor = validate_address(donor)
        amount = validate_amount(amount, donor)

        record = await self.db.get(DonationRecord, donor)
        if record is None:
            record = DonationRecord(donor=donor)
            self.db.add(record)
        record.amount = amount
        record.verified = False
        record.invoice_id = None

        if not await self.is_listed(donor):
            self.db.add(DonorRosterEntry(donor=donor))
            logger.info("New donor added to roster", extra={"donor": donor})

        await self.db.flush()
        return record

    async def mark_verified(self, donor: str, invoice_id: str) -> DonationRecord:
        """Flag the donor's record as verified under `invoice_id`."""
        donor = validate_address(donor)
        record = await self.db.get(DonationRecord, donor)
        if record is None:
            logger.warning(
                "Verification recorded for donor without a donation",
                extra={"donor": donor, "invoice_id": invoice_id},
            )
            record = DonationRecord(donor=donor, amount=0)
            self.db.add(record)
        record.verified = True
        record.invoice_id = invoice_id
        await self.db.flush()
        return record

    async def get_record(self, donor: str) -> DonationRecord | None:
        return await self.db.get(DonationRecord, validate_address(donor))

    async def is_listed(self, donor: str) -> bool:
        result = await self.db.execute(
            select(DonorRosterEntry.position)
            .where(DonorRosterEntry.donor == donor),
        )
        return result.scalar_one_or_none() is not None

    async def roster(self) -> list[Address]:
        """Distinct donors in first-donation order."""
        result = await self.db.execute(
            select(DonorRosterEntry.donor).order_by(DonorRosterEntry.position),
        )
        return [Address(d) for d in result.scalars().all()]

    async def all_donations(
        self,
    ) -> tuple[list[Address], list[Amount], list[bool]]:
        """Parallel (donors, latest amounts, verified flags) in roster order."""
        result = await self.db.execute(
            select(
                DonorRosterEntry.donor,
                DonationRecord.amount,
                DonationRecord.verified,
            )
            .join(
                DonationRecord,
                DonationRecord.donor == DonorRosterEntry.donor,
                isouter=True,
            )
            .order_by(DonorRosterEntry.position),
        )
        donors: list[Address] = []
        amounts: list[Amount] = []
        verified: list[bool] = []
        for donor, amount, is_verified in result.all():
            donors.append(Address(donor))
            amounts.append(Amount(amount or 0))
            verified.append(bool(is_verified))
        return donors, amounts, verified
