"""Donation Orchestrator — use-case layer composing rail, verifier, ledger and registry.

Invariants:
    - donate(): donor (non-zero) and amount validated, THEN transfer, THEN record + total + mint + event, THEN commit
    - verify_donation(): proof verified, THEN mark_verified + mint + invoice index + event, THEN commit
    - A declined transfer or rejected proof raises before any mutation
    - Any failure after the external call rolls back the whole transaction
    - A rolled-back donate() refunds the transfer it already made
    - Per-donor lock spans the external call; sequence lock spans mint through commit

Design Decisions:
    - Orchestrator holds the only TokenMinter reference (no public mint entry point)
    - Depends on PaymentRail / ProofVerifier protocols, never concrete classes
    - Events written to ledger_events in the same transaction and logged after commit
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from charity_ledger.core.charity import CharityDescriptor
from charity_ledger.core.domain_types import (
    Address, Amount, DonorStatus, LedgerEventType, TokenId,
)
from charity_ledger.core.donor_state import derive_status
from charity_ledger.core.enforce_donation import (
    validate_address, validate_amount, validate_owner,
)
from charity_ledger.core.errors import (
    ProofVerificationFailedError, TransferFailedError,
)
from charity_ledger.core.proof_verifier import ProofData, ProofVerifier
from charity_ledger.core.repository_protocols import PaymentRail, TokenMinter
from charity_ledger.core.token_locator import donation_suffix, invoice_suffix
from charity_ledger.models.donation_record import DonationRecord
from charity_ledger.models.ledger_event import LedgerEvent
from charity_ledger.services.donation_ledger import DonationLedger
from charity_ledger.services.donor_locks import DonorLockRegistry

logger = logging.getLogger(__name__)


class DonationOrchestrator:
    """Accepts donations and verifications as atomic units of work."""

    def __init__(
        self,
        db: AsyncSession,
        registry: TokenMinter,
        ledger: DonationLedger,
        rail: PaymentRail,
        verifier: ProofVerifier,
        charity: CharityDescriptor,
        locks: DonorLockRegistry,
    ):
        self.db = db
        self._registry = registry
        self._ledger = ledger
        self._rail = rail
        self._verifier = verifier
        self._charity = charity
        self._locks = locks

    @asynccontextmanager
    async def _unit_of_work(self, operation: str, donor: Address):
        """Serialize id allocation and commit all-or-nothing."""
        async with self._locks.sequence:
            try:
                yield
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.error(
                    f"{operation} rolled back",
                    extra={"donor": donor}, exc_info=True,
                )
                raise

    # ─── commands ────────────────────────────────────────────────

    async def donate(self, donor: str, amount: int) -> TokenId:
        """Transfer `amount` to the charity and mint a donation token."""
        donor = validate_owner(donor)
        amount = validate_amount(amount, donor)
        payee = Address(self._charity.payout_address)

        async with self._locks.hold(donor):
            await self._transfer(donor, payee, amount)
            try:
                async with self._unit_of_work("donate", donor):
                    await self._ledger.record(donor, amount)
                    total = await self._registry.record_donation(donor, amount)
                    token_id = await self._registry.mint(donor, donation_suffix(amount))
                    self.db.add(LedgerEvent(
                        event_type=LedgerEventType.DONATION.value,
                        donor=donor, token_id=token_id, amount=amount,
                    ))
            except Exception:
                await self._refund(donor, payee, amount)
                raise

        logger.info(
            f"Donation of {amount} recorded, token {token_id} minted",
            extra={
                "event": LedgerEventType.DONATION.value, "donor": donor,
                "amount": str(amount), "token_id": token_id,
            },
        )
        logger.debug(f"Cumulative total for {donor} is now {total}")
        return token_id

    async def verify_donation(
        self, donor: str, proof: ProofData | None, invoice_id: str,
    ) -> TokenId:
        """Check the proof-of-payment and mint an invoice token."""
        donor = validate_owner(donor)

        async with self._locks.hold(donor):
            if not self._verifier.verify(proof, donor):
                logger.warning(
                    "Proof of payment rejected",
                    extra={"donor": donor, "invoice_id": invoice_id},
                )
                raise ProofVerificationFailedError(donor)
            async with self._unit_of_work("verify_donation", donor):
                await self._ledger.mark_verified(donor, invoice_id)
                token_id = await self._registry.mint(donor, invoice_suffix(invoice_id))
                await self._registry.set_invoice_token(donor, token_id)
                self.db.add(LedgerEvent(
                    event_type=LedgerEventType.VERIFICATION.value,
                    donor=donor, token_id=token_id, invoice_id=invoice_id,
                ))

        logger.info(
            f"Donation verified under invoice {invoice_id}, token {token_id} minted",
            extra={
                "event": LedgerEventType.VERIFICATION.value, "donor": donor,
                "invoice_id": invoice_id, "token_id": token_id,
            },
        )
        return token_id

    async def _transfer(self, donor: Address, payee: Address, amount: Amount) -> None:
        try:
            ok = await self._rail.transfer_from(donor, payee, amount)
        except Exception as e:
            logger.error(
                f"Payment rail error: {e}",
                extra={"donor": donor, "amount": str(amount)}, exc_info=True,
            )
            raise TransferFailedError(donor, amount) from e
        if not ok:
            logger.warning(
                "Payment transfer declined",
                extra={"donor": donor, "amount": str(amount)},
            )
            raise TransferFailedError(donor, amount)

    async def _refund(self, donor: Address, payee: Address, amount: Amount) -> None:
        """Reverse a transfer whose ledger writes were rolled back.

        The original failure always propagates; a failed refund is logged for
        manual reconciliation.
        """
        try:
            ok = await self._rail.refund(donor, payee, amount)
        except Exception as e:
            logger.critical(
                f"Refund after rollback raised: {e}; reconcile manually",
                extra={"donor": donor, "amount": str(amount)}, exc_info=True,
            )
            return
        if ok:
            logger.warning(
                "Transfer refunded after rollback",
                extra={"donor": donor, "amount": str(amount)},
            )
        else:
            logger.critical(
                "Refund after rollback declined; reconcile manually",
                extra={"donor": donor, "amount": str(amount)},
            )

    # ─── queries ─────────────────────────────────────────────────

    async def get_all_donations(
        self,
    ) -> tuple[list[Address], list[Amount], list[bool]]:
        return await self._ledger.all_donations()

    def get_charity_info(self) -> CharityDescriptor:
        return self._charity

    async def get_donations(self, donor: str) -> Amount:
        """Cumulative total (registry side), not the latest record amount."""
        return await self._registry.donations_of(donor)

    async def get_invoice_token(self, donor: str) -> TokenId | None:
        return await self._registry.invoice_token_of(donor)

    async def get_record(self, donor: str) -> DonationRecord | None:
        return await self._ledger.get_record(donor)

    async def get_donor_status(self, donor: str) -> DonorStatus:
        record = await self.get_record(donor)
        if record is None:
            return DonorStatus.NO_DONATION
        return derive_status(record.amount, record.verified)

    async def list_events(
        self, donor: str | None = None, limit: int = 50, offset: int = 0,
    ) -> list[LedgerEvent]:
        """Ledger events in emission order (token ids are globally ordered)."""
        query = select(LedgerEvent).order_by(LedgerEvent.token_id)
        if donor:
            query = query.where(LedgerEvent.donor == validate_address(donor))
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())
