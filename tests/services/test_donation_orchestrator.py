"""Donation Orchestrator — atomic donate/verify flows over the real services.

Invariants:
    - Cumulative total and latest record amount diverge as designed
    - A declined transfer mints nothing and records nothing
    - A failure after the transfer rolls back every ledger/registry write
      and refunds the transfer
    - The zero address is rejected before any funds move
    - No per-donor lock outlives the call that took it
    - A rejected proof mutates nothing
    - Concurrent donations receive distinct, dense token ids
"""

import asyncio

import pytest
from sqlalchemy import select

from charity_ledger.core.domain_types import DonorStatus, ZERO_ADDRESS
from charity_ledger.core.errors import (
    InvalidAddressError, InvalidAmountError, ProofVerificationFailedError,
    TransferFailedError,
)
from charity_ledger.models.token import Token
from tests.services.sample_data import (
    ALICE, BOB, CAROL, PAYOUT, valid_proof, zero_proof,
)


async def _token_count(db) -> int:
    result = await db.execute(select(Token.id))
    return len(result.scalars().all())


# ─── donate ──────────────────────────────────────────────────────

async def test_donate_mints_sequential_tokens(orchestrator, rail, fund):
    await fund(rail, ALICE, 10)
    await fund(rail, BOB, 10)
    assert await orchestrator.donate(ALICE, 1) == 0
    assert await orchestrator.donate(BOB, 1) == 1
    assert await orchestrator.donate(ALICE, 1) == 2


async def test_donate_moves_funds_to_payout(orchestrator, rail, fund):
    await fund(rail, ALICE, 100)
    await orchestrator.donate(ALICE, 60)
    assert rail.balance_of(ALICE) == 40
    assert rail.balance_of(PAYOUT) == 60


async def test_cumulative_total_and_latest_amount_diverge(
    orchestrator, rail, fund,
):
    await fund(rail, ALICE, 3)
    await orchestrator.donate(ALICE, 1)
    await orchestrator.donate(ALICE, 2)
    assert await orchestrator.get_donations(ALICE) == 3
    record = await orchestrator.get_record(ALICE)
    assert record.amount == 2


async def test_roster_uniqueness_through_donate(orchestrator, rail, fund):
    for donor in (ALICE, BOB, ALICE):
        await fund(rail, donor, 5)
        await orchestrator.donate(donor, 5)
    donors, amounts, verified = await orchestrator.get_all_donations()
    assert donors == [ALICE, BOB]
    assert amounts == [5, 5]
    assert verified == [False, False]


async def test_donation_locator_round_trip(orchestrator, registry, rail, fund):
    amount = 5000000000000000000
    await fund(rail, ALICE, amount)
    token_id = await orchestrator.donate(ALICE, amount)
    assert token_id == 0
    assert await registry.locator_of(token_id) == (
        "https://x/0.json?donation=5000000000000000000"
    )


async def test_donate_rejects_zero_amount_before_transfer(orchestrator, rail, fund):
    await fund(rail, ALICE, 10)
    with pytest.raises(InvalidAmountError):
        await orchestrator.donate(ALICE, 0)
    assert rail.balance_of(ALICE) == 10


async def test_declined_transfer_mutates_nothing(orchestrator, test_db, rail):
    # no allowance, no balance
    with pytest.raises(TransferFailedError) as exc:
        await orchestrator.donate(ALICE, 100)
    assert exc.value.http_status == 402
    assert await _token_count(test_db) == 0
    assert await orchestrator.get_donations(ALICE) == 0
    donors, _, _ = await orchestrator.get_all_donations()
    assert ALICE not in donors


async def test_declined_transfer_keeps_previous_state(orchestrator, test_db, rail, fund):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    with pytest.raises(TransferFailedError):
        await orchestrator.donate(ALICE, 100)
    assert await orchestrator.get_donations(ALICE) == 5
    assert await _token_count(test_db) == 1
    record = await orchestrator.get_record(ALICE)
    assert record.amount == 5


async def test_rail_exception_surfaces_as_transfer_failed(orchestrator, rail, monkeypatch):
    async def broken(payer, payee, amount):
        raise ConnectionError("rail unreachable")

    monkeypatch.setattr(rail, "transfer_from", broken)
    with pytest.raises(TransferFailedError):
        await orchestrator.donate(ALICE, 1)


async def test_failure_after_transfer_rolls_back_everything(
    orchestrator, registry, test_db, rail, fund, monkeypatch,
):
    await fund(rail, ALICE, 10)

    async def failing_mint(owner, suffix):
        raise RuntimeError("mint exploded")

    monkeypatch.setattr(registry, "mint", failing_mint)
    with pytest.raises(RuntimeError):
        await orchestrator.donate(ALICE, 10)

    assert await orchestrator.get_donations(ALICE) == 0
    assert await orchestrator.get_record(ALICE) is None
    donors, _, _ = await orchestrator.get_all_donations()
    assert donors == []
    assert await registry.next_token_id() == 0
    assert rail.balance_of(PAYOUT) == 0
    assert rail.balance_of(ALICE) == 10
    assert rail.allowance(ALICE, PAYOUT) == 10


async def test_failed_refund_still_surfaces_original_error(
    orchestrator, registry, rail, fund, monkeypatch,
):
    await fund(rail, ALICE, 10)

    async def failing_mint(owner, suffix):
        raise RuntimeError("mint exploded")

    async def failing_refund(payer, payee, amount):
        raise ConnectionError("rail unreachable")

    monkeypatch.setattr(registry, "mint", failing_mint)
    monkeypatch.setattr(rail, "refund", failing_refund)
    with pytest.raises(RuntimeError, match="mint exploded"):
        await orchestrator.donate(ALICE, 10)
    assert await orchestrator.get_donations(ALICE) == 0


async def test_zero_address_donor_is_rejected_before_transfer(
    orchestrator, registry, rail, fund,
):
    await fund(rail, ZERO_ADDRESS, 100)
    with pytest.raises(InvalidAddressError):
        await orchestrator.donate(ZERO_ADDRESS, 100)
    assert rail.balance_of(PAYOUT) == 0
    assert rail.balance_of(ZERO_ADDRESS) == 100
    assert await registry.next_token_id() == 0


async def test_zero_address_cannot_verify(orchestrator, registry):
    with pytest.raises(InvalidAddressError):
        await orchestrator.verify_donation(ZERO_ADDRESS, valid_proof(), "INV-1")
    assert await registry.next_token_id() == 0


async def test_donate_appends_event(orchestrator, rail, fund):
    await fund(rail, ALICE, 7)
    token_id = await orchestrator.donate(ALICE, 7)
    events = await orchestrator.list_events()
    assert len(events) == 1
    assert events[0].event_type == "donation"
    assert events[0].donor == ALICE
    assert events[0].amount == 7
    assert events[0].token_id == token_id


# ─── verify_donation ─────────────────────────────────────────────

async def test_verify_mints_invoice_token_and_indexes_it(
    orchestrator, registry, rail, fund,
):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    token_id = await orchestrator.verify_donation(ALICE, valid_proof(), "INV-1")
    assert token_id == 1
    assert await orchestrator.get_invoice_token(ALICE) == 1
    assert await registry.locator_of(1) == "https://x/1.json?invoiceId=INV-1"
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.VERIFIED
    _, _, verified = await orchestrator.get_all_donations()
    assert verified == [True]


async def test_later_invoice_overwrites_index_but_keeps_token(
    orchestrator, registry, rail, fund,
):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    first = await orchestrator.verify_donation(ALICE, valid_proof(), "INV-1")
    second = await orchestrator.verify_donation(ALICE, valid_proof(), "INV-2")
    assert await orchestrator.get_invoice_token(ALICE) == second
    assert await registry.owner_of(first) == ALICE
    record = await orchestrator.get_record(ALICE)
    assert record.invoice_id == "INV-2"


async def test_verify_without_prior_donation_is_permitted(orchestrator):
    token_id = await orchestrator.verify_donation(CAROL, valid_proof(), "INV-1")
    assert token_id == 0
    record = await orchestrator.get_record(CAROL)
    assert record.amount == 0
    assert record.verified is True
    donors, _, _ = await orchestrator.get_all_donations()
    assert donors == []


async def test_rejected_proof_mutates_nothing(orchestrator, test_db, rail, fund):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    with pytest.raises(ProofVerificationFailedError) as exc:
        await orchestrator.verify_donation(ALICE, zero_proof(), "INV-1")
    assert exc.value.http_status == 422
    assert await _token_count(test_db) == 1
    assert await orchestrator.get_invoice_token(ALICE) is None
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.DONATED


async def test_state_machine_resets_on_new_donation(orchestrator, rail, fund):
    await fund(rail, ALICE, 10)
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.NO_DONATION
    await orchestrator.donate(ALICE, 5)
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.DONATED
    await orchestrator.verify_donation(ALICE, valid_proof(), "INV-1")
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.VERIFIED
    await orchestrator.donate(ALICE, 5)
    assert await orchestrator.get_donor_status(ALICE) == DonorStatus.DONATED
    # invoice index survives the record overwrite
    assert await orchestrator.get_invoice_token(ALICE) == 1


async def test_events_are_listed_in_emission_order(orchestrator, rail, fund):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    await orchestrator.verify_donation(ALICE, valid_proof(), "INV-1")
    events = await orchestrator.list_events(donor=ALICE)
    assert [e.event_type for e in events] == ["donation", "verification"]
    assert events[1].invoice_id == "INV-1"
    assert await orchestrator.list_events(donor=BOB) == []


# ─── concurrency ─────────────────────────────────────────────────

async def test_concurrent_donations_get_distinct_dense_ids(
    orchestrator, test_db, rail, fund,
):
    donors = ["0x" + f"{i:040x}" for i in range(1, 6)]
    for donor in donors:
        await fund(rail, donor, 10)
    ids = await asyncio.gather(*(orchestrator.donate(d, 10) for d in donors))
    assert sorted(ids) == [0, 1, 2, 3, 4]
    assert await _token_count(test_db) == 5


async def test_concurrent_calls_for_same_donor_are_serialized(
    orchestrator, rail, fund,
):
    await fund(rail, ALICE, 6)
    ids = await asyncio.gather(*(orchestrator.donate(ALICE, 2) for _ in range(3)))
    assert sorted(ids) == [0, 1, 2]
    assert await orchestrator.get_donations(ALICE) == 6
    events = await orchestrator.list_events(donor=ALICE)
    assert len(events) == 3


async def test_get_charity_info(orchestrator, charity):
    assert orchestrator.get_charity_info() == charity
    assert charity.payout_address == PAYOUT


async def test_donor_locks_released_after_success(orchestrator, locks, rail, fund):
    await fund(rail, ALICE, 5)
    await orchestrator.donate(ALICE, 5)
    await orchestrator.verify_donation(ALICE, valid_proof(), "INV-1")
    assert len(locks) == 0


async def test_donor_locks_released_after_declined_transfer(orchestrator, locks):
    for i in range(1, 4):
        with pytest.raises(TransferFailedError):
            await orchestrator.donate("0x" + f"{i:040x}", 1)
    assert len(locks) == 0


async def test_donor_locks_released_after_rejected_proof(orchestrator, locks):
    with pytest.raises(ProofVerificationFailedError):
        await orchestrator.verify_donation(ALICE, zero_proof(), "INV-1")
    assert len(locks) == 0
