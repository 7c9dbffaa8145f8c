"""Donation Routes — donate, verify, and read the ledger.

Invariants:
    - Mutating routes act on the caller's own identity (X-Caller-Address)
    - Routes never contain business logic (delegate to DonationOrchestrator)
    - Amounts serialized as decimal strings

Design Decisions:
    - Locator in receipts read back through the registry: reflects the base at
      response time, never a cached value
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from charity_ledger.api.dependencies import (
    get_caller_address, get_orchestrator, get_token_reader,
)
from charity_ledger.core.domain_types import Address
from charity_ledger.core.enforce_donation import validate_address
from charity_ledger.core.errors import ResourceNotFoundError
from charity_ledger.core.repository_protocols import TokenReader
from charity_ledger.schemas.donation import (
    AllDonationsResponse,
    DonationCreate,
    DonationReceipt,
    DonorSummary,
    DonorTotalResponse,
    InvoiceTokenResponse,
    LedgerEventResponse,
    VerificationCreate,
    VerificationReceipt,
)
from charity_ledger.services.donation_orchestrator import DonationOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["donations"])


@router.post(
    "/donations", response_model=DonationReceipt,
    status_code=status.HTTP_201_CREATED,
)
async def donate(
    body: DonationCreate,
    caller: Address = Depends(get_caller_address),
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
    registry: TokenReader = Depends(get_token_reader),
):
    """Transfer funds to the charity and mint a donation token."""
    token_id = await orchestrator.donate(caller, body.amount)
    return DonationReceipt(
        token_id=token_id,
        donor=caller,
        amount=str(body.amount),
        locator=await registry.locator_of(token_id),
    )


@router.post(
    "/donations/verifications", response_model=VerificationReceipt,
    status_code=status.HTTP_201_CREATED,
)
async def verify_donation(
    body: VerificationCreate,
    caller: Address = Depends(get_caller_address),
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
    registry: TokenReader = Depends(get_token_reader),
):
    """Verify a proof-of-payment and mint an invoice token."""
    token_id = await orchestrator.verify_donation(
        caller, body.proof.to_proof_data(), body.invoice_id,
    )
    return VerificationReceipt(
        token_id=token_id,
        donor=caller,
        invoice_id=body.invoice_id,
        locator=await registry.locator_of(token_id),
    )


@router.get("/donations", response_model=AllDonationsResponse)
async def get_all_donations(
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
):
    """Every donor with their latest amount and verification flag."""
    donors, amounts, verified = await orchestrator.get_all_donations()
    return AllDonationsResponse(
        donors=donors,
        amounts=[str(a) for a in amounts],
        verified=verified,
    )


@router.get("/donations/{donor}", response_model=DonorSummary)
async def get_donor(
    donor: str,
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
    registry: TokenReader = Depends(get_token_reader),
):
    """Latest record, lifecycle status and cumulative total for one donor."""
    donor = validate_address(donor)
    record = await orchestrator.get_record(donor)
    return DonorSummary(
        donor=donor,
        status=await orchestrator.get_donor_status(donor),
        latest_amount=str(record.amount if record else 0),
        verified=bool(record and record.verified),
        invoice_id=record.invoice_id if record else None,
        cumulative_total=str(await orchestrator.get_donations(donor)),
        invoice_token_id=await orchestrator.get_invoice_token(donor),
        token_ids=await registry.tokens_of(donor),
    )


@router.get("/donations/{donor}/total", response_model=DonorTotalResponse)
async def get_donations(
    donor: str,
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
):
    """Cumulative total of every donation the donor has made."""
    donor = validate_address(donor)
    total = await orchestrator.get_donations(donor)
    return DonorTotalResponse(donor=donor, total=str(total))


@router.get(
    "/donations/{donor}/invoice-token", response_model=InvoiceTokenResponse,
)
async def get_invoice_token(
    donor: str,
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
):
    """Token id of the donor's most recent invoice token."""
    donor = validate_address(donor)
    token_id = await orchestrator.get_invoice_token(donor)
    if token_id is None:
        raise ResourceNotFoundError("Invoice token for donor", donor)
    return InvoiceTokenResponse(donor=donor, token_id=token_id)


@router.get("/events", response_model=list[LedgerEventResponse])
async def list_events(
    donor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    orchestrator: DonationOrchestrator = Depends(get_orchestrator),
):
    """Donation and verification events in emission order."""
    events = await orchestrator.list_events(donor, limit=limit, offset=offset)
    return [
        LedgerEventResponse(
            event_type=e.event_type,
            donor=e.donor,
            token_id=e.token_id,
            amount=str(e.amount) if e.amount is not None else None,
            invoice_id=e.invoice_id,
            created_at=e.created_at,
        )
        for e in events
    ]
