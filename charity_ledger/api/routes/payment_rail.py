"""Payment Rail Routes — fund and authorize accounts on the simulated rail.

Invariants:
    - Callers only fund or authorize their own account (X-Caller-Address)
    - Allowances are always granted to the charity payout address

Design Decisions:
    - Exists so the donate flow is exercisable end to end without an external
      rail; a real rail replaces SimulatedPaymentRail and these routes go away
"""

import logging

from fastapi import APIRouter, Depends, status

from charity_ledger.api.dependencies import get_caller_address, get_charity
from charity_ledger.core.charity import CharityDescriptor
from charity_ledger.core.domain_types import Address, Amount
from charity_ledger.core.enforce_donation import validate_address
from charity_ledger.infrastructure.payment_rail import (
    SimulatedPaymentRail, get_payment_rail,
)
from charity_ledger.schemas.payment_rail import (
    AllowanceCreate, CreditCreate, RailAccountResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payment-rail", tags=["payment-rail"])


def _account(
    rail: SimulatedPaymentRail, address: Address, charity: CharityDescriptor,
) -> RailAccountResponse:
    payee = Address(charity.payout_address)
    return RailAccountResponse(
        address=address,
        balance=str(rail.balance_of(address)),
        allowance_to_charity=str(rail.allowance(address, payee)),
    )


@router.post(
    "/credits", response_model=RailAccountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def credit(
    body: CreditCreate,
    caller: Address = Depends(get_caller_address),
    rail: SimulatedPaymentRail = Depends(get_payment_rail),
    charity: CharityDescriptor = Depends(get_charity),
):
    await rail.credit(caller, Amount(body.amount))
    logger.info("Rail account credited", extra={"donor": caller, "amount": str(body.amount)})
    return _account(rail, caller, charity)


@router.post(
    "/allowances", response_model=RailAccountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def approve(
    body: AllowanceCreate,
    caller: Address = Depends(get_caller_address),
    rail: SimulatedPaymentRail = Depends(get_payment_rail),
    charity: CharityDescriptor = Depends(get_charity),
):
    await rail.approve(caller, Address(charity.payout_address), Amount(body.amount))
    return _account(rail, caller, charity)


@router.get("/accounts/{address}", response_model=RailAccountResponse)
async def get_account(
    address: str,
    rail: SimulatedPaymentRail = Depends(get_payment_rail),
    charity: CharityDescriptor = Depends(get_charity),
):
    return _account(rail, validate_address(address), charity)
