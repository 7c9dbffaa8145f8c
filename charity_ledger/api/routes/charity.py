"""Charity Route — static descriptor of the charity this ledger serves."""

from fastapi import APIRouter, Depends

from charity_ledger.api.dependencies import get_charity
from charity_ledger.core.charity import CharityDescriptor

router = APIRouter(prefix="/api/v1/charity", tags=["charity"])


@router.get("")
async def get_charity_info(
    charity: CharityDescriptor = Depends(get_charity),
):
    return charity.to_dict()
