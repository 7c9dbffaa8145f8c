"""Token Routes — read-only token lookups and the administrator base-locator update.

Invariants:
    - No mint route exists: tokens are only minted by the donation orchestrator
    - PUT /base-locator restricted to the configured administrator (403 otherwise)
    - Locators always reflect the base at request time

Design Decisions:
    - /base-locator declared before /{token_id} so the literal path wins
"""

import logging

from fastapi import APIRouter, Depends

from charity_ledger.api.dependencies import (
    get_caller_address, get_registry_admin, get_token_reader,
)
from charity_ledger.core.domain_types import Address
from charity_ledger.core.repository_protocols import RegistryAdmin, TokenReader
from charity_ledger.schemas.token import (
    BaseLocatorResponse, BaseLocatorUpdate, TokenResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tokens", tags=["tokens"])


@router.get("/base-locator", response_model=BaseLocatorResponse)
async def get_base_locator(
    registry: TokenReader = Depends(get_token_reader),
):
    return BaseLocatorResponse(base_locator=await registry.base_locator())


@router.put("/base-locator", response_model=BaseLocatorResponse)
async def set_base_locator(
    body: BaseLocatorUpdate,
    caller: Address = Depends(get_caller_address),
    registry: RegistryAdmin = Depends(get_registry_admin),
):
    """Relocate the metadata content service. Administrator only."""
    new_base = await registry.set_base_locator(caller, body.base_locator)
    return BaseLocatorResponse(base_locator=new_base)


@router.get("/{token_id}", response_model=TokenResponse)
async def get_token(
    token_id: int,
    registry: TokenReader = Depends(get_token_reader),
):
    """Owner, kind and current metadata locator of a minted token."""
    return TokenResponse(**await registry.get_token(token_id))
