"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The payment rail and the token registry are reached through Protocol types
    - Only the orchestrator holds a TokenMinter; routes get a TokenReader, and
      the base-locator update goes through RegistryAdmin

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Minting split from reading: there is no public mint entry point
    - runtime_checkable so wiring can be asserted against the concrete registry
"""

from datetime import datetime
from typing import Protocol, TypedDict, runtime_checkable

from charity_ledger.core.domain_types import Address, Amount, TokenId, TokenKind


class TokenView(TypedDict):
    token_id: int
    owner: str
    kind: TokenKind
    locator: str
    minted_at: datetime


@runtime_checkable
class PaymentRail(Protocol):
    """External rail moving the donated asset from donor to charity.

    transfer_from returns False when the payer has not authorized the transfer
    or lacks funds. refund reverses a completed transfer_from and returns False
    if the rail could not move the funds back.
    """
    async def transfer_from(
        self, payer: Address, payee: Address, amount: Amount,
    ) -> bool: ...
    async def refund(
        self, payer: Address, payee: Address, amount: Amount,
    ) -> bool: ...


@runtime_checkable
class TokenReader(Protocol):
    """Read-only view of the token registry."""
    async def owner_of(self, token_id: int) -> Address: ...
    async def locator_of(self, token_id: int) -> str: ...
    async def get_token(self, token_id: int) -> TokenView: ...
    async def tokens_of(self, owner: str) -> list[int]: ...
    async def donations_of(self, donor: str) -> Amount: ...
    async def invoice_token_of(self, donor: str) -> TokenId | None: ...
    async def base_locator(self) -> str: ...


@runtime_checkable
class RegistryAdmin(Protocol):
    """Administrator capability — relocating the metadata base."""
    async def base_locator(self) -> str: ...
    async def set_base_locator(self, caller: str | None, new_base: str) -> str: ...


@runtime_checkable
class TokenMinter(TokenReader, Protocol):
    """Minting capability — held exclusively by the donation orchestrator."""
    async def mint(self, owner: str, suffix: str) -> TokenId: ...
    async def record_donation(self, donor: str, amount: int) -> Amount: ...
    async def set_invoice_token(self, donor: str, token_id: TokenId) -> None: ...
