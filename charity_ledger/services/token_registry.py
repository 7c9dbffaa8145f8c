"""Token Registry — sequential id allocation, owner binding and metadata locators.

Invariants:
    - The k-th successful mint returns id k-1: dense, zero-based, never reused
    - next_token_id increments by exactly one per mint, inside the caller's transaction
    - Locators are computed at query time from the CURRENT base + the frozen suffix
    - Only the configured administrator may change the base locator
    - Minting methods flush but never commit: the orchestrator owns the unit of work

Design Decisions:
    - RegistryState row read with_for_update(): Postgres serializes concurrent
      allocators, SQLite ignores the clause and relies on its writer lock
    - Cumulative donation totals live here (registry side), not in the ledger
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from charity_ledger.core.domain_types import Address, Amount, TokenId, TokenKind
from charity_ledger.core.enforce_donation import (
    validate_address, validate_amount, validate_owner,
)
from charity_ledger.core.errors import TokenNotFoundError, UnauthorizedError
from charity_ledger.core.repository_protocols import TokenView
from charity_ledger.core.token_locator import build_locator, kind_of_suffix
from charity_ledger.models.donor_total import DonorTotal
from charity_ledger.models.invoice_token import InvoiceToken
from charity_ledger.models.registry_state import RegistryState, REGISTRY_STATE_ID
from charity_ledger.models.token import Token

logger = logging.getLogger(__name__)


class TokenRegistry:
    """Registry of minted tokens backed by one AsyncSession."""

    def __init__(
        self, db: AsyncSession, admin_address: str, default_base_locator: str = "",
    ):
        self.db = db
        self._admin = validate_address(admin_address)
        self._default_base = default_base_locator

    # ─── registry state ──────────────────────────────────────────

    async def _state(self, for_update: bool = False) -> RegistryState:
        """Load the singleton state row, creating it on first use."""
        query = select(RegistryState).where(RegistryState.id == REGISTRY_STATE_ID)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        state = result.scalar_one_or_none()
        if state is None:
            state = RegistryState(
                id=REGISTRY_STATE_ID, next_token_id=0,
                base_locator=self._default_base,
            )
            self.db.add(state)
            await self.db.flush()
        return state

    async def next_token_id(self) -> int:
        return (await self._state()).next_token_id

    async def base_locator(self) -> str:
        return (await self._state()).base_locator

    async def set_base_locator(self, caller: str | None, new_base: str) -> str:
        """Replace the registry-wide base. Administrator only; commits."""
        if caller is None or validate_address(caller) != self._admin:
            raise UnauthorizedError(caller, "set_base_locator")
        state = await self._state(for_update=True)
        previous = state.base_locator
        state.base_locator = new_base
        await self.db.commit()
        logger.info(f"Base locator changed from {previous!r} to {new_base!r}")
        return new_base

    # ─── minting (TokenMinter) ───────────────────────────────────

    async def mint(self, owner: str, suffix: str) -> TokenId:
        """Allocate the next id and bind it to `owner` with `suffix`."""
        owner = validate_owner(owner)
        state = await self._state(for_update=True)
        token_id = state.next_token_id
        state.next_token_id = token_id + 1
        self.db.add(Token(
            id=token_id, owner=owner,
            kind=kind_of_suffix(suffix).value, suffix=suffix,
        ))
        await self.db.flush()
        logger.debug(
            f"Minted token {token_id}",
            extra={"donor": owner, "token_id": token_id},
        )
        return TokenId(token_id)

    async def record_donation(self, donor: str, amount: int) -> Amount:
        """Add `amount` to the donor's cumulative total; returns the new total."""
        donor = validate_address(donor)
        amount = validate_amount(amount, donor)
        row = await self.db.get(DonorTotal, donor)
        if row is None:
            row = DonorTotal(donor=donor, total=0)
            self.db.add(row)
        row.total = (row.total or 0) + amount
        await self.db.flush()
        return Amount(row.total)

    async def set_invoice_token(self, donor: str, token_id: TokenId) -> None:
        """Point the donor's invoice slot at `token_id` (earlier tokens remain)."""
        donor = validate_address(donor)
        row = await self.db.get(InvoiceToken, donor)
        if row is None:
            self.db.add(InvoiceToken(donor=donor, token_id=token_id))
        else:
            row.token_id = token_id
        await self.db.flush()

    # ─── reads (TokenReader) ─────────────────────────────────────

    async def _token_or_404(self, token_id: int) -> Token:
        if token_id < 0 or token_id >= await self.next_token_id():
            raise TokenNotFoundError(token_id)
        token = await self.db.get(Token, token_id)
        if token is None:
            raise TokenNotFoundError(token_id)
        return token

    async def owner_of(self, token_id: int) -> Address:
        token = await self._token_or_404(token_id)
        return Address(token.owner)

    async def locator_of(self, token_id: int) -> str:
        """Locator derived from the current base; callers must not cache it."""
        token = await self._token_or_404(token_id)
        return build_locator(await self.base_locator(), token.id, token.suffix)

    async def get_token(self, token_id: int) -> TokenView:
        token = await self._token_or_404(token_id)
        return {
            "token_id": token.id,
            "owner": token.owner,
            "kind": TokenKind(token.kind),
            "locator": build_locator(
                await self.base_locator(), token.id, token.suffix,
            ),
            "minted_at": token.minted_at,
        }

    async def donations_of(self, donor: str) -> Amount:
        """Cumulative total of every donation recorded for `donor` (0 if none)."""
        row = await self.db.get(DonorTotal, validate_address(donor))
        return Amount(row.total if row else 0)

    async def invoice_token_of(self, donor: str) -> TokenId | None:
        row = await self.db.get(InvoiceToken, validate_address(donor))
        return TokenId(row.token_id) if row else None

    async def tokens_of(self, owner: str) -> list[int]:
        """Ids of every token bound to `owner`, ascending."""
        result = await self.db.execute(
            select(Token.id)
            .where(Token.owner == validate_address(owner))
            .order_by(Token.id),
        )
        return list(result.scalars().all())
