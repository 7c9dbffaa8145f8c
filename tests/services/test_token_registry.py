"""Token Registry — id allocation, locators, ownership, totals, base-locator admin.

Invariants:
    - k-th mint returns id k-1 with no gaps or repeats
    - locator_of reflects the CURRENT base with the frozen suffix
    - locator_of/owner_of raise TokenNotFoundError for unminted ids
    - Only the administrator may change the base locator
"""

import pytest
from sqlalchemy import BigInteger

from charity_ledger.core.domain_types import TokenKind, ZERO_ADDRESS
from charity_ledger.core.errors import (
    InvalidAddressError, InvalidAmountError, TokenNotFoundError, UnauthorizedError,
)
from charity_ledger.core.token_locator import donation_suffix, invoice_suffix
from charity_ledger.models.invoice_token import InvoiceToken
from charity_ledger.models.ledger_event import LedgerEvent
from charity_ledger.models.registry_state import REGISTRY_STATE_ID, RegistryState
from charity_ledger.models.token import Token
from tests.services.sample_data import ADMIN, ALICE, BOB


async def test_mint_ids_are_dense_and_zero_based(registry):
    ids = [await registry.mint(ALICE, donation_suffix(1)) for _ in range(5)]
    assert ids == [0, 1, 2, 3, 4]
    assert await registry.next_token_id() == 5


async def test_mint_binds_owner(registry):
    first = await registry.mint(ALICE, donation_suffix(1))
    second = await registry.mint(BOB, donation_suffix(2))
    assert await registry.owner_of(first) == ALICE
    assert await registry.owner_of(second) == BOB


async def test_mint_rejects_zero_owner(registry):
    with pytest.raises(InvalidAddressError):
        await registry.mint(ZERO_ADDRESS, donation_suffix(1))
    assert await registry.next_token_id() == 0


async def test_locator_round_trip(registry):
    token_id = await registry.mint(ALICE, donation_suffix(5000000000000000000))
    assert token_id == 0
    assert await registry.locator_of(0) == (
        "https://x/0.json?donation=5000000000000000000"
    )


async def test_invoice_token_locator(registry):
    await registry.mint(ALICE, donation_suffix(1))
    token_id = await registry.mint(ALICE, invoice_suffix("INV-1"))
    assert await registry.locator_of(token_id) == "https://x/1.json?invoiceId=INV-1"
    token = await registry.get_token(token_id)
    assert token["kind"] == TokenKind.INVOICE


async def test_base_locator_change_rederives_existing_locators(registry):
    await registry.mint(ALICE, donation_suffix(42))
    await registry.set_base_locator(ADMIN, "ipfs://new-root/")
    assert await registry.locator_of(0) == "ipfs://new-root/0.json?donation=42"
    assert await registry.base_locator() == "ipfs://new-root/"


async def test_base_locator_change_requires_admin(registry):
    await registry.mint(ALICE, donation_suffix(42))
    with pytest.raises(UnauthorizedError):
        await registry.set_base_locator(ALICE, "https://evil/")
    assert await registry.locator_of(0) == "https://x/0.json?donation=42"


async def test_base_locator_change_without_caller_is_unauthorized(registry):
    with pytest.raises(UnauthorizedError):
        await registry.set_base_locator(None, "https://evil/")


async def test_admin_comparison_is_case_insensitive(registry):
    await registry.set_base_locator(ADMIN.upper().replace("0X", "0x"), "https://y/")
    assert await registry.base_locator() == "https://y/"


@pytest.mark.parametrize("token_id", [0, 1, -1, 10**6])
async def test_lookup_of_unminted_token_raises(registry, token_id):
    with pytest.raises(TokenNotFoundError):
        await registry.locator_of(token_id)
    with pytest.raises(TokenNotFoundError):
        await registry.owner_of(token_id)


async def test_lookup_beyond_next_id_raises(registry):
    await registry.mint(ALICE, donation_suffix(1))
    with pytest.raises(TokenNotFoundError):
        await registry.locator_of(1)


async def test_record_donation_accumulates(registry):
    await registry.record_donation(ALICE, 1)
    total = await registry.record_donation(ALICE, 2)
    assert total == 3
    assert await registry.donations_of(ALICE) == 3
    assert await registry.donations_of(BOB) == 0


async def test_record_donation_rejects_zero(registry):
    with pytest.raises(InvalidAmountError):
        await registry.record_donation(ALICE, 0)
    assert await registry.donations_of(ALICE) == 0


async def test_record_donation_handles_u256_totals(registry, test_db):
    big = 2**255
    await registry.record_donation(ALICE, big)
    await registry.record_donation(ALICE, big - 1)
    await test_db.commit()
    test_db.expire_all()
    assert await registry.donations_of(ALICE) == 2**256 - 1


async def test_invoice_index_keeps_latest(registry):
    first = await registry.mint(ALICE, invoice_suffix("A"))
    await registry.set_invoice_token(ALICE, first)
    second = await registry.mint(ALICE, invoice_suffix("B"))
    await registry.set_invoice_token(ALICE, second)
    assert await registry.invoice_token_of(ALICE) == second
    # earlier invoice token still exists
    assert await registry.owner_of(first) == ALICE
    assert await registry.invoice_token_of(BOB) is None


async def test_tokens_of_lists_owner_tokens(registry):
    await registry.mint(ALICE, donation_suffix(1))
    await registry.mint(BOB, donation_suffix(1))
    await registry.mint(ALICE, invoice_suffix("X"))
    assert await registry.tokens_of(ALICE) == [0, 2]


async def test_token_ids_beyond_32_bits(registry, test_db):
    test_db.add(RegistryState(
        id=REGISTRY_STATE_ID, next_token_id=2**40, base_locator="https://x/",
    ))
    await test_db.flush()
    token_id = await registry.mint(ALICE, donation_suffix(1))
    assert token_id == 2**40
    assert await registry.owner_of(token_id) == ALICE
    assert await registry.next_token_id() == 2**40 + 1


def test_token_id_columns_are_64_bit():
    for column in (
        Token.__table__.c.id,
        RegistryState.__table__.c.next_token_id,
        InvoiceToken.__table__.c.token_id,
        LedgerEvent.__table__.c.token_id,
    ):
        assert isinstance(column.type, BigInteger)
