"""Donation Rules — pure validation of amounts, owners and invoice ids.

Invariants:
    - Validators raise typed errors and never mutate anything
    - A validated amount satisfies 0 < amount <= MAX_AMOUNT
    - A validated owner is a canonical, non-zero address

Design Decisions:
    - Raise instead of returning error dicts: callers are services that abort
      the whole unit of work on the first violation
"""

from charity_ledger.core.domain_types import (
    Address, Amount, MAX_AMOUNT, is_valid_address, is_zero_address, normalize_address,
)
from charity_ledger.core.errors import (
    ErrorContext, InvalidAddressError, InvalidAmountError,
)


def validate_amount(amount: int, donor: str | None = None) -> Amount:
    """Require a positive u256 integer amount."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, ErrorContext(donor=donor))
    if amount <= 0 or amount > MAX_AMOUNT:
        raise InvalidAmountError(amount, ErrorContext(donor=donor))
    return Amount(amount)


def validate_address(address: str | None) -> Address:
    """Require a well-formed address; returns the canonical form."""
    if address is None or not is_valid_address(address):
        raise InvalidAddressError(address)
    return normalize_address(address)


def validate_owner(owner: str | None) -> Address:
    """Require a well-formed, non-zero address (tokens cannot be owned by zero)."""
    canonical = validate_address(owner)
    if is_zero_address(canonical):
        raise InvalidAddressError(owner)
    return canonical
