"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Address is always canonical: lower-case "0x" + 40 hex digits
    - TokenId is zero-based and never reused
    - Amount is expressed in the smallest indivisible unit, 0 <= amount < 2**256
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

import re
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Address = NewType("Address", str)
TokenId = NewType("TokenId", int)


# ─── Value Types ─────────────────────────────────────────────────

Amount = NewType("Amount", int)            # smallest unit of the payment asset

MAX_AMOUNT: int = 2**256 - 1
ZERO_ADDRESS = Address("0x" + "0" * 40)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_address(value: object) -> bool:
    """True for a well-formed 0x-prefixed 20-byte hex address."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value.strip()))


def normalize_address(value: str) -> Address:
    """Canonical lower-case form. Raises ValueError for malformed input."""
    if not is_valid_address(value):
        raise ValueError(f"malformed address: {value!r}")
    return Address(value.strip().lower())


def is_zero_address(value: object) -> bool:
    """Zero sentinel: None, empty string or the all-zero address."""
    if value is None or value == "":
        return True
    if not is_valid_address(value):
        return False
    return int(str(value).strip()[2:], 16) == 0


# ─── Enums ───────────────────────────────────────────────────────

class TokenKind(str, Enum):
    """What a token commemorates — maps to DB `kind` column."""
    DONATION = "donation"
    INVOICE = "invoice"


class DonorStatus(str, Enum):
    """Per-donor lifecycle: no_donation -> donated -> verified."""
    NO_DONATION = "no_donation"
    DONATED = "donated"
    VERIFIED = "verified"


class LedgerEventType(str, Enum):
    """Event kinds appended to the ledger event log."""
    DONATION = "donation"
    VERIFICATION = "verification"
