"""Token Locators — pure formatting of metadata locators.

Invariants:
    - locator == base + str(token_id) + suffix, byte for byte
    - suffix is fixed at mint time; base is read at query time
    - amounts render as plain base-10 integers (no separators, no exponent)

Design Decisions:
    - Suffix stored per token, base stored once: relocating the content service
      is a single update, no re-minting
"""

from charity_ledger.core.domain_types import TokenKind


DONATION_QUERY_KEY = "donation"
INVOICE_QUERY_KEY = "invoiceId"
METADATA_EXTENSION = ".json"


def donation_suffix(amount: int) -> str:
    return f"{METADATA_EXTENSION}?{DONATION_QUERY_KEY}={int(amount)}"


def invoice_suffix(invoice_id: str) -> str:
    return f"{METADATA_EXTENSION}?{INVOICE_QUERY_KEY}={invoice_id}"


def build_locator(base: str, token_id: int, suffix: str) -> str:
    """Compose the metadata locator for a token."""
    return f"{base}{token_id}{suffix}"


def kind_of_suffix(suffix: str) -> TokenKind:
    """Infer the token kind from its stored suffix."""
    if suffix.startswith(f"{METADATA_EXTENSION}?{INVOICE_QUERY_KEY}="):
        return TokenKind.INVOICE
    return TokenKind.DONATION
