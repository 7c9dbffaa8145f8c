"""Token Schemas — read models for minted tokens and the base-locator update."""

from datetime import datetime

from pydantic import BaseModel, Field

from charity_ledger.core.domain_types import TokenKind


class TokenResponse(BaseModel):
    token_id: int
    owner: str
    kind: TokenKind
    locator: str
    minted_at: datetime


class BaseLocatorUpdate(BaseModel):
    """Administrator request to relocate the metadata content service."""
    base_locator: str = Field(max_length=2000)


class BaseLocatorResponse(BaseModel):
    base_locator: str
