"""Donation Schemas — Pydantic models for the donation and verification endpoints.

Invariants:
    - Amounts leave the API as decimal strings (u256 exceeds JSON-safe integers)
    - Amounts enter as integers or decimal strings; sign/range checked by core
    - ProofPayload mirrors core ProofData shape; zero proofs pass validation and
      are rejected by the verifier, not by the schema

Design Decisions:
    - Amount range NOT enforced here: InvalidAmountError must surface as
      INVALID_AMOUNT, not as a generic VALIDATION_ERROR
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from charity_ledger.core.domain_types import DonorStatus
from charity_ledger.core.proof_verifier import ProofData


class DonationCreate(BaseModel):
    """Donation request — the donor is the caller."""
    amount: int


class DonationReceipt(BaseModel):
    token_id: int
    donor: str
    amount: str
    locator: str


class ProofPayload(BaseModel):
    """Groth16-shaped proof-of-payment."""
    a: tuple[int, int]
    b: tuple[tuple[int, int], tuple[int, int]]
    c: tuple[int, int]
    inputs: list[int] = Field(default_factory=list, max_length=64)

    def to_proof_data(self) -> ProofData:
        return ProofData(a=self.a, b=self.b, c=self.c, inputs=tuple(self.inputs))


class VerificationCreate(BaseModel):
    """Verification request — proof of payment plus the invoice it settles."""
    proof: ProofPayload
    invoice_id: str = Field(min_length=1, max_length=200)

    @field_validator("invoice_id")
    @classmethod
    def strip_invoice_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("invoice_id cannot be empty or whitespace")
        return v


class VerificationReceipt(BaseModel):
    token_id: int
    donor: str
    invoice_id: str
    locator: str


class AllDonationsResponse(BaseModel):
    """Parallel arrays in roster insertion order."""
    donors: list[str]
    amounts: list[str]
    verified: list[bool]


class DonorSummary(BaseModel):
    donor: str
    status: DonorStatus
    latest_amount: str
    verified: bool
    invoice_id: str | None = None
    cumulative_total: str
    invoice_token_id: int | None = None
    token_ids: list[int] = []


class DonorTotalResponse(BaseModel):
    donor: str
    total: str


class InvoiceTokenResponse(BaseModel):
    donor: str
    token_id: int


class LedgerEventResponse(BaseModel):
    event_type: str
    donor: str
    token_id: int
    amount: str | None = None
    invoice_id: str | None = None
    created_at: datetime
