"""Payment Rail Schemas — funding and authorization requests for the simulated rail."""

from pydantic import BaseModel, Field


class CreditCreate(BaseModel):
    amount: int = Field(gt=0, lt=2**256)


class AllowanceCreate(BaseModel):
    """Caller authorizes the charity payout address to pull up to `amount`."""
    amount: int = Field(ge=0, lt=2**256)


class RailAccountResponse(BaseModel):
    address: str
    balance: str
    allowance_to_charity: str
