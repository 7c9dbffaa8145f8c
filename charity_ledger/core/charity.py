"""Charity Descriptor — static description of the single charity this ledger serves.

Invariants:
    - Set once at startup, never mutated at runtime (frozen dataclass)
    - payout_address is where every donation transfer lands
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class CharityDescriptor:
    link: str
    registered_at: str
    name: str
    foundation: str
    source: str
    suggested_price: int
    image_locator: str
    payout_address: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["suggested_price"] = str(self.suggested_price)
        return data
