"""Donor State Machine — derives a donor's lifecycle state from their record.

Invariants:
    - derive_status is PURE: reads record fields, never mutates
    - verified wins over amount: a verified zero-amount record is VERIFIED
    - A second donation always lands in DONATED (record overwrite clears verified)
"""

from charity_ledger.core.domain_types import DonorStatus


def derive_status(amount: int | None, verified: bool | None) -> DonorStatus:
    """Map the stored (amount, verified) pair to a lifecycle state."""
    if verified:
        return DonorStatus.VERIFIED
    if amount:
        return DonorStatus.DONATED
    return DonorStatus.NO_DONATION
