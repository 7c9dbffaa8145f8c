"""API Dependencies — per-request wiring of services from settings and singletons.

Invariants:
    - Caller identity comes from the X-Caller-Address header, canonicalized and
      never the zero address
    - TokenRegistry, DonationLedger and DonationOrchestrator share one AsyncSession
    - Routes receive the registry as TokenReader or RegistryAdmin; only the
      orchestrator is handed the TokenMinter
    - Proof verifier is built once at startup and reused by every request

Design Decisions:
    - Plain Depends() functions over a DI container: every wire visible here
    - Verifier singleton follows the payment rail lifecycle (init on startup,
      RuntimeError if a request arrives first)
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from charity_ledger.config import Settings, get_settings
from charity_ledger.core.charity import CharityDescriptor
from charity_ledger.core.domain_types import Address
from charity_ledger.core.enforce_donation import validate_owner
from charity_ledger.core.proof_verifier import ProofVerifier, build_proof_verifier
from charity_ledger.core.repository_protocols import (
    PaymentRail, RegistryAdmin, TokenMinter, TokenReader,
)
from charity_ledger.infrastructure.database import get_db
from charity_ledger.infrastructure.payment_rail import get_payment_rail
from charity_ledger.services.donation_ledger import DonationLedger
from charity_ledger.services.donation_orchestrator import DonationOrchestrator
from charity_ledger.services.donor_locks import donor_locks
from charity_ledger.services.token_registry import TokenRegistry


def get_caller_address(
    x_caller_address: str | None = Header(default=None),
) -> Address:
    """Identity the caller acts as; missing, malformed or zero → INVALID_ADDRESS."""
    return validate_owner(x_caller_address)


def build_charity_descriptor(settings: Settings) -> CharityDescriptor:
    return CharityDescriptor(
        link=settings.charity_link,
        registered_at=settings.charity_registered_at,
        name=settings.charity_name,
        foundation=settings.charity_foundation,
        source=settings.charity_source,
        suggested_price=settings.charity_suggested_price,
        image_locator=settings.charity_image_locator,
        payout_address=settings.charity_payout_address,
    )


def get_charity() -> CharityDescriptor:
    return build_charity_descriptor(get_settings())


# Singleton (initialized on startup)
proof_verifier: ProofVerifier | None = None


def init_proof_verifier(name: str) -> ProofVerifier:
    global proof_verifier
    proof_verifier = build_proof_verifier(name)
    return proof_verifier


def get_proof_verifier() -> ProofVerifier:
    if not proof_verifier:
        raise RuntimeError("Proof verifier not initialized")
    return proof_verifier


def get_token_registry(db: AsyncSession = Depends(get_db)) -> TokenRegistry:
    """Concrete registry; routes only see it through the narrower protocols."""
    settings = get_settings()
    return TokenRegistry(
        db, admin_address=settings.admin_address,
        default_base_locator=settings.base_locator,
    )


def get_token_reader(
    registry: TokenRegistry = Depends(get_token_registry),
) -> TokenReader:
    return registry


def get_registry_admin(
    registry: TokenRegistry = Depends(get_token_registry),
) -> RegistryAdmin:
    return registry


def get_donation_ledger(db: AsyncSession = Depends(get_db)) -> DonationLedger:
    return DonationLedger(db)


def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    registry: TokenMinter = Depends(get_token_registry),
    ledger: DonationLedger = Depends(get_donation_ledger),
    rail: PaymentRail = Depends(get_payment_rail),
    verifier: ProofVerifier = Depends(get_proof_verifier),
    charity: CharityDescriptor = Depends(get_charity),
) -> DonationOrchestrator:
    return DonationOrchestrator(
        db, registry, ledger, rail, verifier, charity, donor_locks,
    )
