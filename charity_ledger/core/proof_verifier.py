"""Proof Verifier — pluggable capability gating the invoice-token path.

Invariants:
    - verify() NEVER raises: malformed input yields False
    - Zero/empty proof or zero/empty claimant always yields False
    - The orchestrator depends on the ProofVerifier protocol, never a concrete class

Design Decisions:
    - Protocol over ABC: a real succinct-proof verifier plugs in structurally
    - ProofData mirrors the Groth16 calldata shape (a, b, c, public inputs) so a
      real verifier can consume the same payload unchanged
    - Registry dict resolves the configured verifier name at startup, unknown
      names fail fast
"""

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from charity_ledger.core.domain_types import is_zero_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofData:
    """Groth16-shaped proof payload."""
    a: tuple[int, int]
    b: tuple[tuple[int, int], tuple[int, int]]
    c: tuple[int, int]
    inputs: tuple[int, ...] = ()

    def elements(self) -> list[int]:
        """Flatten every field element (raises on malformed shape)."""
        a0, a1 = self.a
        (b00, b01), (b10, b11) = self.b
        c0, c1 = self.c
        return [a0, a1, b00, b01, b10, b11, c0, c1, *self.inputs]


class ProofVerifier(Protocol):
    """Contract for proof-of-payment verification."""
    def verify(self, proof: ProofData | None, claimant: str | None) -> bool: ...


class MockProofVerifier:
    """Accepts any well-formed, non-zero proof from a non-zero claimant."""

    name = "mock"

    def verify(self, proof: ProofData | None, claimant: str | None) -> bool:
        if proof is None or is_zero_address(claimant):
            return False
        try:
            elements = proof.elements()
        except (TypeError, ValueError, AttributeError):
            logger.warning("Malformed proof payload rejected")
            return False
        if not all(isinstance(e, int) and not isinstance(e, bool) for e in elements):
            return False
        return any(e != 0 for e in elements)


VERIFIERS: dict[str, Callable[[], ProofVerifier]] = {
    MockProofVerifier.name: MockProofVerifier,
}


def build_proof_verifier(name: str) -> ProofVerifier:
    """Instantiate the verifier registered under `name`."""
    try:
        factory = VERIFIERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown proof verifier {name!r}; expected one of {sorted(VERIFIERS)}",
        ) from None
    return factory()
