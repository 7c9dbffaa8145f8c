"""Simulated Payment Rail — in-process balances and allowances with transferFrom semantics.

Invariants:
    - transfer_from moves funds only if allowance[payer][payee] >= amount
      AND balance[payer] >= amount; otherwise returns False and changes nothing
    - A successful transfer decrements the allowance and moves the balance atomically
    - auto_approve mode accepts every positive transfer (development only)
    - refund() is the exact inverse of a successful transfer_from

Design Decisions:
    - Stands in for the real rail behind the PaymentRail protocol; the ledger
      core never sees balances or allowances
    - Singleton initialized on startup, same lifecycle as db_manager
"""

import asyncio
import logging
from collections import defaultdict

from charity_ledger.core.domain_types import Address, Amount

logger = logging.getLogger(__name__)


class SimulatedPaymentRail:
    """ERC-20 style approve/transferFrom rail held in memory."""

    def __init__(self, auto_approve: bool = False):
        self.auto_approve = auto_approve
        self._balances: dict[str, int] = defaultdict(int)
        self._allowances: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = asyncio.Lock()

    async def credit(self, account: Address, amount: Amount) -> int:
        """Fund `account` (stands in for an external deposit)."""
        async with self._lock:
            self._balances[account] += amount
            return self._balances[account]

    async def approve(self, payer: Address, payee: Address, amount: Amount) -> int:
        """Set how much `payee` may pull from `payer` (overwrites, like ERC-20)."""
        async with self._lock:
            self._allowances[(payer, payee)] = amount
            return amount

    def balance_of(self, account: Address) -> int:
        return self._balances.get(account, 0)

    def allowance(self, payer: Address, payee: Address) -> int:
        return self._allowances.get((payer, payee), 0)

    async def transfer_from(
        self, payer: Address, payee: Address, amount: Amount,
    ) -> bool:
        if amount <= 0:
            return False
        async with self._lock:
            if self.auto_approve:
                self._balances[payee] += amount
                return True
            if self._allowances.get((payer, payee), 0) < amount:
                logger.info(
                    "Transfer declined: insufficient allowance",
                    extra={"donor": payer, "amount": str(amount)},
                )
                return False
            if self._balances.get(payer, 0) < amount:
                logger.info(
                    "Transfer declined: insufficient balance",
                    extra={"donor": payer, "amount": str(amount)},
                )
                return False
            self._allowances[(payer, payee)] -= amount
            self._balances[payer] -= amount
            self._balances[payee] += amount
            return True

    async def refund(
        self, payer: Address, payee: Address, amount: Amount,
    ) -> bool:
        """Reverse a completed transfer_from, restoring balance and allowance."""
        if amount <= 0:
            return False
        async with self._lock:
            if self._balances.get(payee, 0) < amount:
                logger.error(
                    "Refund failed: payee balance below refund amount",
                    extra={"donor": payer, "amount": str(amount)},
                )
                return False
            self._balances[payee] -= amount
            if not self.auto_approve:
                self._balances[payer] += amount
                self._allowances[(payer, payee)] += amount
            return True


# Singleton (initialized on startup)
payment_rail: SimulatedPaymentRail | None = None


def init_payment_rail(auto_approve: bool = False) -> SimulatedPaymentRail:
    global payment_rail
    payment_rail = SimulatedPaymentRail(auto_approve=auto_approve)
    return payment_rail


def get_payment_rail() -> SimulatedPaymentRail:
    """FastAPI dependency for the payment rail."""
    if not payment_rail:
        raise RuntimeError("Payment rail not initialized")
    return payment_rail
