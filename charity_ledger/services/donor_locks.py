"""Donor Locks — per-donor critical sections plus the registry-wide sequence lock.

Invariants:
    - At most one asyncio.Lock per donor address while anyone holds or awaits it
    - A donor's entry is dropped as soon as its last holder/waiter leaves
      (len() == 0 whenever no donor call is in flight)
    - A donor lock is held across the external call AND the local mutations
    - The sequence lock is held from the first ledger write through commit,
      so token ids are allocated atomically within the process
    - Lock order is always donor lock -> sequence lock (no deadlock)

Design Decisions:
    - Reference-counted entries: the key is caller-supplied, so the map must
      not outlive the calls that created it
    - Module-level singleton: single-process uvicorn, same trade-off as any
      in-memory coordination; multi-process deployments rely on the
      registry_state row lock instead
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator


@dataclass
class _DonorSlot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class DonorLockRegistry:
    """Hands out per-donor locks and the shared id-sequence lock."""

    def __init__(self):
        self._slots: dict[str, _DonorSlot] = {}
        self.sequence = asyncio.Lock()

    @asynccontextmanager
    async def hold(self, donor: str) -> AsyncIterator[None]:
        """Serialize work for `donor`; releases the entry when idle."""
        slot = self._slots.get(donor)
        if slot is None:
            slot = self._slots[donor] = _DonorSlot()
        slot.holders += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.holders -= 1
            if slot.holders == 0:
                del self._slots[donor]

    def __len__(self) -> int:
        return len(self._slots)


donor_locks = DonorLockRegistry()
