"""Services Layer — token registry, donation ledger and the orchestrator.

Invariants:
    - Services share one AsyncSession per unit of work
    - Only DonationOrchestrator commits ledger/registry mutations
      (set_base_locator is the single self-committing admin operation)
"""
