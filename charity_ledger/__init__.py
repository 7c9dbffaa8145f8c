"""Charity Ledger — donation ledger with a one-token-per-event issuance registry.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
