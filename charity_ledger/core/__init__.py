"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Protocols describe the shell's IO boundaries; core never implements them with IO

Design Decisions:
    - Functional core separated from imperative shell
"""
