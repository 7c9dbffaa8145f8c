"""Infrastructure Layer — database sessions, logging and the payment rail.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Every external failure mapped to a typed error from core/errors.py
"""
