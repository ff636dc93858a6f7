"""Infrastructure Layer — the remote sync client, local storage and logging.

Invariants:
    - Infrastructure never imports from services/
    - All external failures mapped to the typed errors in core/errors.py

Design Decisions:
    - Thin wrappers over httpx and SQLAlchemy: services see domain types only
"""
