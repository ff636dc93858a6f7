"""Core Layer — pure domain logic, no IO, no network, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure; the only clock reads are injectable defaults

Design Decisions:
    - Functional core separated from imperative shell: the codec and the load
      guard are testable without mocks, the shell owns all awaits
"""
