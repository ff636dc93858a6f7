"""Services Layer — stateful orchestration around the pure core.

Invariants:
    - Services own all awaits; core/ stays synchronous and pure
    - Sync failures never escape a service boundary into the editing/loading flow

Design Decisions:
    - Collaborators injected through core/repository_protocols.py
"""
