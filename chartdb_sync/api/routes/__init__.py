"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes never contain sync business logic beyond the stale-push check

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
