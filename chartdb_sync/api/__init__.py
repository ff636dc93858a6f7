"""API Layer — reference sync endpoint (FastAPI routes and error handlers).

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Wire shapes match what RemoteSyncClient sends and expects

Design Decisions:
    - Thin routes delegate to the catalog and the codec
"""
