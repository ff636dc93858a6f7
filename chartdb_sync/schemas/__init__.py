"""Pydantic Schemas — validation for the sync wire envelopes.

Invariants:
    - Schemas validate at system boundary (HTTP request and response bodies)
    - The diagram body itself is mapped by core/wire_codec.py, not here

Design Decisions:
    - Separate from models: schemas are wire contracts, models are persistence
"""
