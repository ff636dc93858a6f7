"""Diagram Record ORM — one row per diagram, keyed by the stable diagram id.

Invariants:
    - id is the client-assigned diagram id (never generated here)
    - Catalog columns (name, database_type, timestamps) are always populated
    - body holds the wire-encoded diagram; NULL for catalog-only entries
      imported from a remote listing

Design Decisions:
    - JSON column for body: the wire encoding is stored as-is, decoded on load
    - Catalog columns denormalized out of body: listing never parses bodies
"""

from datetime import datetime

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from chartdb_sync.db.base import Base


class DiagramRecord(Base):
    """Persisted diagram: catalog projection plus optional body."""
    __tablename__ = "diagrams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    database_type: Mapped[str] = mapped_column(String(32), nullable=False)
    database_edition: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
    body: Mapped[dict | None] = mapped_column(JSON, nullable=True)
