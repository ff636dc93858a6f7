"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Imported here so Base.metadata is complete before create_all runs
"""

from chartdb_sync.models.diagram_record import DiagramRecord  # noqa: F401
