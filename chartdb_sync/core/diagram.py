"""Diagram Model — immutable value types for a database diagram and its entities.

Invariants:
    - All entities are frozen: Diagram.id never changes after construction
    - Timestamps are timezone-aware UTC datetimes
    - Diagram collections are Optional: None means "absent", [] means "present but empty"
    - snapshot() is canonical: equal diagrams always produce equal strings

Design Decisions:
    - Dataclasses over pydantic here: the core has no validation boundary,
      the codec is the only place payloads become Diagrams
    - snapshot() uses sorted-key JSON so change detection ignores dict ordering
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum

from chartdb_sync.core.domain_types import (
    Cardinality, CustomTypeKind, DatabaseType,
)


@dataclass(frozen=True)
class FieldType:
    """Column type as an {id, name} pair."""
    id: str
    name: str


@dataclass(frozen=True)
class Field:
    id: str
    name: str
    type: FieldType
    primary_key: bool
    unique: bool
    nullable: bool
    created_at: datetime
    check: str | None = None
    default: str | None = None
    collation: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class Index:
    id: str
    name: str
    unique: bool
    field_ids: list[str]


@dataclass(frozen=True)
class Table:
    id: str
    name: str
    x: float
    y: float
    color: str
    is_view: bool
    created_at: datetime
    fields: list[Field]
    indexes: list[Index]
    schema: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class Relationship:
    id: str
    name: str
    source_table_id: str
    target_table_id: str
    source_field_id: str
    target_field_id: str
    source_cardinality: Cardinality
    target_cardinality: Cardinality
    created_at: datetime


@dataclass(frozen=True)
class Dependency:
    id: str
    table_id: str
    dependent_table_id: str
    created_at: datetime


@dataclass(frozen=True)
class Area:
    id: str
    name: str
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class Note:
    id: str
    content: str
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class CustomTypeField:
    field: str
    type: str


@dataclass(frozen=True)
class CustomType:
    id: str
    name: str
    kind: CustomTypeKind
    fields: list[CustomTypeField] | None = None
    schema: str | None = None


@dataclass(frozen=True)
class Diagram:
    """The full document: tables, relationships and annotations."""
    id: str
    name: str
    database_type: DatabaseType
    created_at: datetime
    updated_at: datetime
    database_edition: str | None = None
    tables: list[Table] | None = None
    relationships: list[Relationship] | None = None
    dependencies: list[Dependency] | None = None
    areas: list[Area] | None = None
    custom_types: list[CustomType] | None = None
    notes: list[Note] | None = None


@dataclass(frozen=True)
class DiagramListItem:
    """Catalog projection of a Diagram: no entity bodies."""
    id: str
    name: str
    database_type: DatabaseType
    created_at: datetime
    updated_at: datetime
    database_edition: str | None = None


def to_list_item(diagram: Diagram) -> DiagramListItem:
    return DiagramListItem(
        id=diagram.id,
        name=diagram.name,
        database_type=diagram.database_type,
        database_edition=diagram.database_edition,
        created_at=diagram.created_at,
        updated_at=diagram.updated_at,
    )


def from_list_item(item: DiagramListItem) -> Diagram:
    """Catalog-only Diagram: metadata set, every collection absent."""
    return Diagram(
        id=item.id,
        name=item.name,
        database_type=item.database_type,
        database_edition=item.database_edition,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Unserializable value in diagram: {type(value).__name__}")


def snapshot(diagram: Diagram) -> str:
    """Canonical serialization used as the sync change-detection baseline."""
    return json.dumps(
        asdict(diagram), sort_keys=True, default=_json_default,
        ensure_ascii=False,
    )
