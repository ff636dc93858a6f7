"""Wire Codec — bidirectional mapping between Diagram and the remote camelCase JSON.

Invariants:
    - encode_diagram / decode_diagram are pure (the clock is an injectable default)
    - Encode emits a collection key only when the internal collection is not None
    - Encode omits optional scalars that are None (absent on the wire, absent internally)
    - Decode defaults table indexes to []; no other collection defaults to empty
    - Bare string field types normalize to FieldType(id=slug, name=original)
    - Missing nested createdAt backfills to now(), so decoded values may drift
      between decodes of the same payload (best-effort, not authoritative)
    - Malformed payloads raise SyncDecodeError; well-formed input never raises

Design Decisions:
    - Plain dicts over pydantic wire models: the diagram body is forwarded
      as-is by the client and stored as-is by the endpoint, no second schema
    - Nested createdAt accepts epoch milliseconds as well as ISO strings:
      older payloads carry the numeric form
"""

import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from chartdb_sync.core.diagram import (
    Area, CustomType, CustomTypeField, Dependency, Diagram, Field, FieldType,
    Index, Note, Relationship, Table,
)
from chartdb_sync.core.domain_types import (
    Cardinality, CustomTypeKind, DatabaseType,
)
from chartdb_sync.core.errors import SyncDecodeError

Clock = Callable[[], datetime]

_WHITESPACE = re.compile(r"\s+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─── Timestamps ──────────────────────────────────────────────────

def format_timestamp(value: datetime) -> str:
    """ISO-8601 with a Z suffix; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """ISO string or epoch milliseconds → aware UTC datetime."""
    if isinstance(value, bool):
        raise SyncDecodeError(f"invalid timestamp {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if not isinstance(value, str):
        raise SyncDecodeError(f"invalid timestamp {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise SyncDecodeError(f"invalid timestamp {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_timestamp(value: Any, now: Clock) -> datetime:
    # 0 and "" count as missing, matching the numeric-falsy backfill upstream
    if not value:
        return now()
    return parse_timestamp(value)


# ─── Field types ─────────────────────────────────────────────────

def normalize_field_type(raw: Any) -> FieldType:
    """'VARCHAR' → FieldType('varchar', 'VARCHAR'); {id, name} passes through."""
    if isinstance(raw, str):
        return FieldType(id=_WHITESPACE.sub("_", raw.lower()), name=raw)
    if isinstance(raw, dict) and "id" in raw and "name" in raw:
        return FieldType(id=raw["id"], name=raw["name"])
    raise SyncDecodeError(f"invalid field type {raw!r}")


# ─── Encode ──────────────────────────────────────────────────────

def _compact(payload: dict) -> dict:
    return {k: v for k, v in payload.items() if v is not None}


def _encode_field(f: Field) -> dict:
    return _compact({
        "id": f.id,
        "name": f.name,
        "type": {"id": f.type.id, "name": f.type.name},
        "primaryKey": f.primary_key,
        "unique": f.unique,
        "nullable": f.nullable,
        "createdAt": format_timestamp(f.created_at),
        "check": f.check,
        "default": f.default,
        "collation": f.collation,
        "comments": f.comments,
    })


def _encode_table(t: Table, diagram_id: str) -> dict:
    return _compact({
        "id": t.id,
        "diagramId": diagram_id,
        "name": t.name,
        "schema": t.schema,
        "x": t.x,
        "y": t.y,
        "color": t.color,
        "isView": t.is_view,
        "createdAt": format_timestamp(t.created_at),
        "fields": [_encode_field(f) for f in t.fields],
        "indexes": [
            {
                "id": i.id, "name": i.name, "unique": i.unique,
                "fieldIds": list(i.field_ids),
            }
            for i in t.indexes
        ],
        "comments": t.comments,
    })


def _encode_relationship(r: Relationship, diagram_id: str) -> dict:
    return {
        "id": r.id,
        "diagramId": diagram_id,
        "name": r.name,
        "sourceTableId": r.source_table_id,
        "targetTableId": r.target_table_id,
        "sourceFieldId": r.source_field_id,
        "targetFieldId": r.target_field_id,
        "sourceCardinality": r.source_cardinality.value,
        "targetCardinality": r.target_cardinality.value,
        "createdAt": format_timestamp(r.created_at),
    }


def _encode_dependency(d: Dependency, diagram_id: str) -> dict:
    return {
        "id": d.id,
        "diagramId": diagram_id,
        "tableId": d.table_id,
        "dependentTableId": d.dependent_table_id,
        "createdAt": format_timestamp(d.created_at),
    }


def _encode_area(a: Area, diagram_id: str) -> dict:
    return {
        "id": a.id, "diagramId": diagram_id, "name": a.name,
        "x": a.x, "y": a.y, "width": a.width, "height": a.height,
        "color": a.color,
    }


def _encode_custom_type(ct: CustomType, diagram_id: str) -> dict:
    fields = None
    if ct.fields is not None:
        fields = [{"field": f.field, "type": f.type} for f in ct.fields]
    encoded = _compact({
        "id": ct.id,
        "diagramId": diagram_id,
        "name": ct.name,
        "schema": ct.schema,
        "kind": ct.kind.value,
    })
    # fields is nullable on the wire, so None is sent explicitly
    encoded["fields"] = fields
    return encoded


def _encode_note(n: Note, diagram_id: str) -> dict:
    return {
        "id": n.id, "diagramId": diagram_id, "content": n.content,
        "x": n.x, "y": n.y, "width": n.width, "height": n.height,
        "color": n.color,
    }


def encode_diagram(diagram: Diagram) -> dict:
    """Diagram → camelCase wire body."""
    did = diagram.id
    encoded = _compact({
        "id": did,
        "name": diagram.name,
        "databaseType": diagram.database_type.value,
        "databaseEdition": diagram.database_edition,
        "createdAt": format_timestamp(diagram.created_at),
        "updatedAt": format_timestamp(diagram.updated_at),
    })
    if diagram.tables is not None:
        encoded["tables"] = [_encode_table(t, did) for t in diagram.tables]
    if diagram.relationships is not None:
        encoded["relationships"] = [
            _encode_relationship(r, did) for r in diagram.relationships
        ]
    if diagram.dependencies is not None:
        encoded["dependencies"] = [
            _encode_dependency(d, did) for d in diagram.dependencies
        ]
    if diagram.areas is not None:
        encoded["areas"] = [_encode_area(a, did) for a in diagram.areas]
    if diagram.custom_types is not None:
        encoded["customTypes"] = [
            _encode_custom_type(ct, did) for ct in diagram.custom_types
        ]
    if diagram.notes is not None:
        encoded["notes"] = [_encode_note(n, did) for n in diagram.notes]
    return encoded


# ─── Decode ──────────────────────────────────────────────────────

def _decode_field(data: dict, now: Clock) -> Field:
    return Field(
        id=data["id"],
        name=data["name"],
        type=normalize_field_type(data["type"]),
        primary_key=data["primaryKey"],
        unique=data["unique"],
        nullable=data["nullable"],
        created_at=_optional_timestamp(data.get("createdAt"), now),
        check=data.get("check"),
        default=data.get("default"),
        collation=data.get("collation"),
        comments=data.get("comments"),
    )


def _decode_table(data: dict, now: Clock) -> Table:
    return Table(
        id=data["id"],
        name=data["name"],
        schema=data.get("schema"),
        x=data["x"],
        y=data["y"],
        color=data["color"],
        is_view=data["isView"],
        created_at=_optional_timestamp(data.get("createdAt"), now),
        fields=[_decode_field(f, now) for f in data["fields"]],
        indexes=[
            Index(
                id=i["id"], name=i["name"], unique=i["unique"],
                field_ids=list(i["fieldIds"]),
            )
            for i in data.get("indexes") or []
        ],
        comments=data.get("comments"),
    )


def _decode_relationship(data: dict, now: Clock) -> Relationship:
    return Relationship(
        id=data["id"],
        name=data["name"],
        source_table_id=data["sourceTableId"],
        target_table_id=data["targetTableId"],
        source_field_id=data["sourceFieldId"],
        target_field_id=data["targetFieldId"],
        source_cardinality=Cardinality(data["sourceCardinality"]),
        target_cardinality=Cardinality(data["targetCardinality"]),
        created_at=_optional_timestamp(data.get("createdAt"), now),
    )


def _decode_dependency(data: dict, now: Clock) -> Dependency:
    return Dependency(
        id=data["id"],
        table_id=data["tableId"],
        dependent_table_id=data["dependentTableId"],
        created_at=_optional_timestamp(data.get("createdAt"), now),
    )


def _decode_area(data: dict) -> Area:
    return Area(
        id=data["id"], name=data["name"], x=data["x"], y=data["y"],
        width=data["width"], height=data["height"], color=data["color"],
    )


def _decode_custom_type(data: dict) -> CustomType:
    fields = data.get("fields")
    return CustomType(
        id=data["id"],
        name=data["name"],
        schema=data.get("schema"),
        kind=CustomTypeKind(data["kind"]),
        fields=(
            None if fields is None
            else [CustomTypeField(field=f["field"], type=f["type"]) for f in fields]
        ),
    )


def _decode_note(data: dict) -> Note:
    return Note(
        id=data["id"], content=data["content"], x=data["x"], y=data["y"],
        width=data["width"], height=data["height"], color=data["color"],
    )


def _decode_list(data: dict, key: str, decode_one: Callable[[dict], Any]):
    items = data.get(key)
    if items is None:
        return None
    return [decode_one(item) for item in items]


def decode_diagram(data: dict, now: Clock = _utcnow) -> Diagram:
    """camelCase wire body → Diagram. Raises SyncDecodeError on malformed input."""
    try:
        return Diagram(
            id=data["id"],
            name=data["name"],
            database_type=DatabaseType(data["databaseType"]),
            database_edition=data.get("databaseEdition"),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
            tables=_decode_list(data, "tables", lambda t: _decode_table(t, now)),
            relationships=_decode_list(
                data, "relationships", lambda r: _decode_relationship(r, now),
            ),
            dependencies=_decode_list(
                data, "dependencies", lambda d: _decode_dependency(d, now),
            ),
            areas=_decode_list(data, "areas", _decode_area),
            custom_types=_decode_list(data, "customTypes", _decode_custom_type),
            notes=_decode_list(data, "notes", _decode_note),
        )
    except SyncDecodeError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise SyncDecodeError(f"{type(e).__name__}: {e}")
