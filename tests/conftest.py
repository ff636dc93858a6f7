"""Root conftest — shared test configuration and diagram builders."""

import os
from datetime import datetime, timezone

import pytest

# Tests never talk to a real sync endpoint or the working-directory database
os.environ.setdefault("SYNC_API_URL", "")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from chartdb_sync.core.diagram import (  # noqa: E402
    Area, CustomType, CustomTypeField, Dependency, Diagram, Field, FieldType,
    Index, Note, Relationship, Table,
)
from chartdb_sync.core.domain_types import (  # noqa: E402
    Cardinality, CustomTypeKind, DatabaseType,
)

T0 = datetime(2024, 3, 1, 9, 30, 0, 123000, tzinfo=timezone.utc)
T1 = datetime(2024, 3, 2, 18, 5, 42, 500000, tzinfo=timezone.utc)


def _full_diagram(diagram_id: str = "d1", name: str = "Shop") -> Diagram:
    id_field = Field(
        id="f1", name="id", type=FieldType(id="uuid", name="UUID"),
        primary_key=True, unique=True, nullable=False, created_at=T0,
    )
    email_field = Field(
        id="f2", name="email", type=FieldType(id="varchar", name="VARCHAR"),
        primary_key=False, unique=True, nullable=False, created_at=T0,
        default="''", collation="en_US", comments="login", check="email <> ''",
    )
    user_id_field = Field(
        id="f3", name="user_id", type=FieldType(id="uuid", name="UUID"),
        primary_key=False, unique=False, nullable=False, created_at=T0,
    )
    users = Table(
        id="t1", name="users", schema="public", x=10.0, y=20.5,
        color="#ff0000", is_view=False, created_at=T0,
        fields=[id_field, email_field],
        indexes=[Index(id="i1", name="users_email_idx", unique=True, field_ids=["f2"])],
        comments="accounts",
    )
    orders = Table(
        id="t2", name="orders", x=300.0, y=20.5, color="#00ff00",
        is_view=False, created_at=T0, fields=[user_id_field], indexes=[],
    )
    return Diagram(
        id=diagram_id,
        name=name,
        database_type=DatabaseType.POSTGRESQL,
        database_edition="postgresql_supabase",
        created_at=T0,
        updated_at=T1,
        tables=[users, orders],
        relationships=[Relationship(
            id="r1", name="orders_user_fk",
            source_table_id="t2", target_table_id="t1",
            source_field_id="f3", target_field_id="f1",
            source_cardinality=Cardinality.MANY,
            target_cardinality=Cardinality.ONE,
            created_at=T0,
        )],
        dependencies=[Dependency(
            id="dep1", table_id="t1", dependent_table_id="t2", created_at=T0,
        )],
        areas=[Area(
            id="a1", name="Sales", x=0.0, y=0.0, width=600.0, height=400.0,
            color="#cccccc",
        )],
        custom_types=[
            CustomType(
                id="ct1", name="address", kind=CustomTypeKind.COMPOSITE,
                schema="public",
                fields=[CustomTypeField(field="street", type="text")],
            ),
            CustomType(id="ct2", name="mood", kind=CustomTypeKind.ENUM),
        ],
        notes=[Note(
            id="n1", content="check FKs", x=5.0, y=5.0, width=100.0,
            height=50.0, color="#ffff00",
        )],
    )


@pytest.fixture
def make_diagram():
    """Factory for a fully populated diagram (every collection present)."""
    return _full_diagram


@pytest.fixture
def diagram():
    return _full_diagram()
