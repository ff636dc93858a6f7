"""Sync Schemas — Pydantic models for the push/pull/list wire envelopes.

Invariants:
    - PushResponse and RemoteDiagramSummary use snake_case (the wire does)
    - PushRequest.diagram is the camelCase body produced by encode_diagram
    - ErrorPayload accepts both the flat {"error": str, "code": str} shape
      and a nested {"error": {"message", "code"}} envelope

Design Decisions:
    - Listing uses its own snake_case projection: the endpoint is asymmetric
      with push/pull, so the mapping lives next to the schema
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chartdb_sync.core.diagram import DiagramListItem
from chartdb_sync.core.domain_types import DatabaseType


class PushRequest(BaseModel):
    """Body of POST /api/sync/push."""
    diagram: dict[str, Any]


class PushResponse(BaseModel):
    """Body returned by POST /api/sync/push."""
    success: bool
    diagram_id: str


class RemoteDiagramSummary(BaseModel):
    """One entry of GET /api/sync/diagrams."""
    id: str = Field(min_length=1)
    name: str
    database_type: DatabaseType
    database_edition: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps on the wire are UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_list_item(self) -> DiagramListItem:
        return DiagramListItem(
            id=self.id,
            name=self.name,
            database_type=self.database_type,
            database_edition=self.database_edition,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_list_item(cls, item: DiagramListItem) -> "RemoteDiagramSummary":
        return cls(
            id=item.id,
            name=item.name,
            database_type=item.database_type,
            database_edition=item.database_edition,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ErrorPayload(BaseModel):
    """Error body of any non-success sync response."""
    message: str | None = None
    code: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "ErrorPayload":
        if not isinstance(body, dict):
            return cls()
        error = body.get("error")
        if isinstance(error, dict):
            return cls(
                message=_text(error.get("message")), code=_text(error.get("code")),
            )
        if isinstance(error, str):
            return cls(message=error, code=_text(body.get("code")))
        return cls(
            message=_text(body.get("message")), code=_text(body.get("code")),
        )


def _text(value: Any) -> str | None:
    return None if value is None else str(value)
