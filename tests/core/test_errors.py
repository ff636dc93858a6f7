"""Error Hierarchy — tests for codes, statuses and the wire envelope."""

from chartdb_sync.core.errors import (
    ChartSyncError,
    ErrorSeverity,
    ResourceNotFoundError,
    StaleDiagramError,
    SyncDisabledError,
    SyncPushError,
    SyncServerError,
)


def test_disabled_is_informational():
    err = SyncDisabledError()
    assert err.code == "SYNC_DISABLED"
    assert err.severity is ErrorSeverity.INFO


def test_push_error_carries_status_and_remote_code():
    err = SyncPushError("quota exceeded", 429, "QUOTA")
    assert isinstance(err, SyncServerError)
    assert isinstance(err, ChartSyncError)
    assert err.status_code == 429
    assert err.error_code == "QUOTA"
    assert err.context.status_code == 429
    assert str(err) == "quota exceeded"


def test_to_response_is_flat_envelope():
    body = ResourceNotFoundError("Diagram", "x1").to_response()
    assert body["error"] == "Diagram 'x1' not found"
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["category"] == "resource_not_found"


def test_stale_diagram_is_conflict():
    err = StaleDiagramError("d1")
    assert err.http_status == 409
    assert err.context.diagram_id == "d1"
    assert err.to_response()["diagram_id"] == "d1"
