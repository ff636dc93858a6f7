"""Remote Sync Client — stateless push/pull/list/health against the sync endpoint.

Invariants:
    - Disabled client (no endpoint or switched off) raises SyncDisabledError
      before any request is built; health_check returns False instead
    - 404 on pull is the expected "absent" outcome → None, never an error
    - Non-success status → SyncPushError / SyncPullError / SyncListError with
      the message and code from the error body, or "HTTP {status}: {reason}"
      when the body cannot be parsed
    - httpx transport failures → SyncTransportError
    - Undecodable success bodies → SyncDecodeError; a listing entry that fails
      validation (e.g. an unknown database_type) is logged and skipped alone
    - Diagram ids are percent-encoded as one path segment
    - health_check never raises

Design Decisions:
    - Explicitly constructed instance, passed by reference to every consumer
      (no module-level singleton); create_sync_client builds it from settings
    - One httpx.AsyncClient per instance, closed by aclose(); tests inject a
      transport (MockTransport / ASGITransport) instead of patching
    - No retry/backoff here: sync is best-effort, the next edit re-triggers
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from chartdb_sync.config import Settings, SyncConfig
from chartdb_sync.core.diagram import Diagram, DiagramListItem
from chartdb_sync.core.domain_types import SyncOperation
from chartdb_sync.core.errors import (
    ErrorContext,
    SyncDecodeError,
    SyncDisabledError,
    SyncListError,
    SyncPullError,
    SyncPushError,
    SyncServerError,
    SyncTransportError,
)
from chartdb_sync.core.wire_codec import decode_diagram, encode_diagram
from chartdb_sync.schemas.sync import (
    ErrorPayload, PushRequest, PushResponse, RemoteDiagramSummary,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = 404


def _error_message(response: httpx.Response, fallback: str) -> tuple[str, str | None]:
    """Extract (message, code) from an error response."""
    try:
        payload = ErrorPayload.from_body(response.json())
    except ValueError:
        return f"HTTP {response.status_code}: {response.reason_phrase}", None
    return payload.message or fallback, payload.code


class RemoteSyncClient:
    """Transport operations against {api_url}/api/sync/* and {api_url}/health."""

    def __init__(
        self,
        config: SyncConfig,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._http = httpx.AsyncClient(
            timeout=timeout_seconds, transport=transport,
        )

    @property
    def is_enabled(self) -> bool:
        return self.config.is_enabled

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}{path}"

    def _require_enabled(self, operation: SyncOperation) -> None:
        if not self.is_enabled:
            raise SyncDisabledError(ErrorContext(operation=operation.value))

    async def _send(
        self, operation: SyncOperation, method: str, path: str, **kwargs,
    ) -> httpx.Response:
        try:
            return await self._http.request(method, self._url(path), **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                f"Sync {operation.value} transport failure: {e}",
                extra={"operation": operation.value},
            )
            raise SyncTransportError(
                str(e) or type(e).__name__,
                ErrorContext(operation=operation.value),
            )

    def _raise_for_status(
        self,
        response: httpx.Response,
        operation: SyncOperation,
        error_cls: type[SyncServerError],
        fallback: str,
        diagram_id: str | None = None,
    ) -> None:
        if response.is_success:
            return
        message, code = _error_message(response, fallback)
        logger.warning(
            f"Sync {operation.value} failed: {message}",
            extra={
                "operation": operation.value,
                "status_code": response.status_code,
                "error_code": code,
                "diagram_id": diagram_id,
            },
        )
        raise error_cls(
            message, response.status_code, code,
            ErrorContext(diagram_id=diagram_id, operation=operation.value),
        )

    async def push(self, diagram: Diagram) -> PushResponse:
        """POST the encoded diagram; returns the endpoint's acknowledgement."""
        self._require_enabled(SyncOperation.PUSH)
        body = PushRequest(diagram=encode_diagram(diagram))
        response = await self._send(
            SyncOperation.PUSH, "POST", "/api/sync/push",
            json=body.model_dump(),
        )
        self._raise_for_status(
            response, SyncOperation.PUSH, SyncPushError,
            "Failed to push diagram", diagram.id,
        )
        try:
            return PushResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SyncDecodeError(
                str(e), ErrorContext(diagram_id=diagram.id, operation="push"),
            )

    async def pull(self, diagram_id: str) -> Diagram | None:
        """GET one diagram; None when the endpoint does not have it."""
        self._require_enabled(SyncOperation.PULL)
        response = await self._send(
            SyncOperation.PULL, "GET",
            f"/api/sync/pull/{quote(diagram_id, safe='')}",
        )
        if response.status_code == _NOT_FOUND:
            return None
        self._raise_for_status(
            response, SyncOperation.PULL, SyncPullError,
            "Failed to pull diagram", diagram_id,
        )
        try:
            data = response.json()
        except ValueError as e:
            raise SyncDecodeError(
                str(e), ErrorContext(diagram_id=diagram_id, operation="pull"),
            )
        if not isinstance(data, dict):
            raise SyncDecodeError(
                "diagram body is not an object",
                ErrorContext(diagram_id=diagram_id, operation="pull"),
            )
        return decode_diagram(data)

    async def list_diagrams(self) -> list[DiagramListItem]:
        """GET the remote catalog (snake_case projection)."""
        self._require_enabled(SyncOperation.LIST)
        response = await self._send(
            SyncOperation.LIST, "GET", "/api/sync/diagrams",
        )
        self._raise_for_status(
            response, SyncOperation.LIST, SyncListError,
            "Failed to list diagrams",
        )
        try:
            entries = response.json()
        except ValueError as e:
            raise SyncDecodeError(str(e), ErrorContext(operation="list"))
        if not isinstance(entries, list):
            raise SyncDecodeError(
                "diagram list is not an array", ErrorContext(operation="list"),
            )
        items: list[DiagramListItem] = []
        for entry in entries:
            try:
                items.append(
                    RemoteDiagramSummary.model_validate(entry).to_list_item(),
                )
            except ValidationError as e:
                entry_id = entry.get("id") if isinstance(entry, dict) else None
                logger.warning(
                    f"Skipping malformed remote diagram entry: {e.error_count()} error(s)",
                    extra={"operation": SyncOperation.LIST.value, "diagram_id": entry_id},
                )
        return items

    async def health_check(self) -> bool:
        """Advisory reachability probe; never raises."""
        if not self.is_enabled:
            return False
        try:
            response = await self._http.get(self._url("/health"))
        except Exception as e:
            logger.warning(
                f"Sync health check failed: {e}",
                extra={"operation": SyncOperation.HEALTH.value},
            )
            return False
        return response.is_success

    async def aclose(self) -> None:
        await self._http.aclose()


def create_sync_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RemoteSyncClient:
    """Build the process-wide client from settings (call once at startup)."""
    config = settings.sync_config()
    client = RemoteSyncClient(
        config,
        timeout_seconds=settings.sync_timeout_seconds,
        transport=transport,
    )
    if client.is_enabled:
        logger.info(f"Sync service initialized: {config.api_url}")
    else:
        logger.info("Sync service disabled (no API URL configured)")
    return client
