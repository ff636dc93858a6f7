"""Sync Coordinator — single-flight, change-detected, debounced pushes plus safe pull/list.

Invariants:
    - At most one push in flight; push_now while one is outstanding is dropped, not queued
    - The in-flight flag clears on success, failure and skip alike
    - A push whose snapshot equals the last-synced baseline is skipped (no request)
    - The baseline changes only on a successful push or a successful pull
    - push/pull/list never raise: errors go to on_sync_error and a fallback
      value is returned (None for pull, [] for list)
    - Diagrams are received by value and never mutated

Design Decisions:
    - Flag checked and set with no await in between: atomic under asyncio,
      no lock needed
    - A success=false acknowledgement counts as a failed push (error callback,
      baseline untouched)
    - aclose() waits for the in-flight push before returning: the owning
      scope uses it (or blocks_teardown) to avoid exiting mid-push
    - create_sync_coordinator is the startup entry point: it applies the
      configured debounce window and awaits the health warm-up once
"""

import asyncio
import logging
from collections.abc import Callable

from chartdb_sync.config import Settings
from chartdb_sync.core.diagram import Diagram, DiagramListItem, snapshot
from chartdb_sync.core.errors import (
    ChartSyncError, ErrorContext, SyncPushError,
)
from chartdb_sync.core.repository_protocols import Scheduler
from chartdb_sync.infrastructure.sync_client import RemoteSyncClient
from chartdb_sync.services.debouncer import Debouncer

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str], None]
ErrorCallback = Callable[[Exception], None]


class SyncCoordinator:
    """Stateful wrapper around RemoteSyncClient for the editing and loading flows."""

    DEFAULT_DEBOUNCE_MS = 2000

    def __init__(
        self,
        client: RemoteSyncClient | None,
        *,
        enabled: bool = True,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        on_sync_success: SuccessCallback | None = None,
        on_sync_error: ErrorCallback | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.client = client
        self.enabled = enabled
        self.on_sync_success = on_sync_success
        self.on_sync_error = on_sync_error
        self._syncing = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._last_synced: str | None = None
        self._debouncer: Debouncer[Diagram] = Debouncer(
            self.push_now, debounce_ms, scheduler,
        )

    @property
    def is_enabled(self) -> bool:
        return bool(self.client and self.client.is_enabled and self.enabled)

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    @property
    def blocks_teardown(self) -> bool:
        """True while a push is outstanding: exit/navigation should wait."""
        return self.is_enabled and self._syncing

    @property
    def has_pending_push(self) -> bool:
        return self._debouncer.pending

    # ─── Push ───────────────────────────────────────────────────

    def schedule_push(self, diagram: Diagram) -> None:
        """Debounced push: only the last diagram of a burst is sent."""
        self._debouncer.schedule(diagram)

    async def flush(self) -> None:
        await self._debouncer.flush()

    async def push_now(self, diagram: Diagram) -> None:
        """Immediate push attempt, bypassing the debounce window."""
        if not self.is_enabled or self._syncing:
            return
        self._syncing = True
        self._idle.clear()
        try:
            candidate = snapshot(diagram)
            if candidate == self._last_synced:
                return
            logger.info(
                "Syncing diagram to backend", extra={"diagram_id": diagram.id},
            )
            response = await self.client.push(diagram)
            if not response.success:
                raise SyncPushError(
                    "Sync endpoint did not acknowledge the push", 200,
                    context=ErrorContext(diagram_id=diagram.id, operation="push"),
                )
            self._last_synced = candidate
            logger.info(
                "Diagram synced successfully", extra={"diagram_id": diagram.id},
            )
            if self.on_sync_success:
                self.on_sync_success(diagram.id)
        except ChartSyncError as e:
            logger.error(
                f"Failed to sync diagram: {e.message}",
                extra={"diagram_id": diagram.id, "error_code": e.code},
            )
            self._report(e)
        except Exception as e:
            logger.error(
                f"Failed to sync diagram: {e}",
                extra={"diagram_id": diagram.id}, exc_info=True,
            )
            self._report(e)
        finally:
            self._syncing = False
            self._idle.set()

    # ─── Pull / list / health ───────────────────────────────────

    async def pull(self, diagram_id: str) -> Diagram | None:
        if not self.is_enabled:
            return None
        try:
            logger.info(
                "Pulling diagram from backend", extra={"diagram_id": diagram_id},
            )
            diagram = await self.client.pull(diagram_id)
        except Exception as e:
            logger.error(
                f"Failed to pull diagram: {e}", extra={"diagram_id": diagram_id},
            )
            self._report(e)
            return None
        if diagram is None:
            logger.info(
                "Diagram not found on server", extra={"diagram_id": diagram_id},
            )
            return None
        self._last_synced = snapshot(diagram)
        logger.info(
            "Diagram pulled successfully", extra={"diagram_id": diagram_id},
        )
        return diagram

    async def list_diagrams(self) -> list[DiagramListItem]:
        if not self.is_enabled:
            return []
        try:
            logger.info("Fetching diagram list from backend")
            diagrams = await self.client.list_diagrams()
        except Exception as e:
            logger.error(f"Failed to list diagrams: {e}")
            self._report(e)
            return []
        logger.info(
            f"Fetched {len(diagrams)} diagrams from backend",
            extra={"diagram_count": len(diagrams)},
        )
        return diagrams

    async def check_health(self) -> bool:
        if not self.client or not self.client.is_enabled:
            return False
        healthy = await self.client.health_check()
        if healthy:
            logger.info("Backend is healthy")
        else:
            logger.warning("Backend health check failed")
        return healthy

    async def activate(self) -> bool:
        """Warm-up on startup: one health check when sync is on."""
        if not self.is_enabled:
            return False
        return await self.check_health()

    async def aclose(self) -> None:
        """Drop any pending debounced push and wait out an in-flight one."""
        self._debouncer.cancel()
        await self._debouncer.join()
        await self._idle.wait()

    def _report(self, error: Exception) -> None:
        if self.on_sync_error:
            self.on_sync_error(error)


async def create_sync_coordinator(
    settings: Settings,
    client: RemoteSyncClient | None,
    *,
    on_sync_success: SuccessCallback | None = None,
    on_sync_error: ErrorCallback | None = None,
    scheduler: Scheduler | None = None,
) -> SyncCoordinator:
    """Build the session's coordinator from settings and run the warm-up check."""
    coordinator = SyncCoordinator(
        client,
        debounce_ms=settings.sync_debounce_ms,
        on_sync_success=on_sync_success,
        on_sync_error=on_sync_error,
        scheduler=scheduler,
    )
    await coordinator.activate()
    return coordinator
