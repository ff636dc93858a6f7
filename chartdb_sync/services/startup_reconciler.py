"""Startup Reconciler — decides which diagram opens on entry and merges remote into local.

Invariants:
    - One evaluation per distinct target id; repeated targets are suppressed by LoadGuard
    - Explicit id: loader shown, undo/redo reset, then exactly one of
      "staged" or "non-dismissible open prompt"; the loader is always hidden
    - Default id that exists locally → redirect only (the route re-enters load)
    - Remote merge is one-directional: remote ids missing locally are added
      from the catalog projection; existing local entries are never touched
    - Remote failures are logged and swallowed; startup always ends in a
      staged diagram, a redirect, or a prompt

Design Decisions:
    - Remote listing goes through SyncCoordinator.list_diagrams, which already
      turns errors into [] (local-first: sync never blocks loading)
    - Catalog-only imports carry no body; the full diagram arrives on pull
    - Deleted-locally remote diagrams are re-imported (no tombstones)
    - create_startup_reconciler takes the default diagram id from settings
"""

import logging

from chartdb_sync.config import Settings
from chartdb_sync.core.diagram import Diagram, DiagramListItem, from_list_item
from chartdb_sync.core.domain_types import LoadOutcome
from chartdb_sync.core.load_guard import LoadGuard
from chartdb_sync.core.repository_protocols import (
    DialogSurface, HistoryStack, LoaderSurface, LocalCatalog, Navigator,
)
from chartdb_sync.services.sync_coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


def diagram_route(diagram_id: str) -> str:
    return f"/diagrams/{diagram_id}"


class StartupReconciler:
    """Runs the startup load decision tree for one editor session."""

    def __init__(
        self,
        *,
        catalog: LocalCatalog,
        coordinator: SyncCoordinator,
        dialogs: DialogSurface,
        loader: LoaderSurface,
        history: HistoryStack,
        navigator: Navigator,
        default_diagram_id: str | None = None,
    ):
        self.catalog = catalog
        self.coordinator = coordinator
        self.dialogs = dialogs
        self.loader = loader
        self.history = history
        self.navigator = navigator
        self.default_diagram_id = default_diagram_id
        self.guard = LoadGuard()
        self.initial_diagram: Diagram | None = None

    async def load(
        self, diagram_id: str | None, current_diagram_id: str | None = None,
    ) -> LoadOutcome:
        """Evaluate the decision tree for a requested id (None = no id in the route)."""
        if current_diagram_id is not None and current_diagram_id == diagram_id:
            return LoadOutcome.SUPPRESSED
        if not self.guard.begin(diagram_id):
            return LoadOutcome.SUPPRESSED
        try:
            return await self._evaluate(diagram_id)
        finally:
            self.guard.finish(diagram_id)

    async def _evaluate(self, diagram_id: str | None) -> LoadOutcome:
        if diagram_id:
            return await self._load_explicit(diagram_id)

        if self.default_diagram_id:
            default = await self.catalog.load_diagram(self.default_diagram_id)
            if default is not None:
                self.navigator.navigate(diagram_route(self.default_diagram_id))
                return LoadOutcome.REDIRECTED

        await self.reconcile_remote()

        if await self.catalog.list_diagrams():
            self.dialogs.open_open_diagram_dialog(can_close=False)
            return LoadOutcome.OPEN_PROMPT
        self.dialogs.open_create_diagram_dialog()
        return LoadOutcome.CREATE_PROMPT

    async def _load_explicit(self, diagram_id: str) -> LoadOutcome:
        self.initial_diagram = None
        self.loader.show_loader()
        try:
            self.history.reset_redo_stack()
            self.history.reset_undo_stack()
            diagram = await self.catalog.load_diagram(diagram_id)
            if diagram is None:
                logger.info(
                    "Requested diagram not in local catalog",
                    extra={"diagram_id": diagram_id},
                )
                self.dialogs.open_open_diagram_dialog(can_close=False)
                return LoadOutcome.NOT_FOUND
            self.initial_diagram = diagram
            return LoadOutcome.LOADED
        finally:
            self.loader.hide_loader()

    async def reconcile_remote(self) -> list[DiagramListItem]:
        """Import remote catalog entries missing locally. Returns what was added."""
        added: list[DiagramListItem] = []
        try:
            remote = await self.coordinator.list_diagrams()
            if not remote:
                return added
            logger.info(
                f"Found {len(remote)} diagrams on server",
                extra={"diagram_count": len(remote)},
            )
            local_ids = {d.id for d in await self.catalog.list_diagrams()}
            for item in remote:
                if item.id in local_ids:
                    continue
                await self.catalog.add_diagram(from_list_item(item))
                local_ids.add(item.id)
                added.append(item)
        except Exception as e:
            logger.warning(f"Failed to sync diagram list from backend: {e}")
        return added


def create_startup_reconciler(
    settings: Settings,
    *,
    catalog: LocalCatalog,
    coordinator: SyncCoordinator,
    dialogs: DialogSurface,
    loader: LoaderSurface,
    history: HistoryStack,
    navigator: Navigator,
) -> StartupReconciler:
    return StartupReconciler(
        catalog=catalog,
        coordinator=coordinator,
        dialogs=dialogs,
        loader=loader,
        history=history,
        navigator=navigator,
        default_diagram_id=settings.default_diagram_id,
    )
