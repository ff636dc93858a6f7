"""Boundary Protocols — contracts between the sync core and its collaborators.

Invariants:
    - Services never import concrete UI, routing or storage code
    - Storage is async (it does IO); UI surfaces are plain calls (they only
      schedule UI work and return)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - One small protocol per collaborator instead of a single "editor" facade,
      so a test can fake exactly what a branch touches
"""

from collections.abc import Callable
from typing import Protocol

from chartdb_sync.core.diagram import Diagram, DiagramListItem


class LocalCatalog(Protocol):
    """Local diagram store keyed by stable diagram id."""
    async def list_diagrams(self) -> list[DiagramListItem]: ...
    async def add_diagram(self, diagram: Diagram) -> None: ...
    async def load_diagram(self, diagram_id: str) -> Diagram | None: ...


class DialogSurface(Protocol):
    """Prompts the reconciler may open."""
    def open_open_diagram_dialog(self, *, can_close: bool = True) -> None: ...
    def open_create_diagram_dialog(self) -> None: ...


class LoaderSurface(Protocol):
    """Full-screen loading indicator."""
    def show_loader(self) -> None: ...
    def hide_loader(self) -> None: ...


class HistoryStack(Protocol):
    """Undo/redo history; only the resets are consumed here."""
    def reset_undo_stack(self) -> None: ...
    def reset_redo_stack(self) -> None: ...


class Navigator(Protocol):
    """Route changes (redirect to the default diagram)."""
    def navigate(self, path: str) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with loop.call_later semantics: the running loop or a virtual clock."""
    def call_later(
        self, delay: float, callback: Callable[[], None],
    ) -> TimerHandle: ...
