"""Load Guard — re-entrancy state machine for the startup decision tree.

Invariants:
    - States: IDLE, LOADING(target), LOADED(target)
    - begin(target) is refused while the guard holds the same target,
      whether that evaluation is still running or already finished
    - begin(other) always succeeds and replaces the held target
    - finish(target) only moves LOADING(target) → LOADED(target); a stale
      finish from an overlapped evaluation leaves the newer state alone
    - "No explicit id" is the target "" (distinct from every real id)

Design Decisions:
    - Explicit enum state over a bare "last id" cell: the suppression rule
      is auditable and testable without the reconciler
    - Different targets are NOT serialized against each other; an evaluation
      for A may still be finishing when B begins (known race surface)
"""

from dataclasses import dataclass

from chartdb_sync.core.domain_types import LoadPhase


def target_key(diagram_id: str | None) -> str:
    return diagram_id or ""


@dataclass
class LoadGuard:
    """Per-session guard: pure dataclass, no IO."""

    phase: LoadPhase = LoadPhase.IDLE
    target: str | None = None

    def holds(self, diagram_id: str | None) -> bool:
        return (
            self.phase is not LoadPhase.IDLE
            and self.target == target_key(diagram_id)
        )

    def begin(self, diagram_id: str | None) -> bool:
        """Claim the guard for a target. False means: suppress this evaluation."""
        if self.holds(diagram_id):
            return False
        self.phase = LoadPhase.LOADING
        self.target = target_key(diagram_id)
        return True

    def finish(self, diagram_id: str | None) -> None:
        if self.phase is LoadPhase.LOADING and self.target == target_key(diagram_id):
            self.phase = LoadPhase.LOADED

    def reset(self) -> None:
        self.phase = LoadPhase.IDLE
        self.target = None
