"""Services conftest — virtual clock and fake sync client shared by service tests."""

from dataclasses import dataclass, field

import pytest

from chartdb_sync.schemas.sync import PushResponse


@dataclass
class FakeTimer:
    due: float
    callback: object
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual clock with loop.call_later semantics; advance() fires due timers."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.cancelled and t.due <= self.now),
            key=lambda t: t.due,
        )
        for timer in due:
            self.timers.remove(timer)
            timer.callback()

    @property
    def armed(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)


@dataclass
class FakeSyncClient:
    """Records calls; outcomes configured per test."""
    is_enabled: bool = True
    push_success: bool = True
    push_error: Exception | None = None
    gate: object = None
    pull_result: object = None
    pull_error: Exception | None = None
    list_result: list = field(default_factory=list)
    list_error: Exception | None = None
    healthy: bool = True
    pushes: list = field(default_factory=list)
    pulls: list = field(default_factory=list)
    health_checks: int = 0

    async def push(self, diagram):
        self.pushes.append(diagram)
        if self.gate is not None:
            await self.gate.wait()
        if self.push_error is not None:
            raise self.push_error
        return PushResponse(success=self.push_success, diagram_id=diagram.id)

    async def pull(self, diagram_id):
        self.pulls.append(diagram_id)
        if self.pull_error is not None:
            raise self.pull_error
        return self.pull_result

    async def list_diagrams(self):
        if self.list_error is not None:
            raise self.list_error
        return self.list_result

    async def health_check(self):
        self.health_checks += 1
        return self.healthy


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def fake_client():
    return FakeSyncClient()
