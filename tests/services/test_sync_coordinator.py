"""Sync Coordinator — tests for single-flight, change detection and failure routing.

Tests cover:
    - Immediate push → success callback; unchanged diagram → no request
    - Only one push in flight; overlapping push_now is dropped
    - Debounced bursts send only the last diagram
    - Failures (server error, success=false, unexpected) → error callback, baseline kept
    - Disabled coordinator does nothing and returns fallbacks
    - pull/list fallbacks and baseline update on pull
    - aclose waits for the in-flight push
    - create_sync_coordinator applies settings and warms up once
"""

import asyncio
from dataclasses import replace

import pytest

from chartdb_sync.config import Settings
from chartdb_sync.core.diagram import to_list_item
from chartdb_sync.core.errors import SyncListError, SyncPullError, SyncPushError
from chartdb_sync.services.sync_coordinator import (
    SyncCoordinator, create_sync_coordinator,
)


class Callbacks:
    def __init__(self):
        self.successes: list[str] = []
        self.errors: list[Exception] = []

    def success(self, diagram_id: str) -> None:
        self.successes.append(diagram_id)

    def error(self, exc: Exception) -> None:
        self.errors.append(exc)


@pytest.fixture
def callbacks():
    return Callbacks()


@pytest.fixture
def coordinator(fake_client, callbacks, scheduler):
    return SyncCoordinator(
        fake_client,
        on_sync_success=callbacks.success,
        on_sync_error=callbacks.error,
        scheduler=scheduler,
    )


# -- push ----------------------------------------------------------------------


async def test_push_now_sends_and_reports_success(coordinator, fake_client, callbacks, diagram):
    await coordinator.push_now(diagram)
    assert fake_client.pushes == [diagram]
    assert callbacks.successes == ["d1"]
    assert not coordinator.is_syncing


async def test_unchanged_diagram_is_not_pushed_twice(coordinator, fake_client, callbacks, make_diagram):
    await coordinator.push_now(make_diagram())
    await coordinator.push_now(make_diagram())
    assert len(fake_client.pushes) == 1
    assert callbacks.successes == ["d1"]
    assert not coordinator.is_syncing


async def test_changed_diagram_is_pushed_again(coordinator, fake_client, diagram):
    await coordinator.push_now(diagram)
    await coordinator.push_now(replace(diagram, name="Shop v2"))
    assert [d.name for d in fake_client.pushes] == ["Shop", "Shop v2"]


async def test_overlapping_push_is_dropped(coordinator, fake_client, diagram):
    fake_client.gate = asyncio.Event()
    first = asyncio.create_task(coordinator.push_now(diagram))
    await asyncio.sleep(0)

    assert coordinator.is_syncing
    assert coordinator.blocks_teardown
    await coordinator.push_now(replace(diagram, name="Other"))
    assert len(fake_client.pushes) == 1

    fake_client.gate.set()
    await first
    assert not coordinator.is_syncing
    assert not coordinator.blocks_teardown


async def test_debounced_burst_pushes_last_diagram(coordinator, fake_client, scheduler, diagram):
    coordinator.schedule_push(replace(diagram, name="A"))
    scheduler.advance(1.0)
    coordinator.schedule_push(replace(diagram, name="B"))
    assert coordinator.has_pending_push
    scheduler.advance(2.0)
    await coordinator.aclose()

    assert [d.name for d in fake_client.pushes] == ["B"]


async def test_flush_pushes_pending_immediately(coordinator, fake_client, diagram):
    coordinator.schedule_push(diagram)
    await coordinator.flush()
    assert fake_client.pushes == [diagram]
    assert not coordinator.has_pending_push


# -- failures ------------------------------------------------------------------


async def test_server_error_goes_to_callback_and_keeps_baseline(coordinator, fake_client, callbacks, diagram):
    fake_client.push_error = SyncPushError("boom", 500)
    await coordinator.push_now(diagram)

    assert callbacks.errors == [fake_client.push_error]
    assert callbacks.successes == []
    assert not coordinator.is_syncing

    fake_client.push_error = None
    await coordinator.push_now(diagram)
    assert len(fake_client.pushes) == 2
    assert callbacks.successes == ["d1"]


async def test_unacknowledged_push_counts_as_failure(coordinator, fake_client, callbacks, diagram):
    fake_client.push_success = False
    await coordinator.push_now(diagram)

    assert len(callbacks.errors) == 1
    assert isinstance(callbacks.errors[0], SyncPushError)
    assert callbacks.successes == []

    fake_client.push_success = True
    await coordinator.push_now(diagram)
    assert len(fake_client.pushes) == 2


async def test_unexpected_exception_is_reported(coordinator, fake_client, callbacks, diagram):
    fake_client.push_error = RuntimeError("socket exploded")
    await coordinator.push_now(diagram)
    assert isinstance(callbacks.errors[0], RuntimeError)
    assert not coordinator.is_syncing


async def test_failure_without_error_callback_is_silent(fake_client, diagram):
    fake_client.push_error = SyncPushError("boom", 500)
    coordinator = SyncCoordinator(fake_client)
    await coordinator.push_now(diagram)
    assert not coordinator.is_syncing


# -- disabled ------------------------------------------------------------------


@pytest.mark.parametrize("client_enabled,flag", [(False, True), (True, False)])
async def test_disabled_coordinator_does_nothing(fake_client, callbacks, diagram, client_enabled, flag):
    fake_client.is_enabled = client_enabled
    coordinator = SyncCoordinator(
        fake_client, enabled=flag,
        on_sync_success=callbacks.success, on_sync_error=callbacks.error,
    )

    await coordinator.push_now(diagram)
    assert await coordinator.pull("d1") is None
    assert await coordinator.list_diagrams() == []
    assert await coordinator.activate() is False
    assert not coordinator.blocks_teardown

    assert fake_client.pushes == []
    assert fake_client.pulls == []
    assert callbacks.successes == []
    assert callbacks.errors == []


async def test_no_client_is_disabled(diagram):
    coordinator = SyncCoordinator(None)
    assert not coordinator.is_enabled
    await coordinator.push_now(diagram)
    assert await coordinator.check_health() is False


# -- pull / list / health ------------------------------------------------------


async def test_pull_sets_baseline(coordinator, fake_client, diagram):
    fake_client.pull_result = diagram
    assert await coordinator.pull("d1") == diagram

    await coordinator.push_now(diagram)
    assert fake_client.pushes == []


async def test_pull_not_found_is_not_an_error(coordinator, fake_client, callbacks):
    assert await coordinator.pull("missing") is None
    assert callbacks.errors == []


async def test_pull_failure_reports_and_returns_none(coordinator, fake_client, callbacks):
    fake_client.pull_error = SyncPullError("boom", 500)
    assert await coordinator.pull("d1") is None
    assert callbacks.errors == [fake_client.pull_error]


async def test_list_returns_remote_items(coordinator, fake_client, diagram):
    fake_client.list_result = [to_list_item(diagram)]
    items = await coordinator.list_diagrams()
    assert [i.id for i in items] == ["d1"]


async def test_list_failure_reports_and_returns_empty(coordinator, fake_client, callbacks):
    fake_client.list_error = SyncListError("down", 503)
    assert await coordinator.list_diagrams() == []
    assert callbacks.errors == [fake_client.list_error]


async def test_activate_checks_health_once(coordinator, fake_client):
    assert await coordinator.activate() is True
    fake_client.healthy = False
    assert await coordinator.check_health() is False
    assert fake_client.health_checks == 2


# -- teardown ------------------------------------------------------------------


async def test_aclose_waits_for_in_flight_push(coordinator, fake_client, diagram):
    fake_client.gate = asyncio.Event()
    push = asyncio.create_task(coordinator.push_now(diagram))
    await asyncio.sleep(0)

    closing = asyncio.create_task(coordinator.aclose())
    await asyncio.sleep(0)
    assert not closing.done()

    fake_client.gate.set()
    await closing
    await push
    assert not coordinator.is_syncing


async def test_aclose_drops_pending_push(coordinator, fake_client, scheduler, diagram):
    coordinator.schedule_push(diagram)
    await coordinator.aclose()
    scheduler.advance(5.0)
    await asyncio.sleep(0)
    assert fake_client.pushes == []


# -- construction from settings ------------------------------------------------


async def test_factory_applies_debounce_and_warms_up(fake_client, scheduler, diagram):
    settings = Settings(sync_debounce_ms=500, _env_file=None)
    coordinator = await create_sync_coordinator(
        settings, fake_client, scheduler=scheduler,
    )
    assert fake_client.health_checks == 1

    coordinator.schedule_push(diagram)
    scheduler.advance(0.4)
    assert fake_client.pushes == []
    scheduler.advance(0.1)
    await coordinator.aclose()
    assert fake_client.pushes == [diagram]


async def test_factory_skips_warm_up_when_disabled(fake_client):
    fake_client.is_enabled = False
    coordinator = await create_sync_coordinator(
        Settings(_env_file=None), fake_client,
    )
    assert not coordinator.is_enabled
    assert fake_client.health_checks == 0
