from __future__ import annotations

import asyncio
import logging

import pytest
from conftest import FakeChargeAmpsBackend

from pychargeamps.client import ChargeAmpsClient
from pychargeamps.state.mirror import StateMirror
from pychargeamps.state.store import InMemoryStateStore
from pychargeamps.sync import SyncLoop


@pytest.fixture
def sync(client: ChargeAmpsClient, mirror: StateMirror) -> SyncLoop:
    return SyncLoop(client, mirror, interval=15)


@pytest.mark.asyncio
async def test_tick_when_not_logged_in_makes_no_calls(sync: SyncLoop, backend: FakeChargeAmpsBackend) -> None:
    await sync.tick()
    assert backend.calls == []


@pytest.mark.asyncio
async def test_tick_fetches_sequentially_per_chargepoint(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    backend: FakeChargeAmpsBackend,
) -> None:
    await client.login()
    backend.calls.clear()

    await sync.tick()

    assert backend.urls() == [
        "chargepoints/CP1/status",
        "chargepoints/CP1/settings",
        "chargepoints/CP1/connectors/1/settings",
        "chargepoints/CP1/connectors/2/settings",
        "chargepoints/CP2/status",
        "chargepoints/CP2/settings",
        "chargepoints/CP2/connectors/1/settings",
        "chargepoints/CP2/connectors/2/settings",
    ]


@pytest.mark.asyncio
async def test_tick_mirrors_status_and_settings(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    store: InMemoryStateStore,
) -> None:
    await client.login()
    await sync.tick()

    status = await store.get_state("CP1.status.status")
    dimmer = await store.get_state("CP1.settings.dimmer")
    max_current = await store.get_state("CP2.connectors.2.settings.maxCurrent")
    assert status is not None and status.val == "Online" and status.ack
    assert dimmer is not None and dimmer.val == "Low"
    assert max_current is not None and max_current.val == 16


@pytest.mark.asyncio
async def test_failing_fetch_does_not_abort_the_cycle(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    backend: FakeChargeAmpsBackend,
    store: InMemoryStateStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    await client.login()
    backend.failing.update({"chargepoints/CP1/status", "chargepoints/CP1/connectors/1/settings"})

    await sync.tick()

    assert await store.get_state("CP1.status.status") is None
    assert await store.get_state("CP1.settings.dimmer") is not None
    assert await store.get_state("CP1.connectors.1.settings.mode") is None
    assert await store.get_state("CP1.connectors.2.settings.mode") is not None
    assert await store.get_state("CP2.status.status") is not None
    assert "Error fetching status for chargepoint CP1" in caplog.text


@pytest.mark.asyncio
async def test_expired_session_triggers_one_relogin(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    backend: FakeChargeAmpsBackend,
    store: InMemoryStateStore,
) -> None:
    await client.login()
    backend.login_response = {"token": "jwt-2"}
    backend.expired.add("chargepoints/CP1/status")
    backend.calls.clear()

    await sync.tick()

    assert client.session.token == "jwt-2"
    assert backend.urls().count("auth/login") == 1
    # The expired fetch is not repeated; the rest of the cycle continues.
    assert backend.urls().count("chargepoints/CP1/status") == 1
    assert await store.get_state("CP2.status.status") is not None


@pytest.mark.asyncio
async def test_failed_relogin_abandons_the_cycle(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    backend: FakeChargeAmpsBackend,
) -> None:
    await client.login()
    backend.login_response = {"message": "account locked"}
    backend.expired.add("chargepoints/CP1/status")
    backend.calls.clear()

    await sync.tick()

    assert client.authenticated is False
    assert "chargepoints/CP2/status" not in backend.urls()

    backend.calls.clear()
    await sync.tick()
    assert backend.calls == []


@pytest.mark.asyncio
async def test_load_settings_skips_status(
    sync: SyncLoop,
    client: ChargeAmpsClient,
    backend: FakeChargeAmpsBackend,
) -> None:
    await client.login()
    backend.calls.clear()

    await sync.load_settings()

    assert all(url.endswith("/settings") for url in backend.urls())
    assert len(backend.urls()) == 6


def test_interval_is_clamped(client: ChargeAmpsClient, mirror: StateMirror) -> None:
    assert SyncLoop(client, mirror, interval=1).interval == 15
    assert SyncLoop(client, mirror, interval=45).interval == 45


class _BlockingSync(SyncLoop):
    def __init__(self, client: ChargeAmpsClient, mirror: StateMirror) -> None:
        super().__init__(client, mirror, interval=15)
        self.release = asyncio.Event()
        self.started = 0

    async def tick(self) -> None:
        self.started += 1
        await self.release.wait()


@pytest.mark.asyncio
async def test_trigger_skips_while_a_tick_is_in_flight(
    client: ChargeAmpsClient,
    mirror: StateMirror,
    caplog: pytest.LogCaptureFixture,
) -> None:
    sync = _BlockingSync(client, mirror)

    assert sync.trigger() is True
    await asyncio.sleep(0)
    assert sync.trigger() is False
    assert sync.trigger() is False
    assert sync.started == 1
    assert sync.skipped_ticks == 2
    assert "skipping this tick" in caplog.text

    sync.release.set()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert sync.trigger() is True
    await sync.stop()


@pytest.mark.asyncio
async def test_start_ticks_immediately_and_stop_cancels(client: ChargeAmpsClient, mirror: StateMirror) -> None:
    sync = _BlockingSync(client, mirror)

    sync.start()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert sync.running is True
    assert sync.started == 1

    await sync.stop()
    assert sync.running is False


@pytest.mark.asyncio
async def test_tick_errors_are_contained(
    client: ChargeAmpsClient,
    mirror: StateMirror,
    caplog: pytest.LogCaptureFixture,
) -> None:
    class _Exploding(SyncLoop):
        async def tick(self) -> None:
            raise RuntimeError("boom")

    sync = _Exploding(client, mirror, interval=15)
    caplog.set_level(logging.ERROR)
    assert sync.trigger() is True
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert "Error refreshing chargepoints" in caplog.text
    await sync.stop()
