"""Periodic sync of charge point status and settings into the state tree."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import Any

from pychargeamps._constants import CONNECTORS_CHANNEL, SETTINGS_CHANNEL, STATUS_CHANNEL
from pychargeamps.client import ChargeAmpsClient
from pychargeamps.config import clamp_interval
from pychargeamps.exceptions import ChargeAmpsSessionExpiredError
from pychargeamps.state.mirror import StateMirror

_logger = logging.getLogger(__name__)

_Fetch = tuple[str, str, Callable[[], Awaitable[dict[str, Any]]]]


class SyncLoop:
    """Poll the API for every known charge point and mirror the results.

    Fetches run one at a time. Each fetch is isolated: an error is logged and
    the loop moves on to the next fetch and the next charge point. A 401
    triggers at most one re-login per tick; the failed fetch is not repeated.

    Scheduling is single-slot: :meth:`trigger` starts a tick unless the
    previous one is still running, in which case the new tick is dropped.
    """

    def __init__(self, client: ChargeAmpsClient, mirror: StateMirror, *, interval: float) -> None:
        self._client = client
        self._mirror = mirror
        self._interval = clamp_interval(interval)
        self._runner: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[None] | None = None
        self.skipped_ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    # ------------------------------------------------------------------
    # Fetch plans
    # ------------------------------------------------------------------

    def _settings_fetches(self, cp_id: str) -> Iterator[_Fetch]:
        client = self._client
        yield (
            f"settings for chargepoint {cp_id}",
            f"{cp_id}.{SETTINGS_CHANNEL}",
            lambda: client.get_chargepoint_settings(cp_id),
        )
        for conn_id in client.connector_ids(cp_id):
            yield (
                f"settings for chargepoint {cp_id}, connector {conn_id}",
                f"{cp_id}.{CONNECTORS_CHANNEL}.{conn_id}.{SETTINGS_CHANNEL}",
                lambda conn_id=conn_id: client.get_connector_settings(cp_id, conn_id),
            )

    def _tick_fetches(self, cp_id: str) -> Iterator[_Fetch]:
        yield (
            f"status for chargepoint {cp_id}",
            f"{cp_id}.{STATUS_CHANNEL}",
            lambda: self._client.get_chargepoint_status(cp_id),
        )
        yield from self._settings_fetches(cp_id)

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    async def _sync_one(self, description: str, prefix: str, fetch: Callable[[], Awaitable[dict[str, Any]]]) -> None:
        try:
            data = await fetch()
        except ChargeAmpsSessionExpiredError:
            raise
        except Exception as exc:
            _logger.error("Error fetching %s: %s", description, exc)
            return
        await self._mirror.mirror(prefix, data)
        _logger.debug("Fetched and saved %s", description)

    async def _run_cycle(self, plan: Callable[[str], Iterator[_Fetch]]) -> None:
        if not self._client.authenticated:
            _logger.warning("Not logged in. Skipping refresh.")
            return

        refreshed = False
        for cp_id in self._client.chargepoint_ids:
            for description, prefix, fetch in plan(cp_id):
                try:
                    await self._sync_one(description, prefix, fetch)
                except ChargeAmpsSessionExpiredError as exc:
                    _logger.error("Error fetching %s: %s", description, exc)
                    if refreshed or not await self._client.refresh_session():
                        _logger.error("Session could not be refreshed; abandoning this refresh")
                        return
                    refreshed = True

    async def tick(self) -> None:
        """Fetch status and settings of every known charge point once.

        Does nothing (and performs no API call) while not logged in.
        """
        _logger.debug("Refreshing chargepoints")
        await self._run_cycle(self._tick_fetches)

    async def load_settings(self) -> None:
        """Initial settings pass for charge points and their connectors."""
        _logger.info("Loading chargepoint settings")
        await self._run_cycle(self._settings_fetches)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def _guarded_tick(self) -> None:
        try:
            await self.tick()
        except Exception:
            _logger.exception("Error refreshing chargepoints")

    def trigger(self) -> bool:
        """Start a tick in the background unless one is still running.

        Returns ``False`` when the tick was skipped.
        """
        if self._inflight is not None and not self._inflight.done():
            self.skipped_ticks += 1
            _logger.warning("Previous refresh still running; skipping this tick")
            return False
        self._inflight = asyncio.create_task(self._guarded_tick(), name="chargeamps-tick")
        return True

    async def _run(self, run_immediately: bool) -> None:
        if run_immediately:
            self.trigger()
        while True:
            await asyncio.sleep(self._interval)
            self.trigger()

    def start(self, *, run_immediately: bool = True) -> None:
        """Tick now (unless told otherwise), then every :attr:`interval` seconds."""
        if self.running:
            return
        _logger.debug("Starting refresh schedule every %s seconds", self._interval)
        self._runner = asyncio.create_task(self._run(run_immediately), name="chargeamps-sync")

    async def stop(self) -> None:
        """Cancel the schedule and any in-flight tick."""
        tasks = [t for t in (self._runner, self._inflight) if t is not None and not t.done()]
        self._runner = None
        self._inflight = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
