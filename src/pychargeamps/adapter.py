"""Host lifecycle glue: wires client, mirror, sync loop and dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pychargeamps._constants import CONTROL_CHANNEL, REBOOT_STATE, REMOTE_START_PREFIX, REMOTE_STOP_PREFIX
from pychargeamps.client import ChargeAmpsClient
from pychargeamps.config import ChargeAmpsConfig
from pychargeamps.dispatcher import CommandDispatcher
from pychargeamps.models.chargepoint import ChargePoint
from pychargeamps.models.state import ObjectType, StateObject, StateValue, ValueType
from pychargeamps.state.mirror import StateMirror
from pychargeamps.state.store import StateStore
from pychargeamps.sync import SyncLoop

_logger = logging.getLogger(__name__)


def _button(name: str) -> StateObject:
    return StateObject(
        type=ObjectType.STATE,
        name=name,
        role="button",
        read=False,
        write=True,
        value_type=ValueType.BOOLEAN,
        default=False,
    )


class ChargeAmpsAdapter:
    """Charge Amps bridge as seen by the host runtime.

    The host calls :meth:`on_ready` once configuration is available,
    forwards state changes to :meth:`on_state_change` and calls
    :meth:`on_unload` on shutdown. Hosts without such hooks can use the
    adapter as an async context manager instead.
    """

    def __init__(
        self,
        config: ChargeAmpsConfig,
        store: StateStore,
        *,
        client: ChargeAmpsClient | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self.mirror = StateMirror(store)
        self.client = client if client is not None else ChargeAmpsClient(config, mirror=self.mirror)
        self.sync = SyncLoop(self.client, self.mirror, interval=config.interval)
        self.dispatcher = CommandDispatcher(self.client, self.mirror, namespace=store.namespace)
        self._unsubscribe: Callable[[], None] | None = None

    async def __aenter__(self) -> ChargeAmpsAdapter:
        await self.on_ready()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.on_unload(lambda: None)

    async def prepare(self) -> bool:
        """Create the device object, log in and build the control tree.

        Returns the login result; nothing else is done when it is ``False``.
        """
        await self.mirror.ensure_object(
            self._store.namespace,
            StateObject(type=ObjectType.DEVICE, name="Charge Amps", read=True, write=False),
        )
        if not await self.client.login(self._config.email, self._config.password, self._config.api_key):
            return False
        for chargepoint in self.client.chargepoints:
            await self.create_control_states(chargepoint)
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self.on_state_change)
        return True

    async def on_ready(self) -> None:
        """Log in, build the control tree and start polling.

        A failed login is logged; the adapter keeps running without sync.
        """
        try:
            _logger.info("Charge Amps bridge is starting...")
            _logger.info("Refresh interval: %s seconds", self.sync.interval)
            if not await self.prepare():
                _logger.error("Login failed. Bridge will not sync.")
                return
            await self.sync.load_settings()
            self.sync.start(run_immediately=True)
        except Exception:
            _logger.exception("Error in on_ready")

    async def create_control_states(self, chargepoint: ChargePoint) -> None:
        """Create the Control channel with Reboot and per-connector start/stop buttons."""
        cp_id = chargepoint.id
        await self.mirror.ensure_object(
            cp_id,
            StateObject(type=ObjectType.DEVICE, name=chargepoint.name or cp_id, read=True, write=False),
        )
        await self.mirror.ensure_object(
            f"{cp_id}.{CONTROL_CHANNEL}",
            StateObject(type=ObjectType.FOLDER, name=CONTROL_CHANNEL, read=True, write=True),
        )
        await self.mirror.ensure_object(f"{cp_id}.{CONTROL_CHANNEL}.{REBOOT_STATE}", _button(REBOOT_STATE))
        for conn_id in chargepoint.connector_ids:
            await self.mirror.ensure_object(
                f"{cp_id}.{CONTROL_CHANNEL}.{REMOTE_START_PREFIX}{conn_id}",
                _button(f"Remote Start for Connector {conn_id}"),
            )
            await self.mirror.ensure_object(
                f"{cp_id}.{CONTROL_CHANNEL}.{REMOTE_STOP_PREFIX}{conn_id}",
                _button(f"Remote Stop for Connector {conn_id}"),
            )
        _logger.info("Control states for %s created (connectors: %s)", cp_id, ", ".join(chargepoint.connector_ids))

    async def on_state_change(self, identifier: str, state: StateValue | None) -> None:
        await self.dispatcher.handle_change(identifier, state)

    async def on_unload(self, callback: Callable[[], None]) -> None:
        """Stop polling and close the client; *callback* is always invoked."""
        try:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
            await self.sync.stop()
            await self.client.close()
        except Exception:
            _logger.exception("Error during unload")
        finally:
            callback()
