"""Turn user writes in the state tree into Charge Amps API commands.

State ids are decoded relative to the adapter namespace::

    <ns>.<cp>.Control.Reboot                      -> Reboot(cp)
    <ns>.<cp>.Control.RemoteStart_<conn>          -> RemoteStart(cp, conn)
    <ns>.<cp>.Control.RemoteStop_<conn>           -> RemoteStop(cp, conn)
    <ns>.<cp>.connectors.<conn>.settings.<key>    -> SettingUpdate(cp, conn, key)
    <ns>.<cp>.<conn>.settings.<key>               -> SettingUpdate(cp, conn, key)

Anything else decodes to :class:`Invalid`.
"""

from __future__ import annotations

import logging
from typing import Any

from pychargeamps._constants import (
    CONNECTORS_CHANNEL,
    CONTROL_CHANNEL,
    REBOOT_STATE,
    REMOTE_START_PREFIX,
    REMOTE_STOP_PREFIX,
    SETTINGS_CHANNEL,
)
from pychargeamps.client import ChargeAmpsClient
from pychargeamps.models.commands import (
    Command,
    Invalid,
    Reboot,
    RemoteStart,
    RemoteStop,
    SettingUpdate,
)
from pychargeamps.models.state import StateValue
from pychargeamps.state.mirror import StateMirror

_logger = logging.getLogger(__name__)

#: Minimum number of segments after the namespace: ``<cp>.<channel>.<state>``.
_MIN_RELATIVE_SEGMENTS = 3


def _decode_setting(cp_id: str, parts: list[str]) -> Command:
    index = parts.index(SETTINGS_CHANNEL, 1)
    between = parts[1:index]
    if len(between) == 2 and between[0] == CONNECTORS_CHANNEL:
        connector_id = between[1]
    elif len(between) == 1 and between[0] != CONNECTORS_CHANNEL:
        connector_id = between[0]
    else:
        return Invalid(reason="settings are only writable per connector")
    key = ".".join(parts[index + 1 :])
    if not key:
        return Invalid(reason="setting key could not be determined")
    return SettingUpdate(charge_point_id=cp_id, connector_id=connector_id, key=key)


def decode_identifier(identifier: str, namespace: str) -> Command:
    """Decode an absolute state id into a command.

    Never raises; malformed ids come back as :class:`Invalid` with a reason.
    """
    prefix = f"{namespace.strip('.')}."
    if not identifier.startswith(prefix):
        return Invalid(reason=f"outside namespace {namespace!r}")

    parts = identifier[len(prefix) :].split(".")
    if len(parts) < _MIN_RELATIVE_SEGMENTS or not all(parts):
        return Invalid(reason="expected <chargepoint>.<channel>.<state>")

    cp_id, leaf = parts[0], parts[-1]
    if leaf == REBOOT_STATE:
        return Reboot(charge_point_id=cp_id)
    if leaf.startswith(REMOTE_START_PREFIX):
        connector_id = leaf[len(REMOTE_START_PREFIX) :]
        if not connector_id:
            return Invalid(reason="connector id is missing for RemoteStart")
        return RemoteStart(charge_point_id=cp_id, connector_id=connector_id)
    if leaf.startswith(REMOTE_STOP_PREFIX):
        connector_id = leaf[len(REMOTE_STOP_PREFIX) :]
        if not connector_id:
            return Invalid(reason="connector id is missing for RemoteStop")
        return RemoteStop(charge_point_id=cp_id, connector_id=connector_id)
    if SETTINGS_CHANNEL in parts[1:]:
        return _decode_setting(cp_id, parts)
    return Invalid(reason="unknown command")


class CommandDispatcher:
    """React to unacknowledged state changes by calling the API.

    Acknowledged changes are the bridge's own writes and are ignored. Every
    failure is logged here; nothing is retried and nothing propagates.
    """

    def __init__(self, client: ChargeAmpsClient, mirror: StateMirror, *, namespace: str) -> None:
        self._client = client
        self._mirror = mirror
        self._namespace = namespace

    async def handle_change(self, identifier: str, state: StateValue | None) -> None:
        if state is None:
            _logger.info("State %s deleted", identifier)
            return
        if state.ack:
            return

        _logger.info("State change detected: %s, value: %s", identifier, state.val)
        command = decode_identifier(identifier, self._namespace)
        try:
            await self._dispatch(identifier, state.val, command)
        except Exception as exc:
            _logger.error("Error processing state change for %s: %s", identifier, exc)

    async def _dispatch(self, identifier: str, value: Any, command: Command) -> None:
        if isinstance(command, Invalid):
            _logger.warning("Ignoring state change %s: %s", identifier, command.reason)
        elif isinstance(command, Reboot):
            await self._client.reboot(command.charge_point_id)
            await self._release_button(identifier)
        elif isinstance(command, RemoteStart):
            await self._client.remote_start(command.charge_point_id, command.connector_id)
            await self._release_button(identifier)
        elif isinstance(command, RemoteStop):
            await self._client.remote_stop(command.charge_point_id, command.connector_id)
            await self._release_button(identifier)
        elif isinstance(command, SettingUpdate):
            _logger.info(
                "Updating setting %s for chargepoint %s, connector %s",
                command.key,
                command.charge_point_id,
                command.connector_id,
            )
            await self._client.update_connector_settings(
                command.charge_point_id,
                command.connector_id,
                {command.key: value},
            )
            await self._mirror.write(identifier, value, ack=True)

    async def _release_button(self, identifier: str) -> None:
        if f".{CONTROL_CHANNEL}." in identifier:
            await self._mirror.write(identifier, False, ack=True)
