"""Charge point endpoints.

Endpoints:
  - GET chargepoints/owned
  - GET chargepoints/{id}/status
  - GET chargepoints/{id}/settings
  - GET chargepoints/{id}/connectors/{cid}/settings
  - PUT chargepoints/{id}/connectors/{cid}/settings
  - PUT chargepoints/{id}/reboot
  - PUT chargepoints/{id}/connectors/{cid}/remoteStart
  - PUT chargepoints/{id}/connectors/{cid}/remoteStop
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from pychargeamps._transport import Transport
from pychargeamps.models.chargepoint import ChargePoint

_logger = logging.getLogger(__name__)


def _cp_path(charge_point_id: str, *rest: str) -> str:
    parts = ["chargepoints", quote(str(charge_point_id), safe=""), *rest]
    return "/".join(parts)


def _connector_path(charge_point_id: str, connector_id: str, leaf: str) -> str:
    return _cp_path(charge_point_id, "connectors", quote(str(connector_id), safe=""), leaf)


def _as_object(response: Any) -> dict[str, Any]:
    return response if isinstance(response, dict) else {}


def parse_owned_chargepoints(response: Any) -> list[ChargePoint]:
    """Parse the owned charge point list, skipping entries without an id."""
    items = response if isinstance(response, list) else []
    chargepoints: list[ChargePoint] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            chargepoints.append(ChargePoint.model_validate(item))
        except ValidationError:
            _logger.warning("Skipping charge point without a usable id: %s", item.get("name", "<unnamed>"))
    return chargepoints


async def fetch_owned_chargepoints(transport: Transport) -> list[ChargePoint]:
    """Fetch the charge points owned by the logged-in account."""
    response = await transport.request("chargepoints/owned", "GET")
    return parse_owned_chargepoints(response)


async def fetch_status(transport: Transport, charge_point_id: str) -> dict[str, Any]:
    """Fetch live status (charge point + per-connector status list)."""
    return _as_object(await transport.request(_cp_path(charge_point_id, "status"), "GET"))


async def fetch_settings(transport: Transport, charge_point_id: str) -> dict[str, Any]:
    """Fetch charge point level settings (dimmer, download mode, ...)."""
    return _as_object(await transport.request(_cp_path(charge_point_id, "settings"), "GET"))


async def fetch_connector_settings(transport: Transport, charge_point_id: str, connector_id: str) -> dict[str, Any]:
    """Fetch settings of one connector (mode, maxCurrent, cable lock, ...)."""
    return _as_object(await transport.request(_connector_path(charge_point_id, connector_id, "settings"), "GET"))


async def update_connector_settings(
    transport: Transport,
    charge_point_id: str,
    connector_id: str,
    settings: Mapping[str, Any],
) -> Any:
    """Write a partial settings object to one connector."""
    return await transport.request(_connector_path(charge_point_id, connector_id, "settings"), "PUT", settings)


async def reboot(transport: Transport, charge_point_id: str) -> Any:
    return await transport.request(_cp_path(charge_point_id, "reboot"), "PUT")


async def remote_start(transport: Transport, charge_point_id: str, connector_id: str) -> Any:
    return await transport.request(_connector_path(charge_point_id, connector_id, "remoteStart"), "PUT")


async def remote_stop(transport: Transport, charge_point_id: str, connector_id: str) -> Any:
    return await transport.request(_connector_path(charge_point_id, connector_id, "remoteStop"), "PUT")
