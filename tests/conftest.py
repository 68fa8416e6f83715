from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pychargeamps.client import ChargeAmpsClient
from pychargeamps.config import ChargeAmpsConfig
from pychargeamps.exceptions import ChargeAmpsSessionExpiredError, ChargeAmpsTransportError
from pychargeamps.state.mirror import StateMirror
from pychargeamps.state.store import InMemoryStateStore

_CP_URL = re.compile(r"^chargepoints/(?P<cp>[^/]+)/(?:connectors/(?P<conn>[^/]+)/)?(?P<leaf>[A-Za-z]+)$")


@dataclass
class FakeChargeAmpsBackend:
    """Routes transport requests to canned payloads and records every call."""

    chargepoints: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {
                "id": "CP1",
                "name": "Garage",
                "type": "HALO",
                "firmwareVersion": "5.2.1",
                "connectors": [
                    {"chargePointId": "CP1", "connectorId": 1, "type": "Type2"},
                    {"chargePointId": "CP1", "connectorId": 2, "type": "Schuko"},
                ],
            },
            {"id": "CP2", "name": "Driveway", "type": "AURA", "connectors": []},
        ]
    )
    calls: list[tuple[str, str, Any]] = field(default_factory=list)
    login_response: Any = field(default_factory=lambda: {"token": "jwt-1", "refreshToken": "refresh-1"})
    login_error: Exception | None = None
    owned_error: Exception | None = None
    failing: set[str] = field(default_factory=set)
    """URLs (e.g. ``"chargepoints/CP1/status"``) that raise a transport error."""
    expired: set[str] = field(default_factory=set)
    """URLs that raise a session-expired error once, then succeed."""

    def urls(self, method: str | None = None) -> list[str]:
        return [url for m, url, _ in self.calls if method is None or m == method]

    async def request(self, url: str, method: str, body: Mapping[str, Any] | None = None) -> Any:
        self.calls.append((method, url, dict(body) if body is not None else None))

        if url in self.expired:
            self.expired.discard(url)
            raise ChargeAmpsSessionExpiredError(f"HTTP 401 from {url}", status_code=401, url=url)
        if url in self.failing:
            raise ChargeAmpsTransportError(f"HTTP 500 from {url}", status_code=500, url=url)

        if url == "auth/login":
            if self.login_error is not None:
                raise self.login_error
            return self.login_response
        if url == "chargepoints/owned":
            if self.owned_error is not None:
                raise self.owned_error
            return self.chargepoints

        match = _CP_URL.match(url)
        if match is None:
            raise AssertionError(f"Unexpected url: {url}")
        cp, conn, leaf = match.group("cp"), match.group("conn"), match.group("leaf")

        if method == "GET" and leaf == "status":
            return {"id": cp, "status": "Online", "connectorStatuses": [{"connectorId": 1, "status": "Charging"}]}
        if method == "GET" and leaf == "settings" and conn is None:
            return {"id": cp, "dimmer": "Low", "downLight": True}
        if method == "GET" and leaf == "settings":
            return {"chargePointId": cp, "connectorId": int(conn), "mode": "On", "maxCurrent": 16}
        if method == "PUT" and leaf in {"settings", "reboot", "remoteStart", "remoteStop"}:
            return None
        raise AssertionError(f"Unexpected request: {method} {url}")


@pytest.fixture
def config() -> ChargeAmpsConfig:
    return ChargeAmpsConfig(
        email="user@example.com",
        password="secret",
        api_key="api-key-1",
        interval=15,
        namespace="chargeamps.0",
    )


@pytest.fixture
def backend() -> FakeChargeAmpsBackend:
    return FakeChargeAmpsBackend()


@pytest.fixture
def store(config: ChargeAmpsConfig) -> InMemoryStateStore:
    return InMemoryStateStore(config.namespace)


@pytest.fixture
def mirror(store: InMemoryStateStore) -> StateMirror:
    return StateMirror(store)


@pytest.fixture
def client(config: ChargeAmpsConfig, backend: FakeChargeAmpsBackend, mirror: StateMirror) -> ChargeAmpsClient:
    return ChargeAmpsClient(config, transport=backend, mirror=mirror)
