"""High-level async client for the Charge Amps cloud API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from pychargeamps._api import chargepoints as _cp_api
from pychargeamps._api.login import login as _login
from pychargeamps._transport import HttpTransport, Transport
from pychargeamps.config import ChargeAmpsConfig
from pychargeamps.exceptions import ChargeAmpsAuthenticationError, ChargeAmpsError
from pychargeamps.models.chargepoint import ChargePoint
from pychargeamps.session import Session
from pychargeamps.state.mirror import StateMirror

_logger = logging.getLogger(__name__)


class ChargeAmpsClient:
    """Async client for the Charge Amps API.

    Owns the :class:`Session` and the list of known charge points. Login
    never raises; read and action calls raise :class:`ChargeAmpsError` so the
    sync loop and command dispatcher decide how to isolate failures.

    Usage::

        async with ChargeAmpsClient(config, mirror=mirror) as client:
            if await client.login():
                status = await client.get_chargepoint_status(client.chargepoint_ids[0])
    """

    def __init__(
        self,
        config: ChargeAmpsConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        mirror: StateMirror | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._mirror = mirror
        self._session = Session.unauthenticated()
        self._credentials: tuple[str, str, str] = (config.email, config.password, config.api_key)
        self._chargepoints: dict[str, ChargePoint] = {}

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ChargeAmpsClient:
        self._require_transport()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Drop the session and close the HTTP session if this client opened it."""
        self._session = Session.unauthenticated()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def authenticated(self) -> bool:
        return self._session.authenticated

    @property
    def chargepoint_ids(self) -> list[str]:
        """Ids of the charge points found by the last successful discovery."""
        return list(self._chargepoints)

    @property
    def chargepoints(self) -> list[ChargePoint]:
        return list(self._chargepoints.values())

    def connector_ids(self, charge_point_id: str) -> tuple[str, ...]:
        """Connector ids of a known charge point (fallback ids if unknown)."""
        chargepoint = self._chargepoints.get(charge_point_id)
        if chargepoint is None:
            return ChargePoint(id=charge_point_id).connector_ids
        return chargepoint.connector_ids

    def _auth_headers(self) -> dict[str, str]:
        headers = {"apiKey": self._credentials[2]}
        if self._session.token:
            headers["Authorization"] = f"Bearer {self._session.token}"
        return headers

    def _require_transport(self) -> Transport:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session, auth_provider=self._auth_headers)
        return self._transport

    def _require_authenticated(self) -> Transport:
        if not self._session.authenticated:
            raise ChargeAmpsAuthenticationError("Not logged in")
        return self._require_transport()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(
        self,
        email: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
    ) -> bool:
        """Log in and discover owned charge points.

        Arguments default to the configured credentials. Returns ``True`` on
        success. Any failure is logged, leaves the client unauthenticated and
        returns ``False``. A failing discovery is logged but keeps the login.
        """
        self._credentials = (
            email if email is not None else self._config.email,
            password if password is not None else self._config.password,
            api_key if api_key is not None else self._config.api_key,
        )
        # Drop the old token so it is not sent with the login request.
        self._session = Session.unauthenticated()
        try:
            _logger.debug("Logging in to Charge Amps")
            token = await _login(self._require_transport(), self._credentials[0], self._credentials[1])
        except ChargeAmpsError as exc:
            _logger.error("Login failed: %s", exc)
            return False
        except Exception:
            _logger.exception("Login failed")
            return False

        self._session = Session(token=token.token, authenticated=True)
        _logger.info("Logged in to Charge Amps")
        await self._discover_chargepoints()
        return True

    async def refresh_session(self) -> bool:
        """Log in again with the credentials of the last attempt."""
        _logger.info("Refreshing Charge Amps session")
        return await self.login(*self._credentials)

    async def _discover_chargepoints(self) -> None:
        try:
            chargepoints = await self.get_owned_chargepoints()
        except Exception as exc:
            _logger.error("Error fetching chargepoints: %s", exc)
            return

        self._chargepoints = {cp.id: cp for cp in chargepoints}
        _logger.info("Discovered %d chargepoint(s): %s", len(chargepoints), ", ".join(self._chargepoints))
        if self._mirror is None:
            return
        for chargepoint in chargepoints:
            await self._mirror.mirror(chargepoint.id, chargepoint.raw)

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_owned_chargepoints(self) -> list[ChargePoint]:
        """Fetch the charge points owned by the account."""
        _logger.debug("Fetching owned chargepoints")
        return await _cp_api.fetch_owned_chargepoints(self._require_authenticated())

    async def get_chargepoint_status(self, charge_point_id: str) -> dict[str, Any]:
        _logger.debug("Fetching status for chargepoint %s", charge_point_id)
        return await _cp_api.fetch_status(self._require_authenticated(), charge_point_id)

    async def get_chargepoint_settings(self, charge_point_id: str) -> dict[str, Any]:
        _logger.debug("Fetching settings for chargepoint %s", charge_point_id)
        return await _cp_api.fetch_settings(self._require_authenticated(), charge_point_id)

    async def get_connector_settings(self, charge_point_id: str, connector_id: str) -> dict[str, Any]:
        _logger.debug("Fetching settings for chargepoint %s, connector %s", charge_point_id, connector_id)
        return await _cp_api.fetch_connector_settings(self._require_authenticated(), charge_point_id, connector_id)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def update_connector_settings(
        self,
        charge_point_id: str,
        connector_id: str,
        settings: Mapping[str, Any],
    ) -> Any:
        """Write *settings* to one connector; failures are logged and re-raised."""
        _logger.info("Updating settings for chargepoint %s, connector %s", charge_point_id, connector_id)
        try:
            response = await _cp_api.update_connector_settings(
                self._require_authenticated(), charge_point_id, connector_id, settings
            )
        except ChargeAmpsError as exc:
            _logger.error(
                "Error updating settings for chargepoint %s, connector %s: %s", charge_point_id, connector_id, exc
            )
            raise
        _logger.info("Settings for chargepoint %s, connector %s updated", charge_point_id, connector_id)
        return response

    async def reboot(self, charge_point_id: str) -> Any:
        """Reboot a charge point; failures are logged and re-raised."""
        _logger.info("Rebooting chargepoint %s", charge_point_id)
        try:
            response = await _cp_api.reboot(self._require_authenticated(), charge_point_id)
        except ChargeAmpsError as exc:
            _logger.error("Error rebooting chargepoint %s: %s", charge_point_id, exc)
            raise
        _logger.info("Reboot successful for chargepoint %s", charge_point_id)
        return response

    async def remote_start(self, charge_point_id: str, connector_id: str) -> Any:
        """Start charging on a connector; failures are logged and re-raised."""
        _logger.info("Starting remote charging for chargepoint %s, connector %s", charge_point_id, connector_id)
        try:
            response = await _cp_api.remote_start(self._require_authenticated(), charge_point_id, connector_id)
        except ChargeAmpsError as exc:
            _logger.error(
                "Error starting remote charging for chargepoint %s, connector %s: %s",
                charge_point_id,
                connector_id,
                exc,
            )
            raise
        _logger.info("Remote start successful for chargepoint %s, connector %s", charge_point_id, connector_id)
        return response

    async def remote_stop(self, charge_point_id: str, connector_id: str) -> Any:
        """Stop charging on a connector; failures are logged and re-raised."""
        _logger.info("Stopping remote charging for chargepoint %s, connector %s", charge_point_id, connector_id)
        try:
            response = await _cp_api.remote_stop(self._require_authenticated(), charge_point_id, connector_id)
        except ChargeAmpsError as exc:
            _logger.error(
                "Error stopping remote charging for chargepoint %s, connector %s: %s",
                charge_point_id,
                connector_id,
                exc,
            )
            raise
        _logger.info("Remote stop successful for chargepoint %s, connector %s", charge_point_id, connector_id)
        return response
