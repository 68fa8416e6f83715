"""HTTP transport for the Charge Amps REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import aiohttp

from pychargeamps._constants import USER_AGENT
from pychargeamps._redact import redact_for_log
from pychargeamps.config import ChargeAmpsConfig
from pychargeamps.exceptions import ChargeAmpsSessionExpiredError, ChargeAmpsTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Endpoint functions only need ``request``; tests pass small fakes that
    record calls instead of opening sockets.
    """

    async def request(self, url: str, method: str, body: Mapping[str, Any] | None = None) -> Any: ...


class HttpTransport:
    """JSON-over-HTTPS transport.

    ``auth_provider`` is called once per request and returns the ``apiKey``
    and ``Authorization`` headers for the current session, so a new login
    takes effect without rebuilding the transport.
    """

    def __init__(
        self,
        config: ChargeAmpsConfig,
        http_session: aiohttp.ClientSession,
        *,
        auth_provider: Callable[[], Mapping[str, str]] = dict,
    ) -> None:
        self._config = config
        self._http = http_session
        self._auth_provider = auth_provider
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _resolve(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._config.base_url.rstrip('/')}/{url.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            **self._auth_provider(),
        }

    async def request(self, url: str, method: str, body: Mapping[str, Any] | None = None) -> Any:
        """Send one request and return the decoded JSON body.

        Returns ``None`` when the server answers with an empty body (the
        command endpoints do). Failures are logged and raised as
        :class:`ChargeAmpsTransportError`; a 401 on a request that carried a
        bearer token raises :class:`ChargeAmpsSessionExpiredError`.
        """
        full_url = self._resolve(url)
        method = method.upper()
        headers = self._headers()
        authenticated = "Authorization" in headers

        _logger.debug(
            "API request %s %s headers=%s body=%s",
            method,
            full_url,
            redact_for_log(headers),
            redact_for_log(body),
        )

        try:
            async with self._http.request(
                method,
                full_url,
                json=dict(body) if body is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            _logger.error("API request failed: %s %s: %s", method, full_url, exc)
            raise ChargeAmpsTransportError(
                f"{method} {full_url} failed: {exc}",
                url=full_url,
            ) from exc

        if status == 401 and authenticated:
            _logger.error("API request rejected, token expired: %s %s", method, full_url)
            raise ChargeAmpsSessionExpiredError(
                f"HTTP 401 from {full_url}",
                status_code=status,
                url=full_url,
            )
        if not 200 <= status < 300:
            _logger.error("API request failed: %s %s returned HTTP %d", method, full_url, status)
            raise ChargeAmpsTransportError(
                f"HTTP {status} from {full_url}: {text[:200]}",
                status_code=status,
                url=full_url,
            )

        if not text.strip():
            _logger.debug("API response %s %s: <empty>", method, full_url)
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.error("API request failed: %s %s returned invalid JSON", method, full_url)
            raise ChargeAmpsTransportError(
                f"Invalid JSON from {full_url}: {text[:200]}",
                status_code=status,
                url=full_url,
            ) from exc

        _logger.debug("API response %s %s: %s", method, full_url, redact_for_log(result))
        return result
