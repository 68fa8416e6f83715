"""Custom exception hierarchy for pychargeamps."""

from __future__ import annotations


class ChargeAmpsError(Exception):
    """Base exception for all pychargeamps errors."""


class ChargeAmpsConfigError(ChargeAmpsError):
    """Invalid or missing configuration."""


class ChargeAmpsTransportError(ChargeAmpsError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ChargeAmpsSessionExpiredError(ChargeAmpsTransportError):
    """Bearer token rejected by the server (HTTP 401).

    The sync loop catches this to trigger a fresh login before the next
    interval.
    """


class ChargeAmpsAuthenticationError(ChargeAmpsError):
    """Login rejected or the login response carried no token."""


class ChargeAmpsCommandError(ChargeAmpsError):
    """A state change could not be turned into a charge point command."""

    def __init__(self, message: str, *, identifier: str = "") -> None:
        self.identifier = identifier
        super().__init__(message)
