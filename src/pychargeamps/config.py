"""Bridge configuration for pychargeamps."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pychargeamps._constants import (
    BASE_URL,
    DEFAULT_NAMESPACE,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    MIN_REFRESH_INTERVAL,
)
from pychargeamps.exceptions import ChargeAmpsConfigError


def clamp_interval(seconds: float) -> float:
    """Floor a polling interval to :data:`MIN_REFRESH_INTERVAL` seconds."""
    return max(seconds, MIN_REFRESH_INTERVAL)


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ChargeAmpsConfigError(f"{key} must be numeric, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class ChargeAmpsConfig:
    """Bridge configuration.

    Parameters
    ----------
    email : str
        Charge Amps account e-mail.
    password : str
        Charge Amps account password.
    api_key : str
        Personal API key issued by Charge Amps; sent as the ``apiKey``
        header on every request.
    interval : float
        Requested polling interval in seconds. The effective value is
        :attr:`refresh_interval`, floored to 15 seconds.
    base_url : str
        API base URL including the ``/api/v5`` version path.
    namespace : str
        Prefix of absolute state ids (e.g. ``"chargeamps.0"``). Incoming
        state changes must carry this prefix to be decoded as commands.
    request_timeout : float
        Total timeout per HTTP request in seconds.
    """

    email: str
    password: str
    api_key: str
    interval: float = DEFAULT_REFRESH_INTERVAL
    base_url: str = BASE_URL
    namespace: str = DEFAULT_NAMESPACE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def refresh_interval(self) -> float:
        """Effective polling interval in seconds."""
        return clamp_interval(self.interval)

    @classmethod
    def from_env(cls, **overrides: Any) -> ChargeAmpsConfig:
        """Create configuration from ``CHARGEAMPS_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        ChargeAmpsConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CHARGEAMPS_EMAIL": "email",
            "CHARGEAMPS_PASSWORD": "password",
            "CHARGEAMPS_API_KEY": "api_key",
            "CHARGEAMPS_BASE_URL": "base_url",
            "CHARGEAMPS_NAMESPACE": "namespace",
        }
        config_kwargs: dict[str, Any] = {"email": "", "password": "", "api_key": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        interval = _env_number(env, "CHARGEAMPS_INTERVAL", float)
        if interval is not None:
            config_kwargs["interval"] = interval

        timeout = _env_number(env, "CHARGEAMPS_REQUEST_TIMEOUT", float)
        if timeout is not None:
            config_kwargs["request_timeout"] = timeout

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
