"""Login endpoint.

Endpoint:
  - POST auth/login
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pychargeamps._redact import redact_for_log
from pychargeamps._transport import Transport
from pychargeamps.exceptions import ChargeAmpsAuthenticationError
from pychargeamps.models.token import AuthToken

_logger = logging.getLogger(__name__)

_ENDPOINT = "auth/login"


def parse_login_response(response: Any) -> AuthToken:
    """Validate the login body and extract the bearer token.

    Raises
    ------
    ChargeAmpsAuthenticationError
        If the body is not an object or carries no token.
    """
    if not isinstance(response, dict):
        raise ChargeAmpsAuthenticationError(f"{_ENDPOINT} returned {type(response).__name__}, expected an object")
    try:
        return AuthToken.model_validate({**response, "raw": response})
    except ValidationError as exc:
        raise ChargeAmpsAuthenticationError(f"{_ENDPOINT} response missing token") from exc


async def login(transport: Transport, email: str, password: str) -> AuthToken:
    """Exchange account credentials for a bearer token."""
    response = await transport.request(_ENDPOINT, "POST", {"email": email, "password": password})
    _logger.debug("Login response parsed=%s", redact_for_log(response))
    return parse_login_response(response)
