"""Authentication token model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuthToken(BaseModel):
    """Body returned by ``auth/login``.

    Parameters
    ----------
    token : str
        Bearer token for subsequent requests.
    refresh_token : str
        Refresh token, kept for completeness; the bridge re-logs in instead.
    raw : dict
        Full response body.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    token: str = Field(min_length=1)
    refresh_token: str = Field(default="", validation_alias=AliasChoices("refreshToken", "refresh_token"))
    raw: dict[str, Any] = Field(default_factory=dict)
