"""Session state for authenticated API calls."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    """Bearer-token session obtained from ``auth/login``.

    A session is replaced, never mutated: a successful login produces an
    authenticated session, a failed one produces :meth:`unauthenticated`.

    Parameters
    ----------
    token : str
        JWT bearer token sent as ``Authorization: Bearer <token>``.
    authenticated : bool
        Whether the last login attempt succeeded. The sync loop does nothing
        while this is ``False``.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) of the login.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    token: str = ""
    authenticated: bool = False
    created_at: float = Field(default_factory=time.monotonic)

    @classmethod
    def unauthenticated(cls) -> Session:
        return cls(token="", authenticated=False)

    @property
    def age(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.created_at
