"""State store interface and an in-memory implementation."""

from __future__ import annotations

import copy
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pychargeamps.models.state import StateObject, StateValue

_logger = logging.getLogger(__name__)

StateChangeCallback = Callable[[str, StateValue | None], Awaitable[None]]
"""Receives the absolute state id and the new value (``None`` on deletion)."""


class StateStore(Protocol):
    """Operations the bridge needs from the host's state tree.

    Ids may be passed relative to the store namespace (``"CP1.status.power"``)
    or absolute (``"chargeamps.0.CP1.status.power"``).
    """

    namespace: str

    async def set_object_not_exists(self, state_id: str, obj: StateObject) -> bool: ...

    async def get_object(self, state_id: str) -> StateObject | None: ...

    async def set_state(self, state_id: str, val: Any, *, ack: bool) -> None: ...

    async def get_state(self, state_id: str) -> StateValue | None: ...

    def subscribe(self, callback: StateChangeCallback) -> Callable[[], None]: ...


class InMemoryStateStore:
    """Dict-backed state tree.

    Every ``set_state`` and ``delete_state`` is delivered to subscribers
    before the call returns, in subscription order. A failing subscriber is
    logged and does not affect the writer or other subscribers.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace.strip(".")
        self._objects: dict[str, StateObject] = {}
        self._states: dict[str, StateValue] = {}
        self._subscribers: list[StateChangeCallback] = []

    def absolute_id(self, state_id: str) -> str:
        """Return *state_id* with the namespace prefix applied exactly once."""
        if state_id == self.namespace or state_id.startswith(f"{self.namespace}."):
            return state_id
        return f"{self.namespace}.{state_id}"

    async def set_object_not_exists(self, state_id: str, obj: StateObject) -> bool:
        """Create metadata at *state_id* unless some already exists.

        Returns ``True`` when the object was created.
        """
        key = self.absolute_id(state_id)
        if key in self._objects:
            return False
        self._objects[key] = obj
        return True

    async def get_object(self, state_id: str) -> StateObject | None:
        return self._objects.get(self.absolute_id(state_id))

    async def set_state(self, state_id: str, val: Any, *, ack: bool) -> None:
        key = self.absolute_id(state_id)
        state = StateValue(val=copy.deepcopy(val), ack=ack)
        self._states[key] = state
        await self._notify(key, state)

    async def get_state(self, state_id: str) -> StateValue | None:
        return self._states.get(self.absolute_id(state_id))

    async def delete_state(self, state_id: str) -> None:
        key = self.absolute_id(state_id)
        self._objects.pop(key, None)
        if self._states.pop(key, None) is not None:
            await self._notify(key, None)

    def subscribe(self, callback: StateChangeCallback) -> Callable[[], None]:
        """Register *callback* for all state changes; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def ids(self, prefix: str = "") -> list[str]:
        """Sorted absolute ids of all objects under *prefix*."""
        root = self.absolute_id(prefix) if prefix else self.namespace
        return sorted(k for k in self._objects if k == root or k.startswith(f"{root}."))

    async def _notify(self, state_id: str, state: StateValue | None) -> None:
        for callback in list(self._subscribers):
            try:
                await callback(state_id, state)
            except Exception:
                _logger.exception("State change subscriber failed for %s", state_id)
