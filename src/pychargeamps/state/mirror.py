"""Mirror API objects into the state tree, one state per top-level field."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from pychargeamps.models.state import ObjectType, StateObject, ValueType
from pychargeamps.state.store import StateStore

_logger = logging.getLogger(__name__)


class StateMirror:
    """Write API payloads into a :class:`StateStore`.

    Only the first level of a payload becomes individual states. Nested
    objects and lists are stored whole under their field name; the status
    payload's ``connectorStatuses`` list, for example, lands in a single
    ``<cp>.status.connectorStatuses`` state.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store

    @property
    def store(self) -> StateStore:
        return self._store

    async def ensure_object(self, state_id: str, obj: StateObject) -> bool:
        """Create *obj* at *state_id* if absent; store failures are logged."""
        try:
            return await self._store.set_object_not_exists(state_id, obj)
        except Exception:
            _logger.exception("Error creating object %s", state_id)
            return False

    async def write(self, state_id: str, value: Any, *, ack: bool = True) -> None:
        try:
            await self._store.set_state(state_id, value, ack=ack)
        except Exception:
            _logger.exception("Error writing state %s", state_id)

    async def mirror(self, prefix: str, obj: Mapping[str, Any] | BaseModel) -> int:
        """Mirror every top-level field of *obj* under *prefix*.

        Metadata is created only for ids that have none yet; the value is
        always overwritten with ``ack=True``. Returns the number of fields
        written. Failures are logged and stop the remaining fields of this
        object only.
        """
        if isinstance(obj, BaseModel):
            obj = obj.model_dump(by_alias=True, exclude={"raw"})
        written = 0
        try:
            for field, value in obj.items():
                state_id = f"{prefix}.{field}"
                await self._store.set_object_not_exists(
                    state_id,
                    StateObject(
                        type=ObjectType.STATE,
                        name=str(field),
                        role="value",
                        read=True,
                        write=True,
                        value_type=ValueType.infer(value),
                    ),
                )
                await self._store.set_state(state_id, value, ack=True)
                written += 1
        except Exception:
            _logger.exception("Error saving values under %s", prefix)
        return written
