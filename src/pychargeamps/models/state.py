"""State tree object and value models."""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ObjectType(StrEnum):
    DEVICE = "device"
    CHANNEL = "channel"
    FOLDER = "folder"
    STATE = "state"


class ValueType(StrEnum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"
    MIXED = "mixed"

    @classmethod
    def infer(cls, value: Any) -> ValueType:
        """Map a runtime value to its state value type."""
        # bool before int: bool is an int subclass.
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, (int, float)):
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, dict):
            return cls.OBJECT
        if isinstance(value, (list, tuple)):
            return cls.ARRAY
        return cls.MIXED


class StateObject(BaseModel):
    """Metadata of a node in the state tree.

    Created at most once per id; later syncs only write values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ObjectType = ObjectType.STATE
    name: str
    role: str = "value"
    read: bool = True
    write: bool = True
    value_type: ValueType | None = None
    default: Any = None


class StateValue(BaseModel):
    """Current value of a state.

    ``ack=True`` marks a value confirmed by the cloud API; ``ack=False`` is a
    pending user write that the command dispatcher acts on.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    val: Any = None
    ack: bool = False
    ts: float = Field(default_factory=time.time)
