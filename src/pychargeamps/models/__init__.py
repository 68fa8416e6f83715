"""Pydantic models for Charge Amps API payloads and the state tree."""

from pychargeamps.models.chargepoint import ChargePoint, Connector
from pychargeamps.models.commands import (
    Command,
    Invalid,
    Reboot,
    RemoteStart,
    RemoteStop,
    SettingUpdate,
)
from pychargeamps.models.state import ObjectType, StateObject, StateValue, ValueType
from pychargeamps.models.token import AuthToken

__all__ = [
    "AuthToken",
    "ChargePoint",
    "Command",
    "Connector",
    "Invalid",
    "ObjectType",
    "Reboot",
    "RemoteStart",
    "RemoteStop",
    "SettingUpdate",
    "StateObject",
    "StateValue",
    "ValueType",
]
