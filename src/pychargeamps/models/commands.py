"""Commands decoded from state-change identifiers.

:func:`pychargeamps.dispatcher.decode_identifier` turns an absolute state id
into exactly one of these variants. ``Invalid`` carries the reason so
malformed input is logged rather than raised.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class _CommandBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Reboot(_CommandBase):
    kind: Literal["reboot"] = "reboot"
    charge_point_id: str


class RemoteStart(_CommandBase):
    kind: Literal["remote_start"] = "remote_start"
    charge_point_id: str
    connector_id: str


class RemoteStop(_CommandBase):
    kind: Literal["remote_stop"] = "remote_stop"
    charge_point_id: str
    connector_id: str


class SettingUpdate(_CommandBase):
    kind: Literal["setting_update"] = "setting_update"
    charge_point_id: str
    connector_id: str
    key: str
    """Remote setting name; nested leaves are joined with ``.``."""


class Invalid(_CommandBase):
    kind: Literal["invalid"] = "invalid"
    reason: str


Command = Annotated[
    Reboot | RemoteStart | RemoteStop | SettingUpdate | Invalid,
    Field(discriminator="kind"),
]
