"""Charge point and connector models.

Fields are mapped from the ``chargepoints/owned`` response. Only the fields
the bridge relies on are typed; everything else the API returns survives in
``raw`` and is mirrored as-is.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pychargeamps._constants import FALLBACK_CONNECTOR_IDS


def _as_id(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class Connector(BaseModel):
    """One outlet of a charge point."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    charge_point_id: str = Field(default="", validation_alias=AliasChoices("chargePointId", "charge_point_id"))
    connector_id: str = Field(validation_alias=AliasChoices("connectorId", "connector_id"))
    """Connector number as a string (``"1"``, ``"2"``)."""
    type: str = ""
    """Connector type (e.g. ``"Type2"``, ``"Schuko"``)."""

    @field_validator("charge_point_id", "connector_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> str:
        return _as_id(value)


class ChargePoint(BaseModel):
    """A charge point owned by the account."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    name: str = ""
    type: str = ""
    firmware_version: str = Field(default="", validation_alias=AliasChoices("firmwareVersion", "firmware_version"))
    connectors: list[Connector] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        return {**values, "raw": dict(values)}

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        cp_id = _as_id(value)
        if not cp_id:
            raise ValueError("charge point id must be non-empty")
        return cp_id

    @field_validator("connectors", mode="before")
    @classmethod
    def _drop_malformed_connectors(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [
            item
            for item in value
            if isinstance(item, dict) and item.get("connectorId", item.get("connector_id")) is not None
        ]

    @property
    def connector_ids(self) -> tuple[str, ...]:
        """Connector ids reported by the API, or the fallback pair when none are."""
        discovered = tuple(dict.fromkeys(c.connector_id for c in self.connectors if c.connector_id))
        return discovered or FALLBACK_CONNECTOR_IDS
