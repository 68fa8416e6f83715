"""Tests for charge point, command and state models."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from pychargeamps._api.chargepoints import parse_owned_chargepoints
from pychargeamps._api.login import parse_login_response
from pychargeamps.exceptions import ChargeAmpsAuthenticationError
from pychargeamps.models import ChargePoint, Command, Invalid, RemoteStart, ValueType


class TestChargePoint:
    def test_connector_ids_are_discovered(self) -> None:
        cp = ChargePoint.model_validate(
            {"id": "CP1", "connectors": [{"chargePointId": "CP1", "connectorId": 1}, {"connectorId": 3}]}
        )
        assert cp.connector_ids == ("1", "3")

    def test_connector_ids_fall_back_when_none_reported(self) -> None:
        assert ChargePoint.model_validate({"id": "CP1"}).connector_ids == ("1", "2")
        assert ChargePoint.model_validate({"id": "CP1", "connectors": None}).connector_ids == ("1", "2")

    def test_malformed_connectors_are_dropped(self) -> None:
        cp = ChargePoint.model_validate({"id": "CP1", "connectors": [{"type": "Type2"}, "junk", {"connectorId": 2}]})
        assert cp.connector_ids == ("2",)

    def test_numeric_id_is_normalized_and_raw_kept(self) -> None:
        payload = {"id": 2012, "name": "Garage", "isLoadbalanced": False}
        cp = ChargePoint.model_validate(payload)
        assert cp.id == "2012"
        assert cp.raw == payload

    def test_missing_id_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChargePoint.model_validate({"id": "  "})

    def test_owned_list_skips_entries_without_id(self) -> None:
        parsed = parse_owned_chargepoints([{"id": "CP1"}, {"name": "ghost"}, "junk"])
        assert [cp.id for cp in parsed] == ["CP1"]
        assert parse_owned_chargepoints({"unexpected": "object"}) == []


class TestLoginResponse:
    def test_token_is_extracted(self) -> None:
        token = parse_login_response({"message": "ok", "token": "jwt", "refreshToken": "r", "user": {"id": "u"}})
        assert token.token == "jwt"
        assert token.refresh_token == "r"
        assert token.raw["user"] == {"id": "u"}

    @pytest.mark.parametrize("body", [None, [], {"message": "bad"}, {"token": ""}, {"token": None}])
    def test_malformed_body_raises(self, body: object) -> None:
        with pytest.raises(ChargeAmpsAuthenticationError):
            parse_login_response(body)


def test_value_type_inference() -> None:
    assert ValueType.infer(True) is ValueType.BOOLEAN
    assert ValueType.infer(16) is ValueType.NUMBER
    assert ValueType.infer(7.4) is ValueType.NUMBER
    assert ValueType.infer("On") is ValueType.STRING
    assert ValueType.infer({"a": 1}) is ValueType.OBJECT
    assert ValueType.infer([1]) is ValueType.ARRAY
    assert ValueType.infer(None) is ValueType.MIXED


def test_command_union_is_discriminated_by_kind() -> None:
    adapter: TypeAdapter[Command] = TypeAdapter(Command)
    parsed = adapter.validate_python({"kind": "remote_start", "charge_point_id": "CP1", "connector_id": "1"})
    assert parsed == RemoteStart(charge_point_id="CP1", connector_id="1")
    assert isinstance(adapter.validate_python({"kind": "invalid", "reason": "x"}), Invalid)
