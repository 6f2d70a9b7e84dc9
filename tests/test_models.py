"""Tests for the Pydantic models (clink.models)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from clink.models import ClinkConfig, CreditUser, DropRequest, DropResponse, Item, Slot


class TestCreditUser:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("42", 42), ("0", 0), ("-5", -5), ("+3", 3)],
    )
    def test_numeric_text(self, text: str, expected: int) -> None:
        assert CreditUser.model_validate({"drinkBalance": text}).drinkBalance == expected

    @pytest.mark.parametrize("value", [42, "12abc", "", " 7", "1.5", None])
    def test_rejected(self, value: object) -> None:
        with pytest.raises(ValidationError):
            CreditUser.model_validate({"drinkBalance": value})


class TestSlot:
    def _slot(self, number: int) -> dict:
        return {
            "active": True,
            "empty": False,
            "item": {"id": 1, "name": "Coke", "price": 50},
            "machine": 1,
            "number": number,
        }

    def test_count_optional(self) -> None:
        assert Slot.model_validate(self._slot(3)).count is None

    def test_number_range(self) -> None:
        assert Slot.model_validate(self._slot(255)).number == 255
        with pytest.raises(ValidationError):
            Slot.model_validate(self._slot(256))

    def test_text_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Slot.model_validate({**self._slot(1), "count": "4"})


class TestStrictIntegers:
    @pytest.mark.parametrize("price", [50.0, "50", True])
    def test_item_price(self, price: object) -> None:
        with pytest.raises(ValidationError):
            Item.model_validate({"id": 1, "name": "Coke", "price": price})

    def test_item_accepts_int(self) -> None:
        assert Item.model_validate({"id": 1, "name": "Coke", "price": 50}).price == 50

    @pytest.mark.parametrize("balance", ["17", 17.0])
    def test_drop_balance(self, balance: object) -> None:
        with pytest.raises(ValidationError):
            DropResponse.model_validate({"drinkBalance": balance})


class TestDropRequest:
    def test_serialises_to_wire_shape(self) -> None:
        assert DropRequest(machine="snack", slot=0).model_dump_json() == '{"machine":"snack","slot":0}'

    def test_rejects_negative_slot(self) -> None:
        with pytest.raises(ValidationError):
            DropRequest(machine="snack", slot=-1)


class TestClinkConfig:
    def test_defaults(self) -> None:
        config = ClinkConfig()
        assert config.api_base_url == "https://drink.csh.rit.edu"
        assert config.authorization_url == (
            "https://sso.csh.rit.edu/auth/realms/csh/protocol/openid-connect/auth"
        )
        assert config.userinfo_url == (
            "https://sso.csh.rit.edu/auth/realms/csh/protocol/openid-connect/userinfo"
        )
        assert config.scopes == ["openid", "profile", "drink_balance"]
        assert config.realm == "CSH.RIT.EDU"
        assert config.username is None
        assert config.login_timeout is None
        assert config.output.format == "auto"

    def test_unknown_output_format(self) -> None:
        with pytest.raises(ValidationError):
            ClinkConfig.model_validate({"output": {"format": "yaml"}})
