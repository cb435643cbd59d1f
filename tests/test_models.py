"""Unit tests for models — Pydantic request models."""
from decimal import Decimal

import pytest
from pydantic import ValidationError
from chipledger.models.requests import (
    AddPlayerRequest,
    CreateSessionRequest,
    SessionParametersRequest,
    UpdatePlayerRequest,
)


class TestSessionParametersRequest:
    def test_defaults_are_unset(self):
        req = SessionParametersRequest()
        assert req.model_dump(exclude_none=True) == {}

    def test_numbers(self):
        req = SessionParametersRequest(buy_in_unit_price=100, chip_price=0.5, fee_pool=0)
        assert req.buy_in_unit_price == Decimal(100)
        assert req.chip_price == Decimal("0.5")
        assert req.fee_pool == Decimal(0)

    def test_currency_text(self):
        req = SessionParametersRequest(buy_in_unit_price="¥ 200", fee_pool="¥ 1,000")
        assert req.buy_in_unit_price == Decimal(200)
        assert req.fee_pool == Decimal(1000)

    def test_malformed_text(self):
        with pytest.raises(ValidationError):
            SessionParametersRequest(fee_pool="lots")

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            SessionParametersRequest(fee_pool=-1)

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError):
            SessionParametersRequest(chip_price=0)
        with pytest.raises(ValidationError):
            SessionParametersRequest(buy_in_unit_price="0")


class TestCreateSessionRequest:
    def test_defaults(self):
        req = CreateSessionRequest()
        assert req.player_names == []
        assert req.fee_pool is None

    def test_with_players(self):
        req = CreateSessionRequest(player_names=["A", "B"], chip_price="2")
        assert req.player_names == ["A", "B"]
        assert req.chip_price == Decimal(2)


class TestPlayerRequests:
    def test_add_player_optional_name(self):
        assert AddPlayerRequest().name is None
        assert AddPlayerRequest(name="Alice").name == "Alice"

    def test_add_player_name_too_long(self):
        with pytest.raises(ValidationError):
            AddPlayerRequest(name="x" * 31)

    def test_update_player(self):
        req = UpdatePlayerRequest(buy_in_count=2, chip_balance="1,250")
        assert req.model_dump(exclude_none=True) == {"buy_in_count": 2, "chip_balance": Decimal(1250)}

    def test_update_player_empty_name(self):
        with pytest.raises(ValidationError):
            UpdatePlayerRequest(name="")

    def test_update_player_negative_buy_ins(self):
        with pytest.raises(ValidationError):
            UpdatePlayerRequest(buy_in_count=-1)

    def test_update_player_bad_balance(self):
        with pytest.raises(ValidationError):
            UpdatePlayerRequest(chip_balance="12 chips")
        with pytest.raises(ValidationError):
            UpdatePlayerRequest(chip_balance=-3)
