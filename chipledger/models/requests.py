"""Pydantic request models for REST endpoints."""
from __future__ import annotations
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from chipledger.core.money import parse_amount


def _amount(value: Any) -> Any:
    """Accept plain numbers or currency text like '¥ 1,000'."""
    if value is None:
        return value
    return parse_amount(value)


class SessionParametersRequest(BaseModel):
    buy_in_unit_price: Optional[Decimal] = Field(default=None, gt=0)
    chip_price: Optional[Decimal] = Field(default=None, gt=0)
    fee_pool: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("buy_in_unit_price", "chip_price", "fee_pool", mode="before")
    @classmethod
    def parse_amounts(cls, value: Any) -> Any:
        return _amount(value)


class CreateSessionRequest(SessionParametersRequest):
    player_names: List[str] = Field(default_factory=list, max_length=50)


class AddPlayerRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=30)


class UpdatePlayerRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=30)
    buy_in_count: Optional[int] = Field(default=None, ge=0)
    chip_balance: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("chip_balance", mode="before")
    @classmethod
    def parse_balance(cls, value: Any) -> Any:
        return _amount(value)
