"""Application settings loaded from the environment."""
from __future__ import annotations
from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Defaults for new sessions plus display and logging options."""

    model_config = SettingsConfigDict(
        env_prefix="CHIPLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_buy_in_unit_price: Decimal = Field(
        default=Decimal("200"), gt=0, description="Price of one buy-in unit"
    )
    default_chip_price: Decimal = Field(
        default=Decimal("1"), gt=0, description="Monetary value of one chip"
    )
    default_fee_pool: Decimal = Field(
        default=Decimal("1000"), ge=0, description="Table fee recovered from winners"
    )
    currency_symbol: str = Field(default="¥", min_length=1, max_length=3)
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


settings = Settings()
