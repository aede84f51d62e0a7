"""
Runtime configuration loaded from environment variables.

Every threshold used by the parsers and validators lives here so that the
heuristic numbers can be tuned per deployment without code changes.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYMENT_ANALYZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ----------------------------
    # Upload validation
    # ----------------------------
    max_file_size: int = Field(default=50 * 1024 * 1024, gt=0)
    allowed_mime_types: List[str] = Field(default_factory=lambda: ["application/pdf"])

    # ----------------------------
    # Extraction heuristics
    # ----------------------------
    invoice_min_amount: Decimal = Field(default=Decimal("3.00"))
    invoice_max_amount: Decimal = Field(default=Decimal("500.00"))
    invoice_total_tolerance: Decimal = Field(default=Decimal("0.01"))
    preview_chars: int = Field(default=1000, gt=0)

    # ----------------------------
    # Business-rule warnings
    # ----------------------------
    max_daily_consignments: int = Field(default=200, ge=0)
    max_daily_payment: Decimal = Field(default=Decimal("1000"))
    discrepancy_threshold: Decimal = Field(default=Decimal("50"))
    max_weekday_rate: Decimal = Field(default=Decimal("10"))
    max_saturday_rate: Decimal = Field(default=Decimal("15"))

    # ----------------------------
    # HTTP
    # ----------------------------
    cors_allow_origins: str = Field(default="")
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
