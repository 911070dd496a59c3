from __future__ import annotations

from datetime import date

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Data sources; the bundled sample listings are used when unset
    listings_path: str | None = Field(default=None, alias="LISTINGS_PATH")
    feed_path: str | None = Field(default=None, alias="FEED_PATH")

    # Dashboard panels
    as_of_date: date | None = Field(default=None, alias="AS_OF_DATE")
    default_estimate_year: int = Field(default=2022, alias="DEFAULT_ESTIMATE_YEAR")
    trend_months: int = Field(default=6, ge=1, alias="TREND_MONTHS")
    top_brands: int = Field(default=8, ge=1, alias="TOP_BRANDS")
    new_listing_days: int = Field(default=7, ge=1, alias="NEW_LISTING_DAYS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
