# src/listingview/config.py

from __future__ import annotations
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from listingview.schemas import ListingTypeConfig

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_LISTING_TYPES_PATH = PACKAGE_DIR / "listing_types.yaml"


class Settings(BaseSettings):
    # Tell Pydantic to load from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",   # ignore unknown env vars
    )

    LOG_LEVEL: str = Field(default="INFO")
    APP_ENV: str = Field(default="dev")

    # Marketplace API used to persist favorites
    MARKETPLACE_API_URL: str = Field(default="http://localhost:3500/api")
    FAVORITES_TIMEOUT_SEC: float = Field(default=10.0)
    FAVORITES_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    FAVORITES_RETRY_WAIT_SEC: float = Field(default=0.2, ge=0)

    # Optional override for the packaged listing_types.yaml
    LISTING_TYPES_PATH: str | None = Field(default=None)


# Instantiate settings once, so you can import anywhere
settings = Settings()


def load_listing_types(path: str | Path | None = None) -> list[ListingTypeConfig]:
    """
    Read listing-type configuration from YAML.

    The file holds a top-level ``listingTypes`` list. Lookup order is the
    explicit ``path``, then ``LISTING_TYPES_PATH``, then the file shipped
    with the package.
    """
    source = Path(path or settings.LISTING_TYPES_PATH or DEFAULT_LISTING_TYPES_PATH)
    with open(source, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    entries = raw.get("listingTypes") or []
    return [ListingTypeConfig.model_validate(entry) for entry in entries]


def find_listing_type(
    listing_types: list[ListingTypeConfig], listing_type: str | None
) -> ListingTypeConfig | None:
    return next((conf for conf in listing_types if conf.listing_type == listing_type), None)
