"""Central configuration for the price batch package.

Values come from ``PRICE_BATCH_*`` environment variables (or a ``.env``
file); command-line overrides are passed straight to ``load_settings``.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path.cwd()
DEFAULT_DATA_DIR = BASE_DIR / "data"
BATCHES_FILE = "batches.json"
CATALOG_FILE = "master_items.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PRICE_BATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory holding batches.json")
    catalog: Optional[Path] = Field(default=None, description="Master item list; defaults to data_dir/master_items.json")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @property
    def batches_path(self) -> Path:
        return self.data_dir / BATCHES_FILE

    @property
    def catalog_path(self) -> Path:
        return self.catalog or self.data_dir / CATALOG_FILE


def load_settings(data_dir: str | Path | None = None, catalog_path: str | Path | None = None) -> Settings:
    overrides = {}
    if data_dir:
        overrides["data_dir"] = data_dir
    if catalog_path:
        overrides["catalog"] = catalog_path
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level, logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if settings.log_json
                else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


SETTINGS = load_settings()
