"""Configuration management for the Lending Catalog.

Settings are read from ``LENDING_CATALOG_*`` environment variables or a
``.env`` file and validated with Pydantic v2. They cover:
1. Catalog defaults - name and standard loan period
2. Startup behaviour - demo seed data and snapshot location
3. Server metadata - name and version used by the MCP host
4. Logging - level and debug mode
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """Lending catalog configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LENDING_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Catalog ===

    catalog_name: str = Field(
        default="Central Library",
        description="Display name of the catalog",
        min_length=1,
        max_length=200,
    )

    default_loan_days: int = Field(
        default=14,
        description="Loan limit in days applied to new checkouts",
        ge=1,
        le=365,
    )

    # === Startup ===

    seed_demo_data: bool = Field(
        default=True,
        description="Populate an empty catalog with the demo materials and users",
    )

    snapshot_path: Path | None = Field(
        default=None,
        description="JSON snapshot to load at startup and save at shutdown",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="lending-catalog",
        description="Name reported to MCP clients",
        pattern=r"^[a-z0-9-]+$",
        min_length=3,
        max_length=50,
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version reported to clients",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Development ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("snapshot_path")
    @classmethod
    def absolute_snapshot_path(cls, v: Path | None) -> Path | None:
        if v is None:
            return v
        return v.absolute()

    @property
    def is_development(self) -> bool:
        return self.debug or self.log_level == "DEBUG"

    @property
    def server_info(self) -> dict[str, str]:
        """Server name and version for the MCP handshake."""
        return {"name": self.server_name, "version": self.server_version}


@lru_cache(maxsize=1)
def get_config() -> CatalogConfig:
    """Process-wide configuration, read from the environment on first use."""
    return CatalogConfig()


def reset_config() -> None:
    """Forget the cached configuration so the next call re-reads the environment."""
    get_config.cache_clear()
