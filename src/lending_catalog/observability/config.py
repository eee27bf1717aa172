"""Logfire settings for the lending catalog server.

Fields read logfire's own environment variables (``LOGFIRE_TOKEN``,
``LOGFIRE_ENVIRONMENT``, ``LOGFIRE_CONSOLE``, ``LOGFIRE_SEND_TO_LOGFIRE``) plus
``LOGFIRE_ENABLED`` to switch tracing off entirely. The environment name picks
the defaults: local runs never export, deployed servers do.
"""

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilityConfig(BaseSettings):
    """Configuration for Logfire observability."""

    model_config = SettingsConfigDict(env_prefix="LOGFIRE_", extra="ignore")

    token: str | None = None
    service_name: str = "lending-catalog"
    environment: str = "development"

    enabled: bool = True
    # stdout carries the stdio transport
    console: bool = False
    send_to_logfire: bool = False

    def configure_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``logfire.configure``."""
        return {
            "token": self.token or None,
            "service_name": self.service_name,
            "environment": self.environment,
            "send_to_logfire": self.send_to_logfire,
            "console": None if self.console else False,
        }


class ProductionConfig(ObservabilityConfig):
    """Deployed servers export spans and metrics."""

    send_to_logfire: bool = True


class DevelopmentConfig(ObservabilityConfig):
    """Local runs keep everything in-process; no token needed."""

    send_to_logfire: bool = False


def get_environment_config() -> ObservabilityConfig:
    """Pick the configuration class for ``LOGFIRE_ENVIRONMENT``."""
    environment = ObservabilityConfig().environment

    if environment == "production":
        return ProductionConfig()
    if environment == "development":
        return DevelopmentConfig()
    return ObservabilityConfig()
