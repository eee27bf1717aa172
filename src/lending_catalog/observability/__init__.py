"""Logfire tracing and metrics for the lending catalog server."""

import logging

import logfire

from .config import ObservabilityConfig, get_environment_config
from .decorators import trace_resource, trace_tool

logger = logging.getLogger(__name__)


def initialize_observability(config: ObservabilityConfig | None = None) -> ObservabilityConfig:
    """Configure logfire once at server start and return the settings used."""
    config = config or get_environment_config()

    if not config.enabled:
        logger.debug("Logfire disabled by LOGFIRE_ENABLED")
        return config

    logfire.configure(**config.configure_kwargs())
    logger.info(
        "Logfire configured for %s (export %s)",
        config.environment,
        "on" if config.send_to_logfire else "off",
    )
    return config


__all__ = [
    "ObservabilityConfig",
    "initialize_observability",
    "trace_resource",
    "trace_tool",
]
