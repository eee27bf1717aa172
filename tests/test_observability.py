"""Tests for the observability helpers.

Logfire is configured locally by the session fixture, so spans and metrics
are created for real but never leave the process.
"""

import pytest

from lending_catalog.observability import initialize_observability, trace_resource, trace_tool
from lending_catalog.observability.config import (
    DevelopmentConfig,
    ObservabilityConfig,
    ProductionConfig,
    get_environment_config,
)
from lending_catalog.observability.decorators import is_error_response, tool_category
from lending_catalog.observability.metrics import record_circulation_event, record_tool_error


@pytest.fixture(autouse=True)
def clean_logfire_env(monkeypatch):
    for name in [
        "LOGFIRE_TOKEN",
        "LOGFIRE_ENVIRONMENT",
        "LOGFIRE_ENABLED",
        "LOGFIRE_CONSOLE",
        "LOGFIRE_SEND_TO_LOGFIRE",
        "LOGFIRE_SERVICE_NAME",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestEnvironmentConfig:
    """Test how the environment picks logfire settings."""

    def test_development_is_default(self):
        config = get_environment_config()
        assert isinstance(config, DevelopmentConfig)
        assert config.send_to_logfire is False
        assert config.console is False
        assert config.service_name == "lending-catalog"

    def test_production(self, monkeypatch):
        monkeypatch.setenv("LOGFIRE_ENVIRONMENT", "production")
        config = get_environment_config()
        assert isinstance(config, ProductionConfig)
        assert config.send_to_logfire is True

    def test_other_environment(self, monkeypatch):
        monkeypatch.setenv("LOGFIRE_ENVIRONMENT", "staging")
        config = get_environment_config()
        assert type(config) is ObservabilityConfig
        assert config.environment == "staging"

    def test_env_overrides_class_defaults(self, monkeypatch):
        monkeypatch.setenv("LOGFIRE_ENVIRONMENT", "production")
        monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
        assert get_environment_config().send_to_logfire is False

    def test_configure_kwargs(self):
        kwargs = ObservabilityConfig(token="", console=False).configure_kwargs()
        assert kwargs["token"] is None
        assert kwargs["console"] is False
        assert kwargs["service_name"] == "lending-catalog"

        assert ObservabilityConfig(console=True).configure_kwargs()["console"] is None

    def test_disabled_skips_configure(self, monkeypatch):
        monkeypatch.setenv("LOGFIRE_ENABLED", "false")
        config = initialize_observability()
        assert config.enabled is False


class TestDecorators:
    """Test the span decorators."""

    @pytest.mark.parametrize(
        ("tool_name", "category"),
        [
            ("checkout_material", "circulation"),
            ("return_material", "circulation"),
            ("reserve_material", "reservation"),
            ("cancel_reservation", "reservation"),
            ("search_catalog", "discovery"),
            ("register_user", "users"),
            ("ping", "general"),
        ],
    )
    def test_tool_category(self, tool_name, category):
        assert tool_category(tool_name) == category

    def test_is_error_response(self):
        assert is_error_response({"isError": True}) is True
        assert is_error_response({"content": []}) is False
        assert is_error_response(["not", "a", "dict"]) is False

    async def test_trace_tool_passes_result_through(self):
        @trace_tool("checkout_material")
        async def handler(value):
            return {"content": [{"type": "text", "text": value}]}

        result = await handler("ok")
        assert result["content"][0]["text"] == "ok"
        assert handler.__name__ == "handler"

    async def test_trace_tool_reraises(self):
        @trace_tool("return_material")
        async def handler():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await handler()

    async def test_trace_resource(self):
        @trace_resource("activity")
        async def handler():
            return [1, 2, 3]

        assert await handler() == [1, 2, 3]


class TestMetrics:
    def test_recording_does_not_raise(self):
        record_circulation_event("checkout", "Book")
        record_tool_error("checkout_material", "AlreadyOnLoanError")
