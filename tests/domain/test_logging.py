"""Tests for the logging helpers."""

import structlog

from shop.utils.logging import add_context, clear_context, get_log_level, log_context


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"


class TestLogContext:
    def teardown_method(self):
        clear_context()

    def test_values_bound_only_inside_block(self):
        add_context(request_id="abc")
        with log_context(customer_id="42"):
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"request_id": "abc", "customer_id": "42"}
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc"}

    def test_clear_context(self):
        add_context(request_id="abc")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
