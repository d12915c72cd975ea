"""
Tests for configuration loading, notifications and structured logging.
"""

import io
import json
import logging

import pytest
from rich.console import Console

from compline.config import CompletionConfig, load_config
from compline.host.notify import Notifier
from compline.utils.logger import ComplineLogger, JsonFormatter


class TestCompletionConfig:
    """Test settings from the environment."""

    def test_defaults(self, monkeypatch):
        for name in ("COMPLINE_MATCH_MODE", "COMPLINE_TRIGGER_DELAY_MS", "COMPLINE_LOGGING"):
            monkeypatch.delenv(name, raising=False)
        config = CompletionConfig.from_env()

        assert config.match_mode == "case"
        assert config.trigger_delay_ms == 25
        assert config.initial_rtt_ms == 50.0
        assert not config.enable_logging

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COMPLINE_MATCH_MODE", "SmartCase")
        monkeypatch.setenv("COMPLINE_TRIGGER_DELAY_MS", "40")
        monkeypatch.setenv("COMPLINE_RTT_WINDOW", "5")
        monkeypatch.setenv("COMPLINE_LOGGING", "true")
        config = CompletionConfig.from_env()

        assert config.match_mode == "smartcase"
        assert config.trigger_delay_ms == 40
        assert config.rtt_window == 5
        assert config.enable_logging

    def test_invalid_match_mode(self, monkeypatch):
        monkeypatch.setenv("COMPLINE_MATCH_MODE", "regex")
        with pytest.raises(ValueError):
            CompletionConfig.from_env()

    def test_load_config_reads_dotenv(self, tmp_path, monkeypatch):
        # Recorded so the value load_dotenv sets is undone afterwards
        monkeypatch.setenv("COMPLINE_MATCH_MODE", "case")
        monkeypatch.delenv("COMPLINE_MATCH_MODE")
        env_file = tmp_path / ".env"
        env_file.write_text("COMPLINE_MATCH_MODE=fuzzy\n")
        assert load_config(str(env_file)).match_mode == "fuzzy"


class TestNotifier:
    """Test user-visible notifications."""

    def test_notify_once(self):
        output = io.StringIO()
        notifier = Notifier(console=Console(file=output, force_terminal=False))

        assert notifier.notify_once("lua_ls: -32603 [crashed]", logging.WARNING)
        assert not notifier.notify_once("lua_ls: -32603 [crashed]", logging.WARNING)

        assert output.getvalue().count("lua_ls: -32603 [crashed]") == 1


class TestComplineLogger:
    """Test the structured completion logger."""

    def test_singleton(self):
        assert ComplineLogger() is ComplineLogger()

    def test_configure_writes_per_level_files(self, tmp_path):
        clog = ComplineLogger()
        clog.configure(level="DEBUG", log_dir=str(tmp_path))
        try:
            clog.request_dispatch(1, ["lua_ls"], 1)
            clog.provider_error("lua_ls", -32603, "crashed")
            for handler in clog.logger.handlers:
                handler.flush()

            assert "Dispatch to 1 provider(s)" in (tmp_path / "debug.log").read_text()
            assert "lua_ls: -32603 crashed" in (tmp_path / "warning.log").read_text()
            assert "crashed" not in (tmp_path / "debug.log").read_text()
            assert clog.get_log_directory() == tmp_path
        finally:
            for handler in clog.logger.handlers:
                handler.close()
            clog.logger.handlers.clear()

    def test_json_formatter(self):
        record = logging.LogRecord("compline", logging.INFO, __file__, 1, "popup", None, None)
        record.component = "TRIGGER"
        record.count = 3
        data = json.loads(JsonFormatter().format(record))

        assert data["component"] == "TRIGGER"
        assert data["message"] == "popup"
        assert data["count"] == 3
