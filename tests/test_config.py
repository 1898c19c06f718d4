"""
Tests for configuration and logging setup.
"""

from __future__ import annotations

import json
import logging

import pytest

from utils.config import Config
from utils.logging_config import setup_logging


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("PORT", "DATA_DIR", "ACCESS_TOKEN_SECRET", "ADVERTISE_REQUIRES_VERIFIED", "TOKEN_TTL_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        config = Config.load()

        assert config.port == 5000
        assert config.token_secret is None
        assert config.token_ttl_seconds == 3600
        assert config.advertise_requires_verified is False
        assert config.persist_path("bids").endswith("bids.json")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ADVERTISE_REQUIRES_VERIFIED", "true")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Config.load()

        assert config.port == 8080
        assert config.advertise_requires_verified is True
        assert config.allowed_origins == ["https://a.example", "https://b.example"]
        assert config.log_level == "DEBUG"

    def test_empty_data_dir_means_memory(self):
        assert Config(data_dir="").persist_path("users") is None

    def test_to_dict_hides_secret(self):
        config = Config(token_secret="super-secret")

        assert "super-secret" not in json.dumps(config.to_dict())


class TestLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format(self, capsys):
        setup_logging("INFO", "json")
        logging.getLogger("dreamkeys.test").info("hello %s", "world")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "hello world"
        assert record["levelname"] == "INFO"

    def test_plain_format_and_level(self, capsys):
        setup_logging("WARNING", "text")
        logger = logging.getLogger("dreamkeys.test")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "shown" in out
        assert "hidden" not in out
