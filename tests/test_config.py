"""
Tests for environment-driven settings and logging configuration.
"""

import logging

import pytest

from reformat.config import DEFAULT_CONVERSION_URL, DEFAULT_MAX_FILE_SIZE, Settings
from reformat.utils.http_client import HTTPClientFactory
from reformat.utils.logging_config import LogConfig, level_from_string


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("REFORMAT_CONVERSION_URL", "REFORMAT_MAX_FILE_SIZE",
                     "REFORMAT_QUALITY_PARAM", "REFORMAT_HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.conversion_url == DEFAULT_CONVERSION_URL
        assert settings.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert settings.quality_param == "quality"
        assert settings.http_timeout is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REFORMAT_CONVERSION_URL", "http://convert.internal/api")
        monkeypatch.setenv("REFORMAT_MAX_FILE_SIZE", "2048")
        monkeypatch.setenv("REFORMAT_QUALITY_PARAM", "")
        monkeypatch.setenv("REFORMAT_HTTP_TIMEOUT", "45")

        settings = Settings.from_env()

        assert settings.conversion_url == "http://convert.internal/api"
        assert settings.max_file_size == 2048
        assert settings.quality_param is None
        assert settings.http_timeout == 45.0

    @pytest.mark.parametrize("size", [0, -10])
    def test_rejects_non_positive_ceiling(self, size):
        with pytest.raises(ValueError):
            Settings(max_file_size=size)

    def test_client_timeout_follows_settings(self):
        factory = HTTPClientFactory(Settings(http_timeout=12.5))
        timeout = factory._get_timeout()
        assert timeout.read == 12.5
        assert timeout.connect == 10.0


class TestLoggingConfig:

    @pytest.mark.parametrize("value,expected", [
        ("debug", logging.DEBUG),
        (" WARNING ", logging.WARNING),
        ("fatal", logging.CRITICAL),
        ("chatty", logging.INFO),
    ])
    def test_level_from_string(self, value, expected):
        assert level_from_string(value) == expected

    def test_pytest_defaults_to_warning(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOGLEVEL", raising=False)
        assert LogConfig.get_log_level() == logging.WARNING

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert LogConfig.get_log_level() == logging.DEBUG
