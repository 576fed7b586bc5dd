"""Unit tests for settings and logging setup."""

import pytest
import structlog
from pydantic import ValidationError

from google_drive_connector.config import (
    GoogleAPIConfig,
    LoggingConfig,
    RetrySettings,
    Settings,
)
from google_drive_connector.utils.logging import configure_logging
from google_drive_connector.utils.retry import RetryConfig


class TestSettings:
    """Test cases for environment-driven settings."""

    def test_retry_defaults(self):
        settings = RetrySettings()

        assert settings.max_retry_count == 8
        assert settings.max_retry_wait == 200
        assert settings.max_retry_jitter_wait == 100

    def test_retry_from_environment(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_RETRY_COUNT", "3")
        monkeypatch.setenv("RETRY_MAX_RETRY_WAIT", "15")

        config = RetryConfig.from_settings(RetrySettings())

        assert config.max_attempts == 3
        assert config.max_wait_ms == 15_000

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValidationError):
            RetrySettings(max_retry_count=-1)

    def test_api_config_from_environment(self, monkeypatch):
        monkeypatch.setenv("GDRIVE_PAGE_SIZE", "250")
        monkeypatch.setenv("GDRIVE_INCLUDE_SHARED_DRIVES", "true")

        config = GoogleAPIConfig()

        assert config.page_size == 250
        assert config.include_shared_drives is True

    def test_page_size_bounded(self):
        with pytest.raises(ValidationError):
            GoogleAPIConfig(page_size=1001)

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_root_settings(self):
        settings = Settings()

        assert settings.service_name == "google-drive-sheets-connector"
        assert isinstance(settings.retry, RetrySettings)


class TestConfigureLogging:
    """Test cases for configure_logging."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    @pytest.mark.parametrize("log_format", ["json", "text"])
    def test_configures_structlog(self, log_format):
        logger = configure_logging(LoggingConfig(format=log_format), "test-service")

        assert structlog.is_configured()
        assert logger is not None
        processors = structlog.get_config()["processors"]
        renderer = processors[-1]
        if log_format == "json":
            assert isinstance(renderer, structlog.processors.JSONRenderer)
        else:
            assert isinstance(renderer, structlog.dev.ConsoleRenderer)
