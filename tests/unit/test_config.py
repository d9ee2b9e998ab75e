"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from taskdigest.config import Settings, get_settings


class TestSettings:
    """Tests for Settings model."""

    def test_settings_defaults(self) -> None:
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.agent_id == "698dad822332705a73b4cbea"
            assert settings.schedule_id == "698daf7cebe6fd87d1dcc173"
            assert settings.agent_message == "Analyze yesterday's emails and send daily task list"
            assert settings.agent_api_key is None
            assert settings.schedule_log_limit == 10
            assert settings.history_limit == 30
            assert settings.default_scheduled_time == "16:30"
            assert settings.display_timezone == "America/New_York"
            assert settings.trigger_refresh_delay_seconds == 2.0
            assert settings.web_port == 8000
            assert settings.log_level == "INFO"
            assert settings.log_format == "json"

    def test_settings_from_env(self) -> None:
        """Test loading settings from environment variables."""
        with patch.dict(
            os.environ,
            {
                "AGENT_API_URL": "https://agents.example.com/v3/",
                "AGENT_API_KEY": "agent_key",
                "AGENT_ID": "agent_123",
                "SCHEDULER_API_URL": "https://scheduler.example.com",
                "SCHEDULE_ID": "schedule_456",
                "STORAGE_DIR": "/tmp/digest",
                "HISTORY_LIMIT": "5",
                "LOG_FORMAT": "CONSOLE",
            },
            clear=True,
        ):
            settings = Settings(_env_file=None)

            assert settings.agent_api_url == "https://agents.example.com/v3"
            assert settings.agent_api_key == "agent_key"
            assert settings.agent_id == "agent_123"
            assert settings.scheduler_api_url == "https://scheduler.example.com"
            assert settings.schedule_id == "schedule_456"
            assert settings.storage_dir == "/tmp/digest"
            assert settings.history_limit == 5
            assert settings.log_format == "console"

    def test_settings_invalid_log_format(self) -> None:
        """Test that unknown log formats are rejected."""
        with patch.dict(os.environ, {"LOG_FORMAT": "xml"}, clear=True):
            with pytest.raises(Exception):  # pydantic will raise ValidationError
                Settings(_env_file=None)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_singleton(self) -> None:
        """Test that get_settings returns the same instance."""
        import taskdigest.config

        taskdigest.config._settings = None

        with patch.dict(os.environ, {}, clear=True):
            first = get_settings()
            second = get_settings()

        assert first is second
        taskdigest.config._settings = None
