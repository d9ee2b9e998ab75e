"""Configuration management for the task digest dashboard."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Agent Service Configuration
    agent_api_url: str = Field(
        default="https://agent-prod.studio.lyzr.ai/v3/inference",
        description="Base URL of the agent execution service",
    )
    agent_api_key: str | None = Field(default=None, description="Agent service API key")
    agent_id: str = Field(
        default="698dad822332705a73b4cbea", description="Identifier of the email task agent"
    )
    agent_message: str = Field(
        default="Analyze yesterday's emails and send daily task list",
        description="Instruction sent to the agent for an on-demand run",
    )
    agent_user_id: str | None = Field(
        default=None, description="User identifier forwarded with agent calls"
    )

    # Scheduler Service Configuration
    scheduler_api_url: str = Field(
        default="https://rag-prod.studio.lyzr.ai/v3/scheduler",
        description="Base URL of the scheduler service",
    )
    scheduler_api_key: str | None = Field(default=None, description="Scheduler API key")
    schedule_id: str = Field(
        default="698daf7cebe6fd87d1dcc173", description="Identifier of the daily schedule"
    )
    schedule_log_limit: int = Field(
        default=10, description="How many recent executions to show"
    )

    # Request Configuration
    request_timeout_seconds: float = Field(
        default=60.0, description="Timeout for remote calls in seconds"
    )
    trigger_refresh_delay_seconds: float = Field(
        default=2.0,
        description="Seconds to wait after triggering the schedule before refreshing",
    )

    # Local Storage Configuration
    storage_dir: str = Field(default=".taskdigest", description="Directory for local storage")
    history_limit: int = Field(default=30, description="Maximum history entries kept")
    default_scheduled_time: str = Field(
        default="16:30", description="Scheduled time shown before one is saved"
    )
    display_timezone: str = Field(
        default="America/New_York", description="Timezone used to display times"
    )

    # Web Configuration
    web_host: str = Field(default="127.0.0.1", description="Dashboard host")
    web_port: int = Field(default=8000, description="Dashboard port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    @field_validator("agent_api_url", "scheduler_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended."""
        return v.rstrip("/")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only json and console renderers exist."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
