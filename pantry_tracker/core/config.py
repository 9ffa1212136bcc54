"""Configuration management for pantry-tracker."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Redis Configuration (optional)
    redis_url: str | None = Field(
        default=None, description="Redis connection URL for the blob store (in-memory store when unset)"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535, description="Port the HTTP server listens on")

    # Notification Configuration
    timezone: str | None = Field(
        default=None, description="IANA timezone for daily triggers and expiration dates (local zone when unset)"
    )
    notifications_enabled: bool = Field(
        default=True, description="Whether the notification platform grants permission to schedule reminders"
    )
    push_webhook_url: str | None = Field(
        default=None, description="Webhook receiving delivered notifications (logged only when unset)"
    )
    push_api_key: str | None = Field(default=None, description="API key sent with push webhook requests")

    # Expiration Window
    expiration_window_days: int = Field(default=3, ge=0, description="Lookahead window for 'expiring soon' items")
    default_notification_hour: int = Field(default=9, ge=0, le=23, description="Daily reminder hour before setup")
    default_notification_minute: int = Field(default=0, ge=0, le=59, description="Daily reminder minute before setup")
    expiration_reminder_hour: int = Field(
        default=9, ge=0, le=23, description="Hour of day assigned to expiration dates picked as calendar days"
    )

    @property
    def expiration_window_ms(self) -> int:
        """Expiration window expressed in epoch milliseconds."""
        return self.expiration_window_days * Constants.MS_PER_DAY


# Application Constants
class Constants:
    """Application-wide constants."""

    # Persisted blob keys
    ITEMS_KEY: str = "scannedItems"
    NOTIFICATION_TIME_KEY: str = "notificationTime"

    # Item records
    MANUAL_SCAN_CODE: str = "no-code"
    WEIGHT_UNSPECIFIED_LABEL: str = "Not specified"

    # Time
    MS_PER_DAY: int = 24 * 60 * 60 * 1000
    DEFAULT_EXPIRATION_WINDOW_MS: int = 3 * MS_PER_DAY  # 259,200,000

    # Notifications
    NOTIFICATION_TITLE: str = "Pantry Reminder"
    DAILY_REMINDER_TYPE: str = "daily_reminder"
    TEST_REMINDER_TYPE: str = "test_reminder"
    DAILY_REMINDER_JOB_PREFIX: str = "daily_reminder"

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # Redis Configuration
    REDIS_MAX_CONNECTIONS: int = 10  # Maximum connections in Redis connection pool


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
