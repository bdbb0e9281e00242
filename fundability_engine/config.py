"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "fundability-engine"
    environment: str = "production"  # "development" exposes error details in 500 responses
    log_level: str = "INFO"
    debug: bool = False  # Log every assessment outcome

    # Webhook destinations
    enable_webhooks: bool = False
    slack_webhook_url: str | None = None
    discord_webhook_url: str | None = None
    hubspot_webhook_url: str | None = None
    generic_webhook_url: str | None = None
    webhook_secret: str | None = None

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 1  # Total attempts per destination
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Analytics
    analytics_max_entries: int = 10_000
    analytics_window_days: int = 30

    # Batch processing
    batch_concurrency: int = 10
    batch_delay_ms: int = 100

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
