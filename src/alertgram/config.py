"""Configuration management for Alertgram."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Secrets, read without the prefix
    bot_token: str = Field(validation_alias="BOT_TOKEN")
    tg_chat_ids: str = Field(validation_alias="TG_CHAT_IDS")
    webhook_token: str = Field(validation_alias="WEBHOOK_TOKEN")

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    webhook_path: str = "/"

    # Telegram settings
    telegram_api_url: str = "https://api.telegram.org"
    telegram_timeout: float = 10.0  # seconds

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Metrics
    metrics_enabled: bool = True
    metrics_path: str = "/metrics"

    @property
    def chat_ids(self) -> list[str]:
        """Destination chat ids, split from the comma-separated setting."""
        return self.tg_chat_ids.split(",")

    @property
    def send_message_url(self) -> str:
        """Telegram Bot API sendMessage endpoint for the configured bot."""
        return f"{self.telegram_api_url.rstrip('/')}/bot{self.bot_token}/sendMessage"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()  # type: ignore[call-arg]
