"""Application configuration."""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Presentation
    assistant_event: str = "Control"

    # Outbound webhooks
    text_webhook_url: str | None = None
    voice_webhook_url: str | None = None
    webhook_timeout: float = 10.0  # seconds, per outbound call
    max_audio_bytes: int = 10 * 1024 * 1024

    # Inbound webhook
    incoming_webhook_secret: str | None = None

    # Relay
    history_capacity: int = 100
    subscriber_queue_size: int = 256
    stream_heartbeat_interval: float = 15.0

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: str = "*"
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
