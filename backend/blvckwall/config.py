"""Configuration settings for the BlvckWall backend."""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class ProviderMode(str, Enum):
    LIVE = "live"
    DEMO = "demo"
    # Live only for providers whose API key is configured
    AUTO = "auto"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Local durable store; unset keeps everything in memory
    local_store_path: Optional[str] = None

    session_timeout_seconds: int = 24 * 60 * 60
    request_timeout_seconds: float = 10.0
    login_max_attempts: int = 5
    login_window_seconds: float = 60.0

    # Providers
    provider_mode: ProviderMode = ProviderMode.AUTO
    retell_api_key: Optional[str] = None
    retell_from_number: Optional[str] = None
    elevenlabs_api_key: Optional[str] = None
    tavus_api_key: Optional[str] = None
    tavus_webhook_secret: Optional[str] = None
    lingo_api_key: Optional[str] = None
    picaos_api_key: Optional[str] = None
    app_url: str = "http://localhost:8000"

    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and (self.supabase_service_role_key or self.supabase_anon_key))

    def mode_for(self, api_key: Optional[str]) -> ProviderMode:
        """Resolve the effective mode of one provider."""
        if self.provider_mode == ProviderMode.AUTO:
            has_key = bool(api_key and api_key.strip())
            return ProviderMode.LIVE if has_key else ProviderMode.DEMO
        return self.provider_mode


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
