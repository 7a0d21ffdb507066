from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AREA_PULSE_", extra="ignore")

    SERVICE_NAME: str = "area-pulse-client"
    BASE_URL: str = "https://your-api-server.com/api/v1"
    TIMEOUT_SECONDS: float = 30.0
    DEFAULT_RADIUS_METERS: int = 1000
    REDIS_URL: str | None = None
    BJD_CODE: str | None = None
    LOG_LEVEL: str = "INFO"


def load_settings(**overrides: object) -> ClientSettings:
    return ClientSettings(**overrides)
