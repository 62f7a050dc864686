from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field("DistribuTrack", alias="APP_NAME")
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_issuer: str = Field("distributrack", alias="JWT_ISSUER")
    token_ttl_seconds: int = Field(3600, alias="TOKEN_TTL_SECONDS")
    partner_api_key: str = Field(..., alias="PARTNER_API_KEY")
    cors_allow_origins: str = Field("", alias="CORS_ALLOW_ORIGINS")
    database_url: str = Field("sqlite:///./distributrack.db", alias="DATABASE_URL")
    db_echo: bool = Field(False, alias="DB_ECHO")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    inventory_seed_path: Optional[str] = Field(None, alias="INVENTORY_SEED_PATH")
    request_id_header: str = Field("X-Request-Id", alias="REQUEST_ID_HEADER")
    rate_limit_enabled: bool = Field(False, alias="RATE_LIMIT_ENABLED")
    rate_limit_default: str = Field("120/minute", alias="RATE_LIMIT_DEFAULT")
    otel_enabled: bool = Field(False, alias="OTEL_ENABLED")
    otel_service_name: str = Field("distributrack", alias="OTEL_SERVICE_NAME")
    otel_exporter_otlp_endpoint: Optional[str] = Field(None, alias="OTEL_EXPORTER_OTLP_ENDPOINT")

    model_config = SettingsConfigDict(extra="ignore")

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


def resolve_env_file() -> Optional[Path]:
    explicit = os.getenv("DISTRIBUTRACK_ENV_FILE")
    if explicit:
        return Path(explicit)
    default = Path.cwd() / "config" / "api.env"
    if default.exists():
        return default
    return None


def load_settings() -> Settings:
    env_file = resolve_env_file()
    if env_file:
        return Settings(_env_file=str(env_file))
    return Settings()
