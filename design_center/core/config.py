from functools import lru_cache
from secrets import token_urlsafe
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = "Design Center API"
    version: str = "1.0.0"
    environment: str = Field(default="development", description="development, production or test")
    api_prefix: str = "/api"
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        alias="CORS_ORIGINS",
    )
    secret_key: str = Field(default_factory=lambda: token_urlsafe(32))
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, ge=1)

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async connection string for the primary database",
    )

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Render log events as JSON lines")

    uploads_root: str = Field(default="uploads", description="Directory holding uploaded files")
    default_thumbnail: str = "/uploads/default-thumbnail.png"
    max_design_upload_mb: int = Field(default=500, ge=1)
    max_file_upload_mb: int = Field(default=500, ge=1)
    max_image_upload_mb: int = Field(default=200, ge=1)
    max_multiple_upload_files: int = Field(default=10, ge=1)

    background_ttl_hours: int = Field(
        default=24, ge=1, description="Lifetime of per-user template backgrounds"
    )

    canva_api_base_url: str = Field(default="https://api.canva.com")
    canva_client_id: str = ""
    canva_client_secret: str = ""
    canva_redirect_uri: str = "http://localhost:3000/canva/callback"
    canva_timeout_seconds: float = Field(default=30.0, gt=0)

    enable_prometheus_metrics: bool = Field(
        default=True, description="Expose Prometheus metrics endpoint when true"
    )
    prometheus_metrics_path: str = Field(
        default="/metrics/prometheus",
        description="Path where scraped Prometheus metrics are served",
    )
    otel_exporter_otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP HTTP endpoint for exporting traces",
    )
    otel_exporter_otlp_headers: str | None = Field(
        default=None,
        description="Comma separated key=value pairs added to OTLP requests",
    )
    otel_service_name: str | None = Field(
        default=None, description="Optional override for OpenTelemetry service.name"
    )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
