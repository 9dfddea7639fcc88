"""
Shared configuration management for the S3 exporter.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="S3_EXPORTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Web
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9340)
    metrics_path: str = Field(default="/metrics")
    probe_path: str = Field(default="/probe")
    discovery_path: str = Field(default="/discovery")

    # Storage client
    s3_endpoint_url: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_disable_ssl: bool = Field(default=False)
    s3_force_path_style: bool = Field(default=False)

    # Static probe defaults, used when the query string leaves them out
    s3_bucket: str = Field(default="")
    s3_prefixes: str = Field(default="")
    s3_delimiter: str = Field(default="")
    s3_storage_class: str = Field(default="")

    # Listing
    s3_list_object_versions: bool = Field(default=False)
    s3_max_keys: int = Field(default=1000, ge=1, le=1000)

    # Observability
    enable_tracing: bool = Field(default=False)
    otel_exporter: str = Field(default="http://localhost:4317")
    enable_console_tracing: bool = Field(default=False)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str

    def static_prefixes(self) -> List[str]:
        """Statically configured prefixes, split on commas."""
        if not self.s3_prefixes:
            return []
        return self.s3_prefixes.split(",")


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
