"""
Service configuration loaded from environment variables.

Values are validated once at startup. An invalid environment raises
pydantic.ValidationError before the server starts.
"""
import os
from typing import List

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings(BaseModel):
    """Runtime settings for the task service."""
    db_path: str = Field("/app/data/tasks.db", description="SQLite database file")
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(8000, gt=0, le=65535, description="Bind port")
    log_level: str = Field("INFO", description="Root log level")
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    query_slow_threshold: float = Field(0.1, ge=0, description="Seconds before a query is logged as slow")
    enable_query_logging: bool = True
    tracing_enabled: bool = False
    otel_service_name: str = "tasktrack"
    otel_console_exporter: bool = False
    otel_otlp_exporter: bool = False
    otel_otlp_endpoint: str = "http://localhost:4317"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level against the stdlib level names."""
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}")
        return v

    @field_validator('cors_allow_origins', mode='before')
    @classmethod
    def split_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Raises:
            pydantic.ValidationError: If any variable holds an invalid value
        """
        return cls(
            db_path=os.getenv("TASKTRACK_DB_PATH", "/app/data/tasks.db"),
            host=os.getenv("TASKTRACK_HOST", "0.0.0.0"),
            port=os.getenv("TASKTRACK_PORT", "8000"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000"),
            query_slow_threshold=os.getenv("DB_QUERY_SLOW_THRESHOLD", "0.1"),
            enable_query_logging=_env_flag("DB_ENABLE_QUERY_LOGGING", "true"),
            tracing_enabled=_env_flag("TRACING_ENABLED"),
            otel_service_name=os.getenv("OTEL_SERVICE_NAME", "tasktrack"),
            otel_console_exporter=_env_flag("OTEL_CONSOLE_EXPORTER_ENABLED"),
            otel_otlp_exporter=_env_flag("OTEL_EXPORTER_OTLP_ENABLED"),
            otel_otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317"),
        )
