"""
Centralized configuration management.

All engine and application configuration is loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

SUPPORTED_OPERATIONS = ["count", "mean", "median", "sum", "min", "max", "correlation"]


class Settings(BaseModel):
    """Application settings with validation."""

    # Type inference
    ordinal_threshold: float = Field(
        default=0.3, gt=0, le=1,
        description="Distinct/sample ratio below which a column is ordinal"
    )
    type_sample_size: int = Field(default=30, ge=1, le=10000, description="Values taken from each sample slice")

    # Schema derivation
    schema_strictness: str = Field(default="strict", description="'strict' (first row keys, enforced) or 'union'")
    schema_sample_rows: int = Field(default=100, ge=1, description="Rows scanned for keys in 'union' mode")

    # Chart spec validation
    chart_strictness: str = Field(default="lenient", description="'lenient' or 'strict'")
    vega_lite_version: str = Field(default="v5", description="Vega-Lite major version for $schema")

    # Statistics
    enabled_operations: str = Field(
        default=",".join(SUPPORTED_OPERATIONS),
        description="Comma-separated list of enabled statistic operations"
    )

    # Response size
    max_dataset_rows: int = Field(default=5000, ge=1, le=100000, description="Maximum rows embedded in chart data")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=100, ge=1, le=10000, description="Rate limit per minute per IP")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="'text' or 'json'")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got '{v}'")
        return v.lower()

    @field_validator('schema_strictness')
    @classmethod
    def validate_schema_strictness(cls, v: str) -> str:
        if v.lower() not in ("strict", "union"):
            raise ValueError(f"SCHEMA_STRICTNESS must be 'strict' or 'union', got '{v}'")
        return v.lower()

    @field_validator('chart_strictness')
    @classmethod
    def validate_chart_strictness(cls, v: str) -> str:
        if v.lower() not in ("lenient", "strict"):
            raise ValueError(f"CHART_STRICTNESS must be 'lenient' or 'strict', got '{v}'")
        return v.lower()

    @field_validator('enabled_operations')
    @classmethod
    def validate_enabled_operations(cls, v: str) -> str:
        """Every enabled operation must be one the engine implements."""
        ops = [op.strip().lower() for op in v.split(",") if op.strip()]
        unknown = [op for op in ops if op not in SUPPORTED_OPERATIONS]
        if unknown:
            raise ValueError(f"ENABLED_OPERATIONS contains unknown operations: {unknown}")
        if not ops:
            raise ValueError("ENABLED_OPERATIONS must name at least one operation")
        return ",".join(ops)

    @property
    def enabled_operations_list(self) -> List[str]:
        """Get enabled operations as a list."""
        return self.enabled_operations.split(",")

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def vega_lite_schema_url(self) -> str:
        return f"https://vega.github.io/schema/vega-lite/{self.vega_lite_version}.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            ordinal_threshold=float(os.getenv("ORDINAL_THRESHOLD", "0.3")),
            type_sample_size=int(os.getenv("TYPE_SAMPLE_SIZE", "30")),
            schema_strictness=os.getenv("SCHEMA_STRICTNESS", "strict"),
            schema_sample_rows=int(os.getenv("SCHEMA_SAMPLE_ROWS", "100")),
            chart_strictness=os.getenv("CHART_STRICTNESS", "lenient"),
            vega_lite_version=os.getenv("VEGA_LITE_VERSION", "v5"),
            enabled_operations=os.getenv("ENABLED_OPERATIONS", ",".join(SUPPORTED_OPERATIONS)),
            max_dataset_rows=int(os.getenv("MAX_DATASET_ROWS", "5000")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "100")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
