"""
Application configuration using Pydantic settings.
"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Document store holding finalized and in-progress sampling events
    document_store_url: str = Field(
        default="",
        description="Base URL of the event document store (empty = in-memory store)"
    )
    document_store_api_key: str = Field(
        default="",
        description="API key for the document store"
    )
    document_store_collection: str = Field(
        default="samplingEvents",
        description="Collection that holds sampling event documents"
    )

    # Report generator (Word/PDF)
    report_generator_url: str = Field(
        default="http://localhost:5001/generateReport",
        description="Endpoint of the Word/PDF report generator"
    )
    report_generator_api_key: str = Field(
        default="",
        description="API key for the report generator"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for collaborator calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for collaborator requests"
    )

    # Survey defaults
    default_utm_zone: int = Field(
        default=13,
        description="UTM zone used to display set coordinates as lat/lon"
    )
    default_utm_northern: bool = Field(
        default=True,
        description="Whether the default UTM zone is in the northern hemisphere"
    )
    species_table_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file replacing the built-in species reference table"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Fish Survey Metrics",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )


# Global settings instance
settings = Settings()
