"""Configuration management for the B2B wholesale manager."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = Field(..., description="PostgreSQL connection URL")

    # Redis Configuration
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")

    # Shopify Configuration
    shopify_api_secret: str = Field(..., description="App secret used to sign webhooks")
    shopify_access_token: str = Field(
        default="", description="Offline Admin API access token"
    )
    shopify_api_version: str = Field(default="2024-10", description="Admin API version")

    # API Configuration
    api_port: int = Field(default=8000, description="API server port")
    api_host: str = Field(default="0.0.0.0", description="API server host")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Outbound calls
    max_retries: int = Field(default=3, description="Max retries for Shopify calls")
    retry_delay: float = Field(default=1.0, description="Initial retry delay in seconds")
    request_timeout: int = Field(default=30, description="Request timeout in seconds")

    # Caching
    rule_cache_ttl: int = Field(
        default=300, description="Seconds to cache a shop's active tagging rules"
    )

    # Rate limiting (requests per window)
    api_rate_limit: int = Field(default=100, description="Admin API requests per window")
    api_rate_window: int = Field(default=60, description="Admin API window in seconds")
    webhook_rate_limit: int = Field(default=1000, description="Webhooks per window")
    webhook_rate_window: int = Field(default=60, description="Webhook window in seconds")
    form_rate_limit: int = Field(default=10, description="Form submissions per window")
    form_rate_window: int = Field(default=300, description="Form window in seconds")

    # Wholesale Settings
    wholesale_tag: str = Field(
        default="wholesale", description="Tag added to approved wholesale customers"
    )
    customer_page_size: int = Field(
        default=50, description="Customers fetched per page in batch tagging"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
