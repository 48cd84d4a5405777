"""
Configuration Management for Skeletal Sex Estimation

Environment-based configuration using Pydantic Settings.
"""
from typing import Optional, List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env file
    )

    # Application
    app_name: str = "Skeletal Sex Estimation"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level for the sexest loggers")

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # Classifier container (JSON) loaded at API startup
    container_path: Optional[str] = Field(default=None, description="Path to a classifier container JSON file")

    # Results log
    results_file: str = "estimate_sex results.csv"

    # Estimation
    default_method: Literal["LDA", "RBF"] = "LDA"
    pdf_miss_policy: Literal["raise", "clamp"] = Field(
        default="raise",
        description="What to do when an RBF score falls outside every posterior bin",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
