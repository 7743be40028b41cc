"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from clinical_daily.constants import DEFAULT_DAYS_WINDOW


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # API Keys
    anthropic_api_key: str = ""
    ncbi_api_key: str = ""

    # NCBI E-utilities etiquette
    ncbi_tool: str = "clinical-daily"
    ncbi_email: str = ""

    # LLM Settings
    llm_model: str = "claude-sonnet-4-6"
    summary_max_tokens: int = 1024

    # App Settings
    default_days_window: int = DEFAULT_DAYS_WINDOW
    debug: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
