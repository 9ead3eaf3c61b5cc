"""Configuration Management."""

import os
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="UIGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=8000, gt=0, description="HTTP server port")

    # Model
    llm_provider: str = Field(default="groq", pattern="^(groq|gemini)$", description="LLM provider")
    llm_model: str = Field(default="llama-3.3-70b-versatile", description="Model identifier")
    llm_api_key: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_KEY", ""), description="Provider API key"
    )
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1", description="OpenAI-compatible API base URL"
    )
    llm_max_tokens: int = Field(default=4000, gt=0, description="Max output tokens per call")
    llm_timeout: float = Field(default=60.0, gt=0, description="Provider request timeout (seconds)")

    # Pipeline
    max_retries: int = Field(default=2, ge=0, le=5, description="Generator retries after validation failure")
    max_intent_length: int = Field(default=500, gt=0, description="Sanitized intent length limit")

    # Storage
    database_url: str = Field(default="sqlite:///uigen.db", description="Checkpoint store database URL")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
