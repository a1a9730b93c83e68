"""Application configuration using Pydantic Settings."""

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported vision model providers."""
    OPENAI = "openai"
    GEMINI = "gemini"
    OLLAMA = "ollama"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Provider Selection
    llm_provider: LLMProvider = LLMProvider.OPENAI

    # OpenAI Configuration
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Google Gemini Configuration
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Ollama Configuration (local vision models)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llava:7b"

    # LLM Settings
    llm_temperature: float = 0.3  # Lower for consistency
    llm_max_tokens: int = 1000

    # Analysis pipeline limits
    analysis_timeout_seconds: float = 30.0
    max_image_bytes: int = 4 * 1024 * 1024  # 4 MiB decoded

    # Session gate
    access_code: str = ""  # Empty = every code is rejected
    session_secret: str = "change-me"
    session_cookie_name: str = "mealvision_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 30  # 30 days
    session_cookie_secure: bool = False

    # App
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    debug: bool = False
    app_name: str = "Meal Vision API"
    api_version: str = "1.0.0"

    @property
    def is_llm_configured(self) -> bool:
        """Check if the selected LLM provider is configured."""
        if self.llm_provider == LLMProvider.OPENAI:
            return bool(self.openai_api_key)
        elif self.llm_provider == LLMProvider.GEMINI:
            return bool(self.google_api_key)
        elif self.llm_provider == LLMProvider.OLLAMA:
            return bool(self.ollama_base_url)
        return False

    @property
    def llm_model(self) -> str:
        """Model name for the selected provider."""
        match self.llm_provider:
            case LLMProvider.GEMINI:
                return self.gemini_model
            case LLMProvider.OLLAMA:
                return self.ollama_model
            case _:
                return self.openai_model


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
