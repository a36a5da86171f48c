"""
Application Configuration
Loads settings from environment variables.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "ShortForge API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_BASE_URL: str = "http://localhost:8000"  # Base URL for file serving

    # Database - SQLite for local dev, PostgreSQL for production
    DATABASE_URL: str = "sqlite:///./shortforge.db"

    # Text generation (Groq)
    GROQ_API_KEY: str = ""
    GROQ_TEMPERATURE: float = 0.7
    GROQ_MAX_TOKENS: int = 4096

    # Text + image generation (Gemini)
    GEMINI_API_KEY: str = ""

    # Image generation (fal.ai)
    FAL_KEY: str = ""
    IMAGE_SIZE: str = "portrait_16_9"  # Vertical frames for shorts
    IMAGE_NUM_INFERENCE_STEPS: int = 4

    # Default models per feature, "provider:modelId"
    # Overridden at runtime by the admin_settings row (see ModelConfigCache)
    DEFAULT_SCRIPT_MODEL: str = "groq:llama-3.3-70b-versatile"
    DEFAULT_PROMPT_MODEL: str = "groq:llama-3.3-70b-versatile"
    DEFAULT_IMAGE_MODEL: str = "fal:fal-ai/flux/schnell"
    MODEL_CACHE_TTL_SECONDS: int = 300

    # Pipeline
    MEDIA_BATCH_SIZE: int = 3
    EXTERNAL_MAX_RETRIES: int = 2
    EXTERNAL_RETRY_DELAY: float = 2.0

    # Credits
    SHORT_BASE_CREDITS: int = 10
    SHORT_SECONDS_PER_CREDIT: int = 5

    # Local storage
    LOCAL_STORAGE_PATH: str = "./uploads"

    # Google Cloud Storage (for Cloud Run deployment)
    USE_GCS: bool = False
    GCS_BUCKET_OUTPUTS: str = "shortforge-outputs"
    GCP_PROJECT_ID: str = ""

    # Admin endpoints (cache invalidation)
    ADMIN_API_TOKEN: str = ""

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator('GEMINI_API_KEY', 'GROQ_API_KEY', 'FAL_KEY', 'ADMIN_API_TOKEN', mode='before')
    @classmethod
    def strip_api_keys(cls, v):
        """Strip whitespace and newlines from API keys loaded from secrets."""
        if isinstance(v, str):
            return v.strip()
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
