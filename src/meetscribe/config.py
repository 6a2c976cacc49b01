"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

import os
import tempfile
from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # LLM Providers
    ANTHROPIC_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    LLM_TIMEOUT: int = 60
    LLM_MAX_RETRIES: int = 2
    SUMMARY_TEMPERATURE: float = 0.2

    # Speech-to-text
    TRANSCRIPTION_MODEL: str = "whisper-1"
    TRANSCRIPTION_LANGUAGE: str = "en"

    # Summarization
    SUMMARY_CHUNK_SIZE: int = 3000
    SUMMARY_CHUNK_OVERLAP: int = 200
    DEFAULT_SUMMARY_DEPTH: str = "detailed"

    # Google (Gmail + Calendar) -- fallback when the caller sends no credential
    GMAIL_CLIENT_ID: str = ""
    GMAIL_CLIENT_SECRET: str = ""
    GMAIL_REFRESH_TOKEN: str = ""
    GMAIL_SENDER: str = ""
    GOOGLE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"

    # Scratch directories for generated documents and uploaded audio
    ARTIFACT_DIR: str = ""
    UPLOAD_DIR: str = ""

    # Monitoring
    SENTRY_DSN: str = ""

    def get_artifact_dir(self) -> str:
        """Return the directory generated documents are written to.

        Falls back to a ``meetscribe/artifacts`` folder under the system temp
        dir. The directory is created if missing.
        """
        path = self.ARTIFACT_DIR or os.path.join(
            tempfile.gettempdir(), "meetscribe", "artifacts"
        )
        os.makedirs(path, exist_ok=True)
        return path

    def get_upload_dir(self) -> str:
        """Return the directory uploaded audio segments are staged in."""
        path = self.UPLOAD_DIR or os.path.join(
            tempfile.gettempdir(), "meetscribe", "uploads"
        )
        os.makedirs(path, exist_ok=True)
        return path


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
