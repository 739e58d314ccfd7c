"""
Todo AI Assistant: Centralized configuration.

Loads all settings from .env and exposes them as a validated singleton.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # LLM: provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str = ""
    LLM_MAX_TOKENS: int = 2048

    # "development" turns on full tracebacks for pipeline failures
    APP_ENV: str = "production"

    # Wall-clock zone of the users; due timestamps with an offset are
    # converted into it before any calendar comparison.
    TIMEZONE: str = "Asia/Seoul"

    # HTTP
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def parse_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [o.strip() for o in v.split(",") if o.strip()]
        return ["*"]

    @field_validator("LLM_MAX_TOKENS", "PORT", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() in ("development", "dev")


def _load_settings() -> Settings:
    """Load settings from environment."""
    llm_api_key = os.getenv("LLM_API_KEY", "")

    if not llm_api_key or llm_api_key.startswith("your-"):
        # Not fatal: AI requests will answer with an authentication error.
        logger.warning("LLM_API_KEY is missing or not set in .env")
        llm_api_key = ""

    return Settings(
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        LLM_MAX_TOKENS=os.getenv("LLM_MAX_TOKENS", "2048"),
        APP_ENV=os.getenv("APP_ENV", "production"),
        TIMEZONE=os.getenv("TIMEZONE", "Asia/Seoul"),
        CORS_ALLOW_ORIGINS=os.getenv("CORS_ALLOW_ORIGINS", "*"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=os.getenv("PORT", "8000"),
    )


# Singleton: imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
