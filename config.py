"""
Application configuration

Settings are read from environment variables. A ``.env`` file in the working
directory is loaded first so local development does not need exported
variables. Defaults are provided for every field.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "CollectHub API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))

    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "mongodb://localhost:27017"))
    database_name: str = field(default_factory=lambda: os.getenv("DATABASE_NAME", "collecthub"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))

    # When enabled, 500 responses carry the raw exception text
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))

    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
