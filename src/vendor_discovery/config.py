"""Configuration management for vendor discovery."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Load .env from the current working directory, then project root
# override=True ensures env vars get set even if already partially loaded
load_dotenv(Path.cwd() / ".env", override=True)
load_dotenv(Path(__file__).parent.parent.parent / ".env", override=True)

# Places API (New) refuses maxResultCount above 20
MAX_RESULTS_LIMIT = 20


def _env_number(name: str, default: int | float) -> int | float:
    """Read a numeric env var; a malformed value logs a warning and yields the default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return type(default)(raw.strip())
    except ValueError:
        logger.warning("%s=%r is not a valid number; using %s", name, raw, default)
        return default


class Config(BaseModel):
    """Discovery configuration, loaded from env vars."""

    anthropic_api_key: str = Field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    google_places_api_key: str = Field(default_factory=lambda: os.getenv("GOOGLE_PLACES_API_KEY", ""))
    model: str = Field(default_factory=lambda: os.getenv("MODEL", "claude-sonnet-4-20250514"))
    max_results: int = Field(default_factory=lambda: _env_number("MAX_RESULTS", MAX_RESULTS_LIMIT))
    search_timeout: float = Field(default_factory=lambda: _env_number("SEARCH_TIMEOUT", 5.0))
    enhance_timeout: float = Field(default_factory=lambda: _env_number("ENHANCE_TIMEOUT", 30.0))
    enhance_max_tokens: int = 4096
    api_secret: str = Field(default_factory=lambda: os.getenv("API_SECRET", ""))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def result_limit(self) -> int:
        """max_results clamped to what the provider accepts."""
        return max(1, min(self.max_results, MAX_RESULTS_LIMIT))

    def validate_keys(self) -> list[str]:
        """Return list of missing required keys."""
        missing = []
        if not self.google_places_api_key:
            missing.append("GOOGLE_PLACES_API_KEY")
        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        return missing


def load_config() -> Config:
    return Config()
