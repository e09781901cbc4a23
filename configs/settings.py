from __future__ import annotations

import os
from pathlib import Path
from typing import FrozenSet, Optional

from dotenv import load_dotenv

from exceptions.exceptions import ConfigurationMissingError


load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


class Settings:
    """
    Central configuration for the content generation service.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # OpenAI-compatible endpoint / model configuration
        self._openai_api_key = os.getenv("OPENAI_API_KEY")
        self._openai_base_url = os.getenv("OPENAI_BASE_URL") or None
        self._content_model = os.getenv("CONTENT_MODEL", "gpt-4.1-mini")
        self._image_model = os.getenv("IMAGE_MODEL", "gpt-image-1")
        temperature = os.getenv("CONTENT_TEMPERATURE", "0.7")
        self._temperature = float(temperature) if temperature else None

        # Retry policy for upstream calls
        self._retry_max_attempts = _int_env("RETRY_MAX_ATTEMPTS", 5)
        self._retry_base_delay = _float_env("RETRY_BASE_DELAY_SECONDS", 2.0)

        # Session store bounds
        self._session_capacity = _int_env("SESSION_CAPACITY", 1000)
        self._session_ttl_seconds = _float_env("SESSION_TTL_SECONDS", 3600.0)
        self._session_content_types = os.getenv(
            "SESSION_CONTENT_TYPES", "presentation,document"
        )

        # Uploads
        self._upload_dir = Path(os.getenv("UPLOAD_DIR", "uploads"))
        self._max_upload_mb = _int_env("MAX_UPLOAD_MB", 20)

        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def validate(self) -> None:
        """Fail fast on settings the process cannot run without."""
        _ = self.openai_api_key

    # ------------------------------------------------------------------
    # Model settings
    # ------------------------------------------------------------------

    @property
    def openai_api_key(self) -> str:
        if not self._openai_api_key:
            raise ConfigurationMissingError("OPENAI_API_KEY")
        return self._openai_api_key

    @property
    def openai_base_url(self) -> Optional[str]:
        return self._openai_base_url

    @property
    def content_model(self) -> str:
        return self._content_model

    @property
    def image_model(self) -> str:
        return self._image_model

    @property
    def temperature(self) -> Optional[float]:
        return self._temperature

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------

    @property
    def retry_max_attempts(self) -> int:
        return self._retry_max_attempts

    @property
    def retry_base_delay(self) -> float:
        return self._retry_base_delay

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @property
    def session_capacity(self) -> int:
        return self._session_capacity

    @property
    def session_ttl_seconds(self) -> float:
        return self._session_ttl_seconds

    @property
    def session_content_types(self) -> FrozenSet[str]:
        """Raw labels the stateful path may select (validated by the registry)."""
        return frozenset(
            label.strip()
            for label in self._session_content_types.split(",")
            if label.strip()
        )

    # ------------------------------------------------------------------
    # Paths / limits
    # ------------------------------------------------------------------

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    @property
    def max_upload_mb(self) -> int:
        return self._max_upload_mb

    @property
    def log_level(self) -> str:
        return self._log_level


settings = Settings()
