"""Environment-based configuration for the API service."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class Settings:
    """API configuration loaded from environment variables."""

    def __init__(self):
        self.api_secret = os.getenv("TOUR_API_SECRET", "")
        if not self.api_secret:
            raise RuntimeError(
                "TOUR_API_SECRET environment variable is required. "
                "Generate one with: openssl rand -hex 32"
            )
        self.host = os.getenv("TOUR_API_HOST", "0.0.0.0")
        self.port = int(os.getenv("TOUR_API_PORT", "8000"))
        self.data_path = os.getenv(
            "TOUR_DATA_PATH",
            str(Path.home() / ".tour-engine" / "tours.json"),
        )
        self.debug = os.getenv("TOUR_ENGINE_ENV", "production") != "production"

        # Travel time lookups
        self.google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
        self.travel_provider = os.getenv("TOUR_TRAVEL_PROVIDER", "google")
        self.travel_workers = int(os.getenv("TOUR_TRAVEL_WORKERS", "4"))

        if self.travel_provider == "google" and not self.google_maps_api_key:
            logger.warning("GOOGLE_MAPS_API_KEY is not set; tour calculation will fail")


_settings = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()
