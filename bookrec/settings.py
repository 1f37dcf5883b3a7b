"""
Settings

Loads process settings from environment variables and provides defaults.
Supports loading from a .env file in the working directory or project root
using python-dotenv.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models.config import RecommendationConfig

_project_env = Path(__file__).resolve().parent.parent / ".env"
if _project_env.exists():
    load_dotenv(_project_env)
load_dotenv()


@dataclass
class Settings:
    """Process-level settings for the engine and CLI."""

    # JSON file with a RecommendationConfig (flat or grouped sections)
    config_path: Optional[Path] = None

    # Overrides applied on top of the config file
    batch_size: Optional[int] = None
    min_score_threshold: Optional[float] = None

    # Fixed RNG seed for reproducible tier shuffles; None = fresh randomness
    seed: Optional[int] = None

    # Default catalog fixture for the CLI
    catalog_path: Optional[Path] = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""

        def _path_env(key: str) -> Optional[Path]:
            v = os.getenv(key)
            return Path(v).expanduser() if v else None

        def _int_env(key: str) -> Optional[int]:
            v = os.getenv(key, "").strip()
            if not v:
                return None
            try:
                return int(v)
            except ValueError:
                raise ValueError(f"{key} must be an integer, got {v!r}") from None

        def _float_env(key: str) -> Optional[float]:
            v = os.getenv(key, "").strip()
            if not v:
                return None
            try:
                return float(v)
            except ValueError:
                raise ValueError(f"{key} must be a number, got {v!r}") from None

        return cls(
            config_path=_path_env("BOOKREC_CONFIG_PATH"),
            batch_size=_int_env("BOOKREC_BATCH_SIZE"),
            min_score_threshold=_float_env("BOOKREC_MIN_SCORE"),
            seed=_int_env("BOOKREC_SEED"),
            catalog_path=_path_env("BOOKREC_CATALOG_PATH"),
            log_level=os.getenv("BOOKREC_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the settings.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.config_path is not None and not self.config_path.is_file():
            errors.append(f"Config file not found: {self.config_path}")

        if self.catalog_path is not None and not self.catalog_path.is_file():
            errors.append(f"Catalog file not found: {self.catalog_path}")

        if self.batch_size is not None and self.batch_size < 1:
            errors.append(f"BOOKREC_BATCH_SIZE must be positive, got {self.batch_size}")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.log_level}")

        return len(errors) == 0, errors

    def build_config(self) -> RecommendationConfig:
        """RecommendationConfig from the config file (if any) with env overrides applied."""
        data = {}
        if self.config_path is not None:
            with open(self.config_path, encoding="utf-8") as f:
                data = json.load(f)
        if self.batch_size is not None:
            data["batch_size"] = self.batch_size
        if self.min_score_threshold is not None:
            data["min_score_threshold"] = self.min_score_threshold
        return RecommendationConfig.from_dict(data)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global _settings
    _settings = None
    return get_settings()
