"""
Configuration management for the calculator recommendation service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from calc_recommender.models import RecommendationServiceConfig

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Web application configuration settings."""
    host: str
    port: int
    debug: bool


@dataclass
class DataConfig:
    """Seed data configuration settings."""
    data_file: str


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "recommender_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", self.config_file, e)

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "recommendations": RecommendationServiceConfig().to_dict(),
            "app": {
                "host": "0.0.0.0",
                "port": 22582,
                "debug": False,
            },
            "data": {
                "data_file": "data/recommender_data.json",
            },
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        rec = self._config["recommendations"]

        if os.getenv("RECOMMENDER_CACHE_ENABLED"):
            rec["cache_enabled"] = _env_flag(os.getenv("RECOMMENDER_CACHE_ENABLED"))

        if os.getenv("RECOMMENDER_CACHE_TTL"):
            rec["cache_ttl_seconds"] = float(os.getenv("RECOMMENDER_CACHE_TTL"))

        if os.getenv("RECOMMENDER_MAX_RECOMMENDATIONS"):
            rec["max_recommendations"] = int(os.getenv("RECOMMENDER_MAX_RECOMMENDATIONS"))

        if os.getenv("RECOMMENDER_MIN_CONFIDENCE"):
            rec["min_confidence_threshold"] = float(os.getenv("RECOMMENDER_MIN_CONFIDENCE"))

        if os.getenv("RECOMMENDER_HISTORY_LIMIT"):
            rec["history_limit"] = int(os.getenv("RECOMMENDER_HISTORY_LIMIT"))

        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("RECOMMENDER_DATA_FILE"):
            self._config["data"]["data_file"] = os.getenv("RECOMMENDER_DATA_FILE")

    def get_recommendation_config(self) -> RecommendationServiceConfig:
        """Get recommendation service configuration."""
        return RecommendationServiceConfig.from_dict(self._config["recommendations"])

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
        )

    def get_data_config(self) -> DataConfig:
        """Get seed data configuration."""
        return DataConfig(data_file=self._config["data"]["data_file"])

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_recommendation_config() -> RecommendationServiceConfig:
    """Get recommendation service configuration."""
    return config_manager.get_recommendation_config()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_data_config() -> DataConfig:
    """Get seed data configuration."""
    return config_manager.get_data_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
