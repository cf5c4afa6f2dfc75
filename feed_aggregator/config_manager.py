"""
Configuration manager for the feed aggregator.
Handles loading and validation of configuration settings.
"""
import json
import logging
from json.decoder import JSONDecodeError
from typing import Any, Dict, List

from .models import FeedSource
from .utils.helpers import validate_url

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages settings and the feed source list.
    """

    def __init__(self, settings_path: str, feeds_path: str):
        """
        Initialize configuration manager.

        Args:
            settings_path: Path to main settings file (settings.json)
            feeds_path: Path to feeds configuration file (feeds.json)
        """
        self.settings_path = settings_path
        self.feeds_path = feeds_path
        self.settings = None
        self.feeds_config = None

        logger.debug(f"ConfigManager initialized with settings: {settings_path}, feeds: {feeds_path}")

        try:
            self._load_all_configs()
        except FileNotFoundError as e:
            logger.critical(f"Configuration file not found: {e}. Please ensure settings.json and feeds.json exist in the config directory.")
            raise

    def _load_all_configs(self):
        """Load all configuration files."""
        self.settings = self._load_json_file(self.settings_path, "settings")
        self.feeds_config = self._load_json_file(self.feeds_path, "feeds")

        self._validate_settings()
        self._validate_feeds_config()

    def _load_json_file(self, file_path: str, config_type: str) -> Dict[str, Any]:
        """
        Load a JSON configuration file.

        Args:
            file_path: Path to JSON file
            config_type: Type of config for error messages

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If the file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except JSONDecodeError as e:
            logger.error(f"Invalid JSON in {config_type} configuration file '{file_path}': {e}")
            raise

        logger.info(f"Loaded {config_type} configuration from {file_path}")
        return config

    def _validate_settings(self):
        """Validate settings configuration."""
        if self.settings is None:
            self.settings = {}
        if not isinstance(self.settings, dict):
            raise TypeError("Settings configuration must be a JSON object")

        for section in ("networking", "aggregation", "output", "logging", "schedule"):
            if section not in self.settings:
                logger.warning(f"Missing configuration section: '{section}', using defaults")
                self.settings[section] = {}
            elif not isinstance(self.settings[section], dict):
                raise TypeError(f"Invalid type for configuration section '{section}'. Expected dict")

        self._set_default_settings()
        self._validate_specific_settings()

        logger.info("Settings configuration validated")

    def _validate_specific_settings(self):
        """Validate specific key values within settings."""
        networking = self.settings["networking"]
        if not isinstance(networking.get("timeout_seconds"), (int, float)):
            raise TypeError("Invalid type for 'networking.timeout_seconds'. Expected int or float.")
        if not isinstance(networking.get("user_agent"), str) or not networking["user_agent"].strip():
            raise TypeError("Invalid type for 'networking.user_agent'. Expected non-empty string.")
        if not isinstance(networking.get("max_workers"), int) or networking["max_workers"] < 1:
            raise TypeError("Invalid value for 'networking.max_workers'. Expected positive int.")

        aggregation = self.settings["aggregation"]
        if not isinstance(aggregation.get("max_items"), int) or aggregation["max_items"] < 1:
            raise TypeError("Invalid value for 'aggregation.max_items'. Expected positive int.")
        for flag in ("placeholder_on_empty", "fail_on_empty"):
            if not isinstance(aggregation.get(flag), bool):
                raise TypeError(f"Invalid type for 'aggregation.{flag}'. Expected boolean.")

        output = self.settings["output"]
        if not output.get("path") or not isinstance(output.get("path"), str):
            raise TypeError("Missing or invalid type for 'output.path'. Expected non-empty string.")
        if not isinstance(output.get("indent"), int):
            raise TypeError("Invalid type for 'output.indent'. Expected int.")

        logging_settings = self.settings["logging"]
        if not isinstance(logging_settings.get("level"), str):
            raise TypeError("Invalid type for 'logging.level'. Expected a string.")

        schedule = self.settings["schedule"]
        if not isinstance(schedule.get("times"), list):
            raise TypeError("Invalid type for 'schedule.times'. Expected a list of times.")
        if not isinstance(schedule.get("timezone"), str):
            raise TypeError("Invalid type for 'schedule.timezone'. Expected a string.")

    def _validate_feeds_config(self):
        """Validate feeds configuration."""
        if not self.feeds_config or not isinstance(self.feeds_config, dict):
            raise ValueError("Feeds configuration is empty")

        feeds = self.feeds_config.get("feeds")
        if not isinstance(feeds, list) or len(feeds) == 0:
            raise ValueError("'feeds' must be a non-empty list")

        for i, entry in enumerate(feeds):
            if not isinstance(entry, dict):
                raise ValueError(f"Invalid feed entry at index {i}: Expected a dictionary.")
            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Invalid feed entry at index {i}: missing or invalid 'name'")
            if not validate_url(entry.get("url")):
                raise ValueError(f"Invalid feed entry '{name}': 'url' must be an http(s) URL")

        for vocabulary in ("keywords", "brands"):
            terms = self.feeds_config.setdefault(vocabulary, [])
            if not isinstance(terms, list):
                raise ValueError(f"'{vocabulary}' must be a list")
            for j, term in enumerate(terms):
                if not isinstance(term, str) or not term.strip():
                    raise ValueError(f"Invalid {vocabulary} term at index {j}: Expected non-empty string.")

        logger.info("Feeds configuration validated")

    def _set_default_settings(self):
        """Recursively set default values for missing settings."""
        defaults = {
            "networking": {
                "timeout_seconds": 30,
                "user_agent": "RetailTrendsTracker/1.0 (+https://github.com/)",
                "max_workers": 4
            },
            "aggregation": {
                "max_items": 600,
                "placeholder_on_empty": True,
                "fail_on_empty": False
            },
            "output": {
                "path": "data/articles.json",
                "indent": 2
            },
            "logging": {
                "level": "INFO",
                "log_dir": "./logs"
            },
            "schedule": {
                "times": [],
                "timezone": "UTC"
            }
        }

        def merge_dicts(source, default):
            """Recursively merges default dict into source dict."""
            for key, value in default.items():
                if key not in source:
                    source[key] = value
                elif isinstance(value, dict) and isinstance(source[key], dict):
                    merge_dicts(source[key], value)

        merge_dicts(self.settings, defaults)

    def get_feed_sources(self) -> List[FeedSource]:
        """
        Get the configured feeds in declaration order.

        The order matters: when two feeds report the same article, the one
        listed first is kept.

        Returns:
            List of FeedSource
        """
        sources = [
            FeedSource(name=entry["name"].strip(), url=entry["url"])
            for entry in self.feeds_config["feeds"]
        ]
        logger.info(f"Loaded {len(sources)} feed sources")
        return sources

    def get_keywords(self) -> List[str]:
        """Keyword vocabulary for tagging."""
        return list(self.feeds_config.get("keywords", []))

    def get_brands(self) -> List[str]:
        """Brand vocabulary for tagging."""
        return list(self.feeds_config.get("brands", []))

    def get_config_value(self, key_path: str, default=None):
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to configuration value (e.g., "output.path")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.settings

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value
