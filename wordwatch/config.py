import yaml, pathlib, os, copy, logging
from typing import Dict, Any, Optional

LOG = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigManager:
    """
    Central configuration manager for the WordWatch directory monitor.

    This class handles loading configuration from a YAML file, validating
    configuration values, and providing access to settings throughout the
    application.
    """

    # Default configuration values
    DEFAULT_CONFIG = {
        "watch": {
            "pattern": "*.txt",
            "recursive": False
        },
        "debounce": {
            "delay_seconds": 4.0
        },
        "analysis": {
            "top_n": 10,
            "encoding": "utf-8-sig",
            "errors": "replace"
        },
        "report": {
            "extension": ".json",
            "indent": 2
        },
        "logging": {
            "level": "INFO",
            "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            "datefmt": "%m-%d-%Y %I:%M:%S %p"
        },
        "paths": {
            "config": "configs/wordwatch.yaml"
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, falls back to
                the WORDWATCH_CONFIG environment variable, then the default path.
        """
        self.config_path = (
            config_path
            or os.getenv("WORDWATCH_CONFIG")
            or self.DEFAULT_CONFIG["paths"]["config"]
        )
        self.config = self._load_config()
        self._validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file and merge with defaults.

        Returns:
            The merged configuration dictionary.
        """
        config_path = pathlib.Path(self.config_path)
        if not config_path.exists():
            LOG.warning("Configuration file %s not found. Using defaults.", self.config_path)
            return copy.deepcopy(self.DEFAULT_CONFIG)

        try:
            user_config = yaml.safe_load(config_path.read_text()) or {}
            if not isinstance(user_config, dict):
                raise ValueError("top level of the configuration must be a mapping")

            # Merge section by section so a partial file keeps the other defaults
            merged_config = copy.deepcopy(self.DEFAULT_CONFIG)
            for key, value in user_config.items():
                if isinstance(value, dict) and isinstance(merged_config.get(key), dict):
                    merged_config[key].update(value)
                else:
                    merged_config[key] = value

            return merged_config
        except (OSError, yaml.YAMLError, ValueError) as e:
            LOG.error("Error loading configuration %s: %s. Using defaults.", self.config_path, e)
            return copy.deepcopy(self.DEFAULT_CONFIG)

    def _reset(self, section: str, key: str, reason: str) -> None:
        default = self.DEFAULT_CONFIG[section][key]
        LOG.warning("Invalid %s.%s %r (%s). Using %r.",
                    section, key, self.config[section][key], reason, default)
        self.config[section][key] = default

    def _validate_config(self) -> None:
        """
        Validate configuration values, resetting invalid ones to their defaults.
        """
        delay = self.config["debounce"]["delay_seconds"]
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay <= 0:
            self._reset("debounce", "delay_seconds", "must be a positive number")

        top_n = self.config["analysis"]["top_n"]
        if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n <= 0:
            self._reset("analysis", "top_n", "must be a positive integer")

        extension = self.config["report"]["extension"]
        if not isinstance(extension, str) or not extension.startswith(".") or len(extension) < 2:
            self._reset("report", "extension", "must start with '.'")

        pattern = self.config["watch"]["pattern"]
        if not isinstance(pattern, str) or not pattern.strip():
            self._reset("watch", "pattern", "must be a non-empty glob")

        level = self.config["logging"]["level"]
        if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
            self._reset("logging", "level", "unknown log level")
        else:
            self.config["logging"]["level"] = level.upper()

    def reload(self, config_path: Optional[str] = None) -> None:
        """
        Re-read configuration in place, so modules holding CONFIG see the change.

        Args:
            config_path: New configuration file; keeps the current one if None
        """
        if config_path:
            self.config_path = config_path
        self.config = self._load_config()
        self._validate_config()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key (dot notation supported, e.g., 'debounce.delay_seconds')
            default: The default value to return if the key is not found

        Returns:
            The configuration value, or the default if not found
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

# Create a singleton instance
CONFIG = ConfigManager()
