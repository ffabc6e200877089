"""Configuration loading service.

Reads config.yaml, folds a few flat shorthand keys into their nested sections
and validates the result against AppConfig.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from claude_watch.models.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

# Flat keys accepted for convenience -> (section, field)
FLAT_KEY_SECTIONS = {
    "scan_interval": ("polling", "process_interval"),
    "activity_interval": ("polling", "activity_interval"),
    "log_interval": ("polling", "log_interval"),
    "cpu_threshold": ("discovery", "active_cpu_threshold"),
    "conflict_window": ("conflicts", "window_seconds"),
    "conflict_expiry": ("conflicts", "expiry_seconds"),
    "history_seconds": ("activity", "history_seconds"),
}


class ConfigService:
    """Loads and caches the application configuration.

    A missing file, unreadable YAML or a failed validation all fall back to
    defaults with a logged message; the monitor always starts.
    """

    def __init__(self, config_path: str | Path = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Read, normalize and validate the config file."""
        raw = self._read_raw()
        config = AppConfig()
        if raw:
            try:
                config = AppConfig.model_validate(self._normalize(raw))
            except ValidationError as e:
                logger.warning(f"Invalid settings in {self.config_path}, using defaults: {e}")
        self._config = config
        return config

    def _read_raw(self) -> dict[str, Any] | None:
        if not self.config_path.is_file():
            logger.info(f"No config at {self.config_path}; running with defaults")
            return None
        try:
            raw = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
            return None
        if raw is not None and not isinstance(raw, dict):
            logger.warning(f"Config {self.config_path} is not a mapping, using defaults")
            return None
        return raw

    def get_config(self) -> AppConfig:
        """Current configuration, loading it on first use."""
        return self._config if self._config is not None else self.load()

    def reload(self) -> AppConfig:
        self._config = None
        return self.load()

    def save(self, config: AppConfig | None = None) -> bool:
        """Write the given (or current) configuration as YAML.

        Returns:
            False if there was nothing to write or the write failed.
        """
        target = config or self._config
        if target is None:
            return False
        document = yaml.safe_dump(target.model_dump(mode="json"), sort_keys=False)
        try:
            self.config_path.write_text(document, encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot write config {self.config_path}: {e}")
            return False
        return True

    def _normalize(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Move flat shorthand keys into their sections.

        A value already present in the nested section wins over the flat key.
        """
        normalized = {k: v for k, v in raw.items() if k not in FLAT_KEY_SECTIONS}
        for key, (section, field_name) in FLAT_KEY_SECTIONS.items():
            if key not in raw:
                continue
            nested = normalized.get(section)
            nested = dict(nested) if isinstance(nested, dict) else {}
            if field_name in nested:
                logger.info(f"Ignoring {key}: {section}.{field_name} is set")
            else:
                nested[field_name] = raw[key]
            normalized[section] = nested
        return normalized


_config_service: ConfigService | None = None


def get_config_service(config_path: str | Path = DEFAULT_CONFIG_PATH) -> ConfigService:
    """Shared ConfigService; ``config_path`` only matters on the first call."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService(config_path)
    return _config_service


def reset_config_service() -> None:
    global _config_service
    _config_service = None
