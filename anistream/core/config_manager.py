"""
Configuration Manager - settings.json persistence for AniStream.

A single JSON file holds resolver, provider, fallback and logging settings.
Writes go through a temp file so a crash never leaves a half-written file;
a file that no longer validates is moved aside and replaced by defaults.
"""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from anistream.core.config_defaults import SETTINGS_FILENAME
from anistream.core.config_schemas import AppSettings
from anistream.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Thread-safe owner of the application's AppSettings.

    Settings are addressed with dot paths such as ``resolver.timeout`` or
    ``providers.anify.enabled``; every change is validated as a whole
    AppSettings before it is kept and written back.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        self.config_dir = Path(config_dir or "config")
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.config_dir / SETTINGS_FILENAME

        self._lock = Lock()
        self._settings = self._read()

    def _read(self) -> AppSettings:
        if not self.settings_file.exists():
            logger.info(f"No settings at {self.settings_file}, writing defaults")
            return self._write(AppSettings())

        try:
            data = json.loads(self.settings_file.read_text(encoding="utf-8"))
            settings = AppSettings.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            backup_path = self.settings_file.with_suffix(".json.backup")
            logger.warning(f"Invalid settings file, moved to {backup_path}: {e}")
            self.settings_file.replace(backup_path)
            return self._write(AppSettings())
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read settings: {e}",
                config_path=str(self.settings_file)
            ) from e

        logger.debug(f"Loaded settings from {self.settings_file}")
        return settings

    def _write(self, settings: AppSettings) -> AppSettings:
        temp_file = self.settings_file.with_suffix(".tmp")
        try:
            temp_file.write_text(
                json.dumps(settings.model_dump(), indent=2, ensure_ascii=False),
                encoding="utf-8"
            )
            temp_file.replace(self.settings_file)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationError(
                f"Failed to save settings: {e}",
                config_path=str(self.settings_file)
            ) from e
        return settings

    @property
    def settings(self) -> AppSettings:
        with self._lock:
            return self._settings

    @staticmethod
    def _split(key_path: str) -> List[str]:
        keys = [key for key in key_path.split(".") if key]
        if not keys:
            raise ConfigurationError(f"Invalid setting path: '{key_path}'")
        return keys

    def get_setting(self, key_path: str, default: Any = None) -> Any:
        """Value at a dot path, or ``default`` if the path does not exist."""
        with self._lock:
            current: Any = self._settings.model_dump()
        for key in self._split(key_path):
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
        return current

    def update_setting(self, key_path: str, value: Any) -> None:
        """
        Change one setting and persist the result.

        Raises:
            ConfigurationError: If the path does not exist or the new value
                does not validate
        """
        keys = self._split(key_path)

        with self._lock:
            data: Dict[str, Any] = self._settings.model_dump()
            parent: Any = data
            for key in keys[:-1]:
                parent = parent.get(key) if isinstance(parent, dict) else None
            if not isinstance(parent, dict) or keys[-1] not in parent:
                raise ConfigurationError(f"Invalid setting path: '{key_path}'")

            parent[keys[-1]] = value
            try:
                updated = AppSettings.model_validate(data)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid value for {key_path}: {e}") from e

            self._settings = self._write(updated)

        logger.info(f"Setting updated: {key_path} = {value!r}")

    def reload_configuration(self) -> None:
        """Re-read settings.json, picking up edits made outside the process."""
        with self._lock:
            self._settings = self._read()

    def reset_to_defaults(self) -> None:
        with self._lock:
            logger.warning("Resetting configuration to defaults")
            self._settings = self._write(AppSettings())


__all__ = ["ConfigManager"]
