"""
Configuration Defaults - Default configuration templates and utilities.

This module provides default configuration templates and utilities
for creating configuration files with sensible defaults.
"""

import json
from pathlib import Path
from typing import Any, Dict

from anistream.core.config_schemas import AppSettings


SETTINGS_FILENAME = "settings.json"


def get_default_settings() -> AppSettings:
    """
    Get default application settings.

    Returns:
        AppSettings instance with the four providers in their default setup
    """
    return AppSettings()


def create_default_config_files(config_dir: Path) -> None:
    """
    Create default configuration files in the specified directory.

    Existing files are left untouched.

    Args:
        config_dir: Directory to create configuration files in
    """
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME
    if not settings_file.exists():
        settings = get_default_settings()
        with open(settings_file, 'w', encoding='utf-8') as f:
            json.dump(settings.model_dump(), f, indent=2, ensure_ascii=False)


def validate_config_directory(config_dir: Path) -> Dict[str, Any]:
    """
    Validate a configuration directory and return status report.

    Args:
        config_dir: Path to configuration directory

    Returns:
        Dictionary containing validation results
    """
    settings_file = config_dir / SETTINGS_FILENAME
    report = {
        "valid": True,
        "exists": config_dir.exists(),
        "settings_exists": settings_file.exists(),
        "issues": []
    }

    if not report["exists"]:
        report["issues"].append(f"Configuration directory does not exist: {config_dir}")
        return report

    if report["settings_exists"]:
        try:
            with open(settings_file, 'r', encoding='utf-8') as f:
                AppSettings.model_validate(json.load(f))
        except Exception as e:
            report["valid"] = False
            report["issues"].append(f"Invalid {SETTINGS_FILENAME}: {e}")

    return report


# Export utility functions
__all__ = [
    "SETTINGS_FILENAME",
    "get_default_settings",
    "create_default_config_files",
    "validate_config_directory",
]
