"""
Settings loader — reads firstrun.yml into the Settings model.

The settings file is optional. When present it is YAML, validated
against the Pydantic schema, and relative paths inside it are
anchored at the file's directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from firstrun.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default settings filename
SETTINGS_FILE = "firstrun.yml"


class ConfigError(Exception):
    """Raised when the settings file is invalid or unreadable."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for firstrun.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to firstrun.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to firstrun.yml. If None, searches upward;
            if nothing is found, defaults anchored at the cwd are returned.

    Returns:
        Validated Settings model with absolute paths.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            logger.debug("No %s found, using defaults", SETTINGS_FILE)
            return Settings().resolve_paths(Path.cwd())

    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "firstrun" key or be flat
    if "firstrun" in data and isinstance(data["firstrun"], dict):
        data = data["firstrun"]

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.info("Loaded settings from %s", path)
    return settings.resolve_paths(path.parent.resolve())
