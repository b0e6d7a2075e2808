"""
Settings persistence for the Spending Engine.

Settings are stored as one JSON document with an integer ``version``. Older
documents are brought forward by an ordered chain of pure migration steps,
each one only adding fields, before being merged with the defaults.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from .settings import CURRENT_VERSION, UserSettings


logger = logging.getLogger(__name__)


class SettingsStorageError(Exception):
    """Raised when a settings document cannot be read or written."""
    pass


def _migrate_v1_to_v2(data: Dict[str, Any]) -> Dict[str, Any]:
    # Category management
    data.setdefault("custom_categories", [])
    data.setdefault("category_overrides", [])
    return data


def _migrate_v2_to_v3(data: Dict[str, Any]) -> Dict[str, Any]:
    # Subscription tracking
    data.setdefault("subscriptions", {})
    return data


def _migrate_v3_to_v4(data: Dict[str, Any]) -> Dict[str, Any]:
    # Personalization preferences
    preferences = data.setdefault("preferences", {})
    preferences.setdefault("user_name", None)
    preferences.setdefault("enable_greetings", True)
    preferences.setdefault("enable_fun_messages", True)
    return data


def _migrate_v4_to_v5(data: Dict[str, Any]) -> Dict[str, Any]:
    # Split rules and category suggestions
    data.setdefault("split_rules", [])
    data.setdefault("suggestion_settings", {})
    return data


# MIGRATIONS[i] upgrades a version i+1 document to version i+2
MIGRATIONS: List[Callable[[Dict[str, Any]], Dict[str, Any]]] = [
    _migrate_v1_to_v2,
    _migrate_v2_to_v3,
    _migrate_v3_to_v4,
    _migrate_v4_to_v5,
]


def migrate_settings(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply every migration step from the document's version to the current one.

    Documents without a version are treated as version 1. The input dict is
    not modified.

    Args:
        data: Raw settings document

    Returns:
        Migrated document with ``version`` set to CURRENT_VERSION
    """
    if not isinstance(data, dict):
        raise TypeError(f"Settings document must be an object, got {type(data).__name__}")

    migrated = copy.deepcopy(data)
    version = migrated.get("version") or 1

    if version > CURRENT_VERSION:
        logger.warning(
            f"Settings version {version} is newer than supported version {CURRENT_VERSION}"
        )

    for step in MIGRATIONS[max(version, 1) - 1:]:
        migrated = step(migrated)
        migrated["version"] = version = version + 1
        logger.debug(f"Migrated settings to version {version}")

    migrated["version"] = CURRENT_VERSION
    return migrated


def settings_from_document(data: Dict[str, Any]) -> UserSettings:
    """Migrate a raw document and merge it over the default settings."""
    return UserSettings.from_dict(migrate_settings(data))


class SettingsStore:
    """JSON-file backed settings store."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> UserSettings:
        """
        Load settings, falling back to defaults.

        A missing, unreadable or corrupt document is logged and replaced by
        default settings; it never raises.
        """
        if not self.path.exists():
            return UserSettings()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return settings_from_document(data)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Failed to load settings from {self.path}: {e}")
            return UserSettings()

    def load_strict(self) -> UserSettings:
        """Load settings, raising SettingsStorageError instead of falling back."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return settings_from_document(data)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            raise SettingsStorageError(f"Cannot load settings from {self.path}: {e}") from e

    def save(self, settings: UserSettings) -> bool:
        """
        Write settings atomically.

        Returns:
            True on success; failures are logged and reported as False
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save settings to {self.path}: {e}")
            return False

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to clear settings at {self.path}: {e}")
