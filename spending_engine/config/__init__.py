"""
Configuration Module for the Spending Engine.

Contains engine thresholds, the category catalogue, user settings and
settings persistence.
"""

from .engine_config import (
    FREQUENCY_DAYS,
    FUZZY_CONFIG,
    CATEGORIZATION_CONFIG,
    DUPLICATE_CONFIG,
    SUBSCRIPTION_CONFIG,
    SUGGESTION_CONFIG,
)
from .categories import (
    DEFAULT_CATEGORIES,
    DEFAULT_CATEGORY_IDS,
    UNCATEGORIZED_ID,
    resolve_categories,
    get_category,
    get_category_or_fallback,
    is_valid_category_id,
    is_default_category_id,
)
from .settings import (
    CURRENT_VERSION,
    DEFAULT_BUDGETS,
    UserSettings,
    UserPreferences,
    SuggestionSettings,
    SubscriptionSettings,
)
from .settings_storage import (
    MIGRATIONS,
    SettingsStore,
    SettingsStorageError,
    migrate_settings,
    settings_from_document,
)

__all__ = [
    "FREQUENCY_DAYS",
    "FUZZY_CONFIG",
    "CATEGORIZATION_CONFIG",
    "DUPLICATE_CONFIG",
    "SUBSCRIPTION_CONFIG",
    "SUGGESTION_CONFIG",
    "DEFAULT_CATEGORIES",
    "DEFAULT_CATEGORY_IDS",
    "UNCATEGORIZED_ID",
    "resolve_categories",
    "get_category",
    "get_category_or_fallback",
    "is_valid_category_id",
    "is_default_category_id",
    "CURRENT_VERSION",
    "DEFAULT_BUDGETS",
    "UserSettings",
    "UserPreferences",
    "SuggestionSettings",
    "SubscriptionSettings",
    "MIGRATIONS",
    "SettingsStore",
    "SettingsStorageError",
    "migrate_settings",
    "settings_from_document",
]
