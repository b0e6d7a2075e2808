"""
Category catalogue for the Spending Engine.

Default categories are fixed; user edits live in CategoryOverride records
layered on top, so a default can always be reset to its factory definition.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from ..models import Category


UNCATEGORIZED_ID = "uncategorized"

DEFAULT_CATEGORIES = {
    "school-housing": Category("school-housing", "School & Housing", "#F59E0B", "GraduationCap",
                               has_budget=False, is_default=True),
    "personal": Category("personal", "Personal", "#3B82F6", "User",
                         has_budget=True, is_default=True, monthly_budget=3000),
    "groceries-supplies": Category("groceries-supplies", "Groceries & Supplies", "#22C55E",
                                   "ShoppingCart", has_budget=True, is_default=True,
                                   monthly_budget=5000),
    "eating-out-delivery": Category("eating-out-delivery", "Eating Out & Delivery", "#F97316",
                                    "Utensils", has_budget=True, is_default=True,
                                    monthly_budget=8000),
    "shopping-retail": Category("shopping-retail", "Shopping & Retail", "#EC4899", "Shirt",
                                has_budget=True, is_default=True, monthly_budget=2000),
    "nightlife": Category("nightlife", "Nightlife", "#EF4444", "Wine",
                          has_budget=True, is_default=True, monthly_budget=12000),
    "transportation": Category("transportation", "Transportation", "#06B6D4", "Car",
                               has_budget=False, is_default=True),
    "work-ai": Category("work-ai", "Work & AI", "#8B5CF6", "Briefcase",
                        has_budget=False, is_default=True),
    "health-sports": Category("health-sports", "Health & Sports", "#22C55E", "Heart",
                              has_budget=False, is_default=True),
    "entertainment": Category("entertainment", "Entertainment", "#F97316", "Film",
                              has_budget=True, is_default=True, monthly_budget=5000),
    UNCATEGORIZED_ID: Category(UNCATEGORIZED_ID, "Uncategorized", "#6B7280", "HelpCircle",
                               has_budget=False, is_default=True),
}

DEFAULT_CATEGORY_IDS = list(DEFAULT_CATEGORIES)


def is_default_category_id(category_id: str) -> bool:
    return category_id in DEFAULT_CATEGORIES


def resolve_categories(settings) -> Dict[str, Category]:
    """
    Resolve the active category set for a user.

    Defaults have their overrides applied and soft-deleted defaults are
    skipped; custom categories follow in creation order.

    Args:
        settings: UserSettings holding category_overrides and custom_categories

    Returns:
        Ordered dict of category_id -> Category
    """
    overrides = {o.id: o for o in settings.category_overrides}
    result: Dict[str, Category] = {}

    for category_id, default in DEFAULT_CATEGORIES.items():
        override = overrides.get(category_id)
        if override is None:
            result[category_id] = replace(default)
            continue
        if override.is_deleted:
            continue
        result[category_id] = replace(
            default,
            name=override.name or default.name,
            color=override.color or default.color,
            icon=override.icon or default.icon,
        )

    for custom in settings.custom_categories:
        result[custom.id] = Category(
            id=custom.id,
            name=custom.name,
            color=custom.color,
            icon=custom.icon,
            has_budget=False,
            is_default=False,
        )

    return result


def get_category(category_id: str, settings) -> Optional[Category]:
    return resolve_categories(settings).get(category_id)


def get_all_category_ids(settings) -> List[str]:
    return list(resolve_categories(settings))


def is_valid_category_id(category_id: str, settings) -> bool:
    return category_id in resolve_categories(settings)


def get_category_or_fallback(category_id: str, settings) -> Category:
    """Resolve a category, falling back to "uncategorized" when unknown or deleted."""
    categories = resolve_categories(settings)
    return (
        categories.get(category_id)
        or categories.get(UNCATEGORIZED_ID)
        or DEFAULT_CATEGORIES[UNCATEGORIZED_ID]
    )
