"""
User settings for the Spending Engine.

A single document holding budgets, rule sets, category overrides,
subscription tracking and preferences. Operations mutate the settings in
place and return the record they created or changed.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..categorisation.learning import (
    forget_pattern,
    generate_record_id,
    learn_pattern,
    trust_pattern,
)
from ..models import (
    BudgetConfig,
    CategoryOverride,
    CustomCategorizationRule,
    CustomCategory,
    LearnedPattern,
    SplitCategorizationRule,
    SplitRuleBranch,
    Subscription,
    now_iso,
)
from .categories import UNCATEGORIZED_ID, is_default_category_id


logger = logging.getLogger(__name__)

CURRENT_VERSION = 5

DEFAULT_BUDGETS = {
    "school-housing": {"enabled": False, "amount": 0},
    "personal": {"enabled": True, "amount": 18000},
    "nightlife": {"enabled": True, "amount": 12000},
    "transportation": {"enabled": False, "amount": 0},
    "work-ai": {"enabled": False, "amount": 0},
    "health-sports": {"enabled": False, "amount": 0},
    "entertainment": {"enabled": True, "amount": 5000},
    "uncategorized": {"enabled": False, "amount": 0},
}

DEFAULT_TOTAL_MONTHLY_BUDGET = 35000


@dataclass
class SuggestionSettings:
    enable_suggestions: bool = True
    min_confidence: float = 0.7
    max_suggestions: int = 3

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SuggestionSettings":
        defaults = asdict(cls())
        defaults.update({k: v for k, v in (data or {}).items() if k in defaults})
        return cls(**defaults)


@dataclass
class UserPreferences:
    confirm_destructive_actions: bool = True
    default_upload_mode: str = "merge"  # merge or replace
    enable_pattern_learning: bool = True
    user_name: Optional[str] = None
    enable_greetings: bool = True
    enable_fun_messages: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        defaults = asdict(cls())
        defaults.update({k: v for k, v in (data or {}).items() if k in defaults})
        return cls(**defaults)


@dataclass
class SubscriptionSettings:
    """Detection preferences plus the user's tracked subscriptions."""
    enable_auto_detection: bool = True
    minimum_occurrences: int = 2
    confidence_threshold: float = 0.7
    enable_renewal_notifications: bool = True
    default_notify_days_before: int = 3
    subscriptions: List[Subscription] = field(default_factory=list)
    ignored_patterns: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscriptionSettings":
        data = dict(data or {})
        settings = cls()
        for name in (
            "enable_auto_detection",
            "minimum_occurrences",
            "confidence_threshold",
            "enable_renewal_notifications",
            "default_notify_days_before",
        ):
            if name in data:
                setattr(settings, name, data[name])
        settings.subscriptions = [
            Subscription.from_dict(s) for s in data.get("subscriptions") or []
        ]
        settings.ignored_patterns = list(data.get("ignored_patterns") or [])
        return settings

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        for sub in self.subscriptions:
            if sub.id == subscription_id:
                return sub
        return None

    def add_subscription(self, subscription: Subscription) -> Subscription:
        self.subscriptions.append(subscription)
        logger.info(f"Tracking subscription {subscription.name!r} ({subscription.detection_method})")
        return subscription

    def dismiss_pattern(self, pattern: str) -> bool:
        """Ignore a merchant pattern in future detection runs."""
        normalized = pattern.upper().strip()
        if normalized in self.ignored_patterns:
            return False
        self.ignored_patterns.append(normalized)
        return True

    def update_subscription(
        self, subscription_id: str, now: Optional[datetime] = None, **updates
    ) -> Optional[Subscription]:
        sub = self.get_subscription(subscription_id)
        if sub is None:
            return None
        for key, value in updates.items():
            if key in ("id", "created_at") or not hasattr(sub, key):
                raise ValueError(f"Cannot update subscription field: {key}")
            setattr(sub, key, value)
        sub.updated_at = now_iso(now)
        return sub

    def cancel_subscription(
        self, subscription_id: str, now: Optional[datetime] = None
    ) -> Optional[Subscription]:
        return self.update_subscription(subscription_id, now=now, status="cancelled")

    def remove_subscription(self, subscription_id: str) -> bool:
        """Remove a subscription. Only ever called on explicit user request."""
        before = len(self.subscriptions)
        self.subscriptions = [s for s in self.subscriptions if s.id != subscription_id]
        return len(self.subscriptions) < before


@dataclass
class UserSettings:
    """Complete user settings document."""
    version: int = CURRENT_VERSION
    budgets: Dict[str, BudgetConfig] = field(
        default_factory=lambda: {k: BudgetConfig(**v) for k, v in DEFAULT_BUDGETS.items()}
    )
    total_monthly_budget: Optional[float] = DEFAULT_TOTAL_MONTHLY_BUDGET
    enable_total_budget: bool = True
    custom_rules: List[CustomCategorizationRule] = field(default_factory=list)
    learned_patterns: List[LearnedPattern] = field(default_factory=list)
    split_rules: List[SplitCategorizationRule] = field(default_factory=list)
    suggestion_settings: SuggestionSettings = field(default_factory=SuggestionSettings)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    custom_categories: List[CustomCategory] = field(default_factory=list)
    category_overrides: List[CategoryOverride] = field(default_factory=list)
    subscriptions: SubscriptionSettings = field(default_factory=SubscriptionSettings)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSettings":
        """
        Build settings from a current-version document, filling gaps from defaults.

        Saved budgets are merged over the default budgets rather than replacing them.
        """
        settings = cls()
        budgets = dict(DEFAULT_BUDGETS)
        budgets.update(data.get("budgets") or {})
        settings.budgets = {k: BudgetConfig.from_dict(v) for k, v in budgets.items()}

        if "total_monthly_budget" in data:
            settings.total_monthly_budget = data["total_monthly_budget"]
        settings.enable_total_budget = data.get("enable_total_budget", True)
        settings.custom_rules = [
            CustomCategorizationRule.from_dict(r) for r in data.get("custom_rules") or []
        ]
        settings.learned_patterns = [
            LearnedPattern.from_dict(p) for p in data.get("learned_patterns") or []
        ]
        settings.split_rules = [
            SplitCategorizationRule.from_dict(r) for r in data.get("split_rules") or []
        ]
        settings.suggestion_settings = SuggestionSettings.from_dict(data.get("suggestion_settings"))
        settings.preferences = UserPreferences.from_dict(data.get("preferences"))
        settings.custom_categories = [
            CustomCategory.from_dict(c) for c in data.get("custom_categories") or []
        ]
        settings.category_overrides = [
            CategoryOverride.from_dict(o) for o in data.get("category_overrides") or []
        ]
        settings.subscriptions = SubscriptionSettings.from_dict(data.get("subscriptions"))
        settings.version = CURRENT_VERSION
        return settings

    # ------------------------------------------------------------------
    # Custom rules
    # ------------------------------------------------------------------
    def add_custom_rule(
        self,
        pattern: str,
        category_id: str,
        now: Optional[datetime] = None,
        **options,
    ) -> CustomCategorizationRule:
        """
        Add a custom categorization rule.

        Args:
            pattern: Literal text or regex
            category_id: Target category
            now: Clock override for created_at
            **options: is_regex, priority, match_type, case_sensitive,
                min_amount, max_amount, exclude_patterns

        Returns:
            The new rule
        """
        rule = CustomCategorizationRule(
            id=generate_record_id("rule"),
            pattern=pattern,
            category_id=category_id,
            created_at=now_iso(now),
            match_count=0,
            **options,
        )
        self.custom_rules.append(rule)
        return rule

    def update_custom_rule(self, rule_id: str, **updates) -> Optional[CustomCategorizationRule]:
        for rule in self.custom_rules:
            if rule.id == rule_id:
                for key, value in updates.items():
                    if key in ("id", "created_at") or not hasattr(rule, key):
                        raise ValueError(f"Cannot update rule field: {key}")
                    setattr(rule, key, value)
                return rule
        return None

    def remove_custom_rule(self, rule_id: str) -> bool:
        before = len(self.custom_rules)
        self.custom_rules = [r for r in self.custom_rules if r.id != rule_id]
        return len(self.custom_rules) < before

    # ------------------------------------------------------------------
    # Split rules
    # ------------------------------------------------------------------
    def add_split_rule(
        self,
        merchant_pattern: str,
        default_category_id: str,
        conditions: Optional[List[SplitRuleBranch]] = None,
        is_regex: bool = False,
        now: Optional[datetime] = None,
    ) -> SplitCategorizationRule:
        rule = SplitCategorizationRule(
            id=generate_record_id("split"),
            merchant_pattern=merchant_pattern,
            default_category_id=default_category_id,
            is_regex=is_regex,
            conditions=list(conditions or []),
            created_at=now_iso(now),
        )
        self.split_rules.append(rule)
        return rule

    def remove_split_rule(self, rule_id: str) -> bool:
        before = len(self.split_rules)
        self.split_rules = [r for r in self.split_rules if r.id != rule_id]
        return len(self.split_rules) < before

    # ------------------------------------------------------------------
    # Learned patterns
    # ------------------------------------------------------------------
    def learn_pattern(
        self, merchant_pattern: str, category_id: str, now: Optional[datetime] = None
    ) -> Optional[LearnedPattern]:
        """Apply the learning policy, unless the user disabled pattern learning."""
        if not self.preferences.enable_pattern_learning:
            return None
        return learn_pattern(self.learned_patterns, merchant_pattern, category_id, now)

    def forget_pattern(self, pattern_id: str) -> None:
        self.learned_patterns = forget_pattern(self.learned_patterns, pattern_id)

    def trust_pattern(self, pattern_id: str) -> Optional[LearnedPattern]:
        return trust_pattern(self.learned_patterns, pattern_id)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    def _reassign_category(self, category_id: str) -> None:
        """Point rules and patterns that targeted a removed category at "uncategorized"."""
        for rule in self.custom_rules:
            if rule.category_id == category_id:
                rule.category_id = UNCATEGORIZED_ID
        for pattern in self.learned_patterns:
            if pattern.category_id == category_id:
                pattern.category_id = UNCATEGORIZED_ID
        for split_rule in self.split_rules:
            if split_rule.default_category_id == category_id:
                split_rule.default_category_id = UNCATEGORIZED_ID
            for branch in split_rule.conditions:
                if branch.category_id == category_id:
                    branch.category_id = UNCATEGORIZED_ID

    def _get_override(self, category_id: str) -> Optional[CategoryOverride]:
        for override in self.category_overrides:
            if override.id == category_id:
                return override
        return None

    def add_custom_category(
        self, name: str, color: str, icon: str, now: Optional[datetime] = None
    ) -> str:
        """Create a custom category with a disabled budget entry; returns its id."""
        category_id = generate_record_id("custom")
        timestamp = now_iso(now)
        self.custom_categories.append(
            CustomCategory(category_id, name, color, icon, timestamp, timestamp)
        )
        self.budgets[category_id] = BudgetConfig(enabled=False, amount=0)
        return category_id

    def update_custom_category(
        self, category_id: str, now: Optional[datetime] = None, **updates
    ) -> Optional[CustomCategory]:
        for category in self.custom_categories:
            if category.id == category_id:
                for key in ("name", "color", "icon"):
                    if updates.get(key) is not None:
                        setattr(category, key, updates[key])
                category.modified_at = now_iso(now)
                return category
        return None

    def delete_custom_category(self, category_id: str) -> None:
        """Hard-delete a custom category and drop its budget."""
        if is_default_category_id(category_id):
            raise ValueError(f"{category_id} is a default category; use delete_default_category")
        self.custom_categories = [c for c in self.custom_categories if c.id != category_id]
        self.budgets.pop(category_id, None)
        self._reassign_category(category_id)

    def update_default_category(
        self, category_id: str, now: Optional[datetime] = None, **updates
    ) -> CategoryOverride:
        """Create or update the override for a default category's name, color or icon."""
        if category_id == UNCATEGORIZED_ID and updates.get("name"):
            raise ValueError("The uncategorized category cannot be renamed")

        timestamp = now_iso(now)
        override = self._get_override(category_id)
        if override is None:
            override = CategoryOverride(id=category_id, modified_at=timestamp)
            self.category_overrides.append(override)

        for key in ("name", "color", "icon"):
            if updates.get(key) is not None:
                setattr(override, key, updates[key])
        override.modified_at = timestamp
        return override

    def delete_default_category(
        self, category_id: str, now: Optional[datetime] = None
    ) -> CategoryOverride:
        """Soft-delete a default category; it stays restorable."""
        if category_id == UNCATEGORIZED_ID:
            raise ValueError("The uncategorized category cannot be deleted")

        timestamp = now_iso(now)
        override = self._get_override(category_id)
        if override is None:
            override = CategoryOverride(id=category_id, modified_at=timestamp)
            self.category_overrides.append(override)
        override.is_deleted = True
        override.modified_at = timestamp

        self._reassign_category(category_id)
        return override

    def restore_default_category(
        self, category_id: str, now: Optional[datetime] = None
    ) -> Optional[CategoryOverride]:
        override = self._get_override(category_id)
        if override is not None:
            override.is_deleted = False
            override.modified_at = now_iso(now)
        return override

    def reset_default_category(self, category_id: str) -> None:
        """Drop the override so the category returns to its factory definition."""
        self.category_overrides = [o for o in self.category_overrides if o.id != category_id]

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------
    def set_budget(self, category_id: str, enabled: bool, amount: float) -> BudgetConfig:
        if amount < 0:
            raise ValueError("Budget amount must be non-negative")
        budget = BudgetConfig(enabled=enabled, amount=amount)
        self.budgets[category_id] = budget
        return budget

    def set_total_budget(self, amount: Optional[float], enabled: bool = True) -> None:
        self.total_monthly_budget = amount
        self.enable_total_budget = enabled
