"""
Core records shared across the Spending Engine.

Transactions carry datetimes; records that live inside the persisted user
settings document keep ISO-8601 timestamp strings so they round-trip through
JSON unchanged.
"""

import re
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional, Union


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys a dataclass does not declare (older or newer documents)."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def now_iso(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).isoformat()


def parse_iso(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """
    Parse an ISO timestamp, returning None for missing or malformed values.

    Offset-aware values are converted to naive local time so they compare
    with ``datetime.now()``.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        try:
            value = datetime.fromisoformat(re.sub(r"Z$", "+00:00", value))
        except (TypeError, ValueError):
            return None
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


@dataclass
class Transaction:
    """A parsed bank-statement row. Only ``category`` changes after parsing."""
    id: str
    date: datetime
    purchase_date: datetime
    description: str
    amount: float
    merchant: str
    location: str = ""
    category: str = "uncategorized"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["purchase_date"] = self.purchase_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        values = _known_fields(cls, data)
        date = parse_iso(values.get("date")) or datetime.now()
        values["date"] = date
        values["purchase_date"] = parse_iso(values.get("purchase_date")) or date
        values["amount"] = abs(float(values.get("amount", 0.0)))
        return cls(**values)


@dataclass
class Category:
    """A spending category as presented to callers (overrides applied)."""
    id: str
    name: str
    color: str
    icon: str
    has_budget: bool = False
    is_default: bool = False
    monthly_budget: Optional[float] = None
    is_deleted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BudgetConfig:
    enabled: bool = False
    amount: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetConfig":
        return cls(**_known_fields(cls, data))


@dataclass
class CustomCategory:
    """User-created category. Hard-deleted when removed."""
    id: str
    name: str
    color: str
    icon: str
    created_at: str
    modified_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomCategory":
        return cls(**_known_fields(cls, data))


@dataclass
class CategoryOverride:
    """Edit or soft-delete layered over a default category."""
    id: str
    modified_at: str
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryOverride":
        return cls(**_known_fields(cls, data))


@dataclass
class CustomCategorizationRule:
    """User rule mapping a literal or regex pattern to a category."""
    id: str
    pattern: str
    category_id: str
    is_regex: bool = False
    priority: int = 0
    created_at: str = ""
    match_count: int = 0
    match_type: str = "contains"  # contains, startsWith, endsWith, exact, fuzzy
    case_sensitive: bool = False
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    exclude_patterns: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomCategorizationRule":
        values = _known_fields(cls, data)
        values["exclude_patterns"] = list(values.get("exclude_patterns") or [])
        return cls(**values)


@dataclass
class SplitRuleCondition:
    """Context test for a split rule branch."""
    type: str  # amount, time, dayOfWeek, description
    operator: str  # gt, lt, eq, between, contains
    value: Union[str, float]
    value_end: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitRuleCondition":
        return cls(**_known_fields(cls, data))


@dataclass
class SplitRuleBranch:
    condition: SplitRuleCondition
    category_id: str
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitRuleBranch":
        return cls(
            condition=SplitRuleCondition.from_dict(data["condition"]),
            category_id=data["category_id"],
            label=data.get("label"),
        )


@dataclass
class SplitCategorizationRule:
    """One merchant, several categories chosen by transaction context."""
    id: str
    merchant_pattern: str
    default_category_id: str
    is_regex: bool = False
    conditions: List[SplitRuleBranch] = field(default_factory=list)
    created_at: str = ""
    match_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitCategorizationRule":
        values = _known_fields(cls, data)
        values["conditions"] = [
            SplitRuleBranch.from_dict(branch) for branch in values.get("conditions") or []
        ]
        return cls(**values)


@dataclass
class LearnedPattern:
    """Merchant-to-category association learned from manual recategorization."""
    id: str
    merchant_pattern: str
    category_id: str
    confidence: float
    occurrences: int = 1
    last_used: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearnedPattern":
        return cls(**_known_fields(cls, data))


@dataclass
class Subscription:
    """A detected or user-confirmed recurring charge. Never auto-deleted."""
    id: str
    name: str
    merchant_pattern: str
    frequency: str
    amount: float
    category_id: str
    detection_method: str  # known-service, pattern-analysis, user-confirmed
    confidence: float
    known_service_id: Optional[str] = None
    amount_variance: float = 0.0
    currency: str = "MXN"
    expected_billing_day: Optional[int] = None
    next_expected_date: Optional[str] = None
    last_charge_date: Optional[str] = None
    status: str = "active"  # active, paused, cancelled, pending
    notify_before_renewal: bool = True
    notify_days_before: int = 3
    created_at: str = ""
    updated_at: str = ""
    transaction_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        values = _known_fields(cls, data)
        values["transaction_ids"] = list(values.get("transaction_ids") or [])
        return cls(**values)
