"""
Transaction Categorizer for the Spending Engine.

Four ordered stages, first match wins:
1. Split rules (context-dependent, always highest precedence)
2. Learned patterns (user corrections)
3. Custom user rules
4. Built-in regex table, falling back to "uncategorized"

Categorization is a pure function of the description, amount, date and the
rule sets the categorizer was built with.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..config.engine_config import CATEGORIZATION_CONFIG
from ..models import (
    CustomCategorizationRule,
    LearnedPattern,
    SplitCategorizationRule,
    Transaction,
)
from .pattern_matching import (
    match_builtin_rules,
    match_custom_rules,
    match_learned_patterns,
    match_split_rules,
)
from .preprocess import extract_merchant_name


logger = logging.getLogger(__name__)


@dataclass
class CategoryMatch:
    """Result of transaction categorization."""
    category_id: str
    stage: str  # 'split', 'learned', 'custom', 'builtin', 'fallback'
    confidence: float
    rule_id: Optional[str] = None


class TransactionCategorizer:
    """Categorizes transactions against user rule sets and the built-in table."""

    BUILTIN_CONFIDENCE = 0.9
    FALLBACK_CATEGORY = CATEGORIZATION_CONFIG["fallback_category"]

    def __init__(
        self,
        custom_rules: Optional[Sequence[CustomCategorizationRule]] = None,
        learned_patterns: Optional[Sequence[LearnedPattern]] = None,
        split_rules: Optional[Sequence[SplitCategorizationRule]] = None,
    ):
        self.custom_rules = list(custom_rules or [])
        self.learned_patterns = list(learned_patterns or [])
        self.split_rules = list(split_rules or [])

    @classmethod
    def from_settings(cls, settings) -> "TransactionCategorizer":
        """Build a categorizer from the rule sets stored in UserSettings."""
        return cls(
            custom_rules=settings.custom_rules,
            learned_patterns=settings.learned_patterns,
            split_rules=settings.split_rules,
        )

    def categorize_transaction(
        self,
        description: str,
        amount: float = 0.0,
        date: Optional[datetime] = None,
    ) -> CategoryMatch:
        """
        Categorize a single transaction.

        Args:
            description: Raw statement description
            amount: Transaction amount (non-negative)
            date: Transaction timestamp, used by time and day-of-week split conditions

        Returns:
            CategoryMatch naming the category and the stage that decided it
        """
        description = description or ""
        merchant = extract_merchant_name(description)

        if self.split_rules:
            split_match = match_split_rules(description, merchant, amount, date, self.split_rules)
            if split_match:
                rule, category_id = split_match
                return CategoryMatch(category_id, "split", 1.0, rule.id)

        learned = match_learned_patterns(description, merchant, self.learned_patterns)
        if learned:
            return CategoryMatch(learned.category_id, "learned", learned.confidence, learned.id)

        custom = match_custom_rules(description, amount, self.custom_rules)
        if custom:
            return CategoryMatch(custom.category_id, "custom", 1.0, custom.id)

        builtin = match_builtin_rules(description)
        if builtin:
            return CategoryMatch(builtin, "builtin", self.BUILTIN_CONFIDENCE)

        return CategoryMatch(self.FALLBACK_CATEGORY, "fallback", 0.0)

    def categorize(
        self,
        description: str,
        amount: float = 0.0,
        date: Optional[datetime] = None,
    ) -> str:
        """Return only the category id for a transaction."""
        return self.categorize_transaction(description, amount, date).category_id

    def categorize_transactions(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """
        Re-categorize a list of transactions.

        Returns:
            New Transaction objects; the inputs are left untouched
        """
        categorized = []
        for txn in transactions:
            category_id = self.categorize(txn.description, txn.amount, txn.date)
            categorized.append(replace(txn, category=category_id))

        logger.debug(f"Categorized {len(categorized)} transactions")
        return categorized

    def get_category_summary(self, transactions: Sequence[Transaction]) -> Dict[str, Dict]:
        """
        Aggregate transaction counts and totals per category.

        Returns:
            Dict of category_id -> {"count", "total"}
        """
        summary: Dict[str, Dict] = defaultdict(lambda: {"count": 0, "total": 0.0})
        for txn in transactions:
            summary[txn.category]["count"] += 1
            summary[txn.category]["total"] += txn.amount
        return dict(summary)


def categorize_transaction(
    description: str,
    custom_rules: Sequence[CustomCategorizationRule] = (),
    learned_patterns: Sequence[LearnedPattern] = (),
    split_rules: Sequence[SplitCategorizationRule] = (),
    amount: float = 0.0,
    date: Optional[datetime] = None,
) -> str:
    """Categorize one description against explicit rule sets."""
    categorizer = TransactionCategorizer(custom_rules, learned_patterns, split_rules)
    return categorizer.categorize(description, amount, date)
