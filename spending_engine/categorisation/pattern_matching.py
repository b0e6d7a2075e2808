"""
Rule Matching for Transaction Categorization.

Evaluates the user-defined rule sets (split rules, learned patterns, custom
rules) and the built-in regex table. Every matcher returns None when nothing
applies; a rule with an invalid regex is logged and skipped.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Pattern, Sequence, Tuple

from ..config.engine_config import CATEGORIZATION_CONFIG
from ..matching.fuzzy_match import fuzzy_match, fuzzy_pattern_match, normalize_merchant_name
from ..models import (
    CustomCategorizationRule,
    LearnedPattern,
    SplitCategorizationRule,
    SplitRuleCondition,
)
from ..patterns.transaction_patterns import BUILTIN_RULES_SORTED


logger = logging.getLogger(__name__)

_BUILTIN_COMPILED = [
    (category_id, [re.compile(p) for p in info["regex_patterns"]])
    for category_id, info in BUILTIN_RULES_SORTED
]


def compile_rule_pattern(pattern: str, case_sensitive: bool = False) -> Optional[Pattern]:
    """
    Compile a user-supplied regex.

    Returns:
        Compiled pattern, or None if the pattern is not a valid regex
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        logger.warning(f"Skipping rule with invalid regex {pattern!r}: {e}")
        return None


def _as_number(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _compare(actual: float, condition: SplitRuleCondition) -> bool:
    value = _as_number(condition.value)
    if value is None:
        return False

    if condition.operator == "gt":
        return actual > value
    if condition.operator == "lt":
        return actual < value
    if condition.operator == "eq":
        return actual == value
    if condition.operator == "between":
        value_end = _as_number(condition.value_end)
        if value_end is None:
            return False
        return value <= actual <= value_end
    return False


def evaluate_split_condition(
    condition: SplitRuleCondition,
    amount: float,
    date: Optional[datetime] = None,
    description: str = "",
) -> bool:
    """
    Evaluate one split rule condition against a transaction's context.

    Args:
        condition: Condition to test
        amount: Transaction amount
        date: Transaction timestamp (time and dayOfWeek conditions need it)
        description: Raw description (description conditions need it)

    Returns:
        True if the condition is satisfied
    """
    if condition.type == "amount":
        tolerance = CATEGORIZATION_CONFIG["custom_rules"]["amount_eq_tolerance"]
        # Strictly below the tolerance for floating point equality
        if condition.operator == "eq":
            value = _as_number(condition.value)
            return value is not None and abs(amount - value) < tolerance
        return _compare(amount, condition)

    if condition.type == "time":
        if date is None:
            return False
        return _compare(date.hour, condition)

    if condition.type == "dayOfWeek":
        if date is None or condition.operator not in ("eq", "between"):
            return False
        # 0 = Sunday ... 6 = Saturday
        day_of_week = (date.weekday() + 1) % 7
        return _compare(day_of_week, condition)

    if condition.type == "description":
        if not description:
            return False
        search_value = str(condition.value).lower()
        desc_lower = description.lower()
        if condition.operator == "contains":
            return search_value in desc_lower
        if condition.operator == "eq":
            return desc_lower == search_value
        return False

    return False


def match_split_rules(
    description: str,
    merchant: str,
    amount: float,
    date: Optional[datetime],
    split_rules: Sequence[SplitCategorizationRule],
) -> Optional[Tuple[SplitCategorizationRule, str]]:
    """
    Find the first split rule whose merchant pattern matches.

    Returns:
        Tuple of (rule, category_id) where category_id is the first satisfied
        condition's category or the rule default, or None
    """
    for rule in split_rules:
        if rule.is_regex:
            regex = compile_rule_pattern(rule.merchant_pattern)
            if regex is None:
                continue
            matched = bool(regex.search(description) or regex.search(merchant))
        else:
            pattern = rule.merchant_pattern.upper()
            matched = pattern in description.upper() or pattern in merchant.upper()

        if not matched:
            continue

        for branch in rule.conditions:
            if evaluate_split_condition(branch.condition, amount, date, description):
                return rule, branch.category_id

        return rule, rule.default_category_id

    return None


def match_learned_patterns(
    description: str,
    merchant: str,
    learned_patterns: Sequence[LearnedPattern],
) -> Optional[LearnedPattern]:
    """
    Find a confident learned pattern for the transaction.

    Substring match on the normalized pattern wins outright; very confident
    patterns also match on fuzzy similarity.
    """
    config = CATEGORIZATION_CONFIG["learned_patterns"]
    normalized_merchant = normalize_merchant_name(merchant)
    normalized_description = description.lower()

    for pattern in learned_patterns:
        if pattern.confidence < config["min_confidence"]:
            continue

        normalized_pattern = normalize_merchant_name(pattern.merchant_pattern)
        if not normalized_pattern:
            continue

        if normalized_pattern in normalized_merchant or normalized_pattern in normalized_description:
            return pattern

        if pattern.confidence >= config["fuzzy_min_confidence"]:
            merchant_similarity = fuzzy_match(
                normalized_pattern, normalized_merchant, normalize_first=False
            )
            desc_similarity = fuzzy_match(
                normalized_pattern, normalized_description, normalize_first=False
            )
            if max(merchant_similarity, desc_similarity) >= config["fuzzy_threshold"]:
                return pattern

    return None


def sort_custom_rules(
    custom_rules: Sequence[CustomCategorizationRule],
) -> List[CustomCategorizationRule]:
    """Highest priority first; equal priorities by creation time, then id."""
    return sorted(custom_rules, key=lambda r: (-r.priority, r.created_at or "", r.id))


def _is_excluded(description: str, rule: CustomCategorizationRule) -> bool:
    desc_check = description if rule.case_sensitive else description.lower()
    for exclude in rule.exclude_patterns:
        pattern_check = exclude if rule.case_sensitive else exclude.lower()
        if pattern_check in desc_check:
            return True
    return False


def custom_rule_matches(
    description: str, amount: float, rule: CustomCategorizationRule
) -> bool:
    """
    Test a single custom rule against a transaction.

    Amount bounds and exclude patterns reject first, then the rule's regex or
    match type decides.
    """
    if rule.min_amount is not None and amount < rule.min_amount:
        return False
    if rule.max_amount is not None and amount > rule.max_amount:
        return False
    if rule.exclude_patterns and _is_excluded(description, rule):
        return False

    if rule.is_regex:
        regex = compile_rule_pattern(rule.pattern, rule.case_sensitive)
        return bool(regex and regex.search(description))

    desc_check = description if rule.case_sensitive else description.lower()
    pattern_check = rule.pattern if rule.case_sensitive else rule.pattern.lower()

    if rule.match_type == "exact":
        return desc_check == pattern_check
    if rule.match_type == "startsWith":
        return desc_check.startswith(pattern_check)
    if rule.match_type == "endsWith":
        return desc_check.endswith(pattern_check)
    if rule.match_type == "fuzzy":
        return fuzzy_pattern_match(
            description, rule.pattern, CATEGORIZATION_CONFIG["custom_rules"]["fuzzy_threshold"]
        )
    return pattern_check in desc_check


def match_custom_rules(
    description: str,
    amount: float,
    custom_rules: Sequence[CustomCategorizationRule],
) -> Optional[CustomCategorizationRule]:
    for rule in sort_custom_rules(custom_rules):
        if custom_rule_matches(description, amount, rule):
            return rule
    return None


def match_builtin_rules(description: str) -> Optional[str]:
    """Return the category of the highest-priority built-in rule that matches."""
    for category_id, patterns in _BUILTIN_COMPILED:
        for pattern in patterns:
            if pattern.search(description):
                return category_id
    return None
