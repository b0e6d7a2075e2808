"""
Categorisation Module for the Spending Engine.

Orchestrates transaction categorization through:
- Preprocessing (merchant and location extraction)
- Rule matching (split rules, learned patterns, custom rules, built-in table)
- Pattern learning from manual recategorization
"""

from .engine import TransactionCategorizer, CategoryMatch, categorize_transaction
from .preprocess import (
    normalize_text,
    extract_merchant_name,
    extract_location,
)
from .pattern_matching import (
    compile_rule_pattern,
    evaluate_split_condition,
    match_split_rules,
    match_learned_patterns,
    match_custom_rules,
    match_builtin_rules,
    custom_rule_matches,
    sort_custom_rules,
)
from .learning import (
    learn_pattern,
    trust_pattern,
    forget_pattern,
    clamp_confidence,
    generate_record_id,
)

__all__ = [
    # Main categorizer
    "TransactionCategorizer",
    "CategoryMatch",
    "categorize_transaction",
    # Preprocessing utilities
    "normalize_text",
    "extract_merchant_name",
    "extract_location",
    # Rule matching
    "compile_rule_pattern",
    "evaluate_split_condition",
    "match_split_rules",
    "match_learned_patterns",
    "match_custom_rules",
    "match_builtin_rules",
    "custom_rule_matches",
    "sort_custom_rules",
    # Learning
    "learn_pattern",
    "trust_pattern",
    "forget_pattern",
    "clamp_confidence",
    "generate_record_id",
]
