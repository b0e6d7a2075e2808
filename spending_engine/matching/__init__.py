"""
Fuzzy matching for merchant names.
"""

from .fuzzy_match import (
    levenshtein_distance,
    calculate_similarity,
    normalize_merchant_name,
    tokenize,
    token_similarity,
    fuzzy_match,
    find_best_matches,
    fuzzy_pattern_match,
)

__all__ = [
    "levenshtein_distance",
    "calculate_similarity",
    "normalize_merchant_name",
    "tokenize",
    "token_similarity",
    "fuzzy_match",
    "find_best_matches",
    "fuzzy_pattern_match",
]
