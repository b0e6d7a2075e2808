"""
Category Suggestion Engine.

Ranks candidate categories for a merchant from three sources, in priority
order:

1. Learned patterns (exact or fuzzy merchant match)
2. Similar merchants already categorized in the transaction history
3. Transactions with a similar amount (supplementary only)
"""

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

from ..config.engine_config import SUGGESTION_CONFIG
from ..config.settings import SuggestionSettings
from ..matching.fuzzy_match import fuzzy_match, normalize_merchant_name
from ..models import LearnedPattern, Transaction


logger = logging.getLogger(__name__)


@dataclass
class CategorySuggestion:
    category_id: str
    confidence: float
    reason: str  # exact_match, learned_pattern, similar_merchant, amount_pattern
    details: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def _find_similar_merchants(
    merchant: str,
    transactions: Sequence[Transaction],
    min_similarity: float,
) -> Dict[str, Dict]:
    """Per category: count, average similarity and merchants of near-matching history."""
    normalized_search = normalize_merchant_name(merchant)
    stats: Dict[str, Dict] = defaultdict(
        lambda: {"count": 0, "total_similarity": 0.0, "merchants": []}
    )

    for txn in transactions:
        normalized = normalize_merchant_name(txn.merchant)
        # Same merchant is not a "similar" one
        if normalized == normalized_search:
            continue

        similarity = fuzzy_match(normalized_search, normalized, normalize_first=False)
        if similarity >= min_similarity:
            entry = stats[txn.category]
            entry["count"] += 1
            entry["total_similarity"] += similarity
            if txn.merchant not in entry["merchants"]:
                entry["merchants"].append(txn.merchant)

    return {
        category_id: {
            "count": entry["count"],
            "avg_similarity": entry["total_similarity"] / entry["count"],
            "merchants": entry["merchants"],
        }
        for category_id, entry in stats.items()
    }


def _find_amount_patterns(
    amount: float,
    transactions: Sequence[Transaction],
    tolerance: float,
) -> Dict[str, Dict]:
    """Per category: count and average relative difference of similar amounts."""
    if amount <= 0:
        return {}

    stats: Dict[str, List[float]] = defaultdict(list)
    for txn in transactions:
        diff = abs(txn.amount - amount) / amount
        if diff <= tolerance:
            stats[txn.category].append(diff)

    return {
        category_id: {"count": len(diffs), "avg_diff": sum(diffs) / len(diffs)}
        for category_id, diffs in stats.items()
    }


def _check_learned_patterns(
    merchant: str, learned_patterns: Sequence[LearnedPattern]
) -> List[CategorySuggestion]:
    suggestions = []
    normalized_search = normalize_merchant_name(merchant)

    for pattern in learned_patterns:
        normalized_pattern = normalize_merchant_name(pattern.merchant_pattern)

        if normalized_pattern == normalized_search:
            suggestions.append(CategorySuggestion(
                category_id=pattern.category_id,
                confidence=min(
                    SUGGESTION_CONFIG["exact_match_cap"],
                    pattern.confidence + SUGGESTION_CONFIG["exact_match_boost"],
                ),
                reason="exact_match",
                details=f"Learned from {pattern.occurrences} previous corrections",
            ))
            continue

        similarity = fuzzy_match(normalized_search, normalized_pattern, normalize_first=False)
        if similarity < SUGGESTION_CONFIG["fuzzy_similarity_threshold"]:
            continue

        adjusted = pattern.confidence * similarity * SUGGESTION_CONFIG["fuzzy_confidence_factor"]
        if adjusted >= SUGGESTION_CONFIG["fuzzy_min_confidence"]:
            suggestions.append(CategorySuggestion(
                category_id=pattern.category_id,
                confidence=adjusted,
                reason="learned_pattern",
                details=(
                    f'Similar to "{pattern.merchant_pattern}" '
                    f"({pattern.occurrences} occurrences)"
                ),
            ))

    return suggestions


def generate_suggestions(
    merchant: str,
    amount: float,
    transactions: Sequence[Transaction],
    learned_patterns: Sequence[LearnedPattern],
    settings: Optional[SuggestionSettings] = None,
) -> List[CategorySuggestion]:
    """
    Suggest categories for a merchant.

    Args:
        merchant: Merchant name to categorize
        amount: Transaction amount (non-positive amounts skip amount patterns)
        transactions: Categorized history to learn from
        learned_patterns: User's learned merchant patterns
        settings: Suggestion settings (enable flag, min confidence, max results)

    Returns:
        At most ``settings.max_suggestions`` suggestions, one per category,
        exact matches first and then by confidence
    """
    settings = settings or SuggestionSettings()
    if not settings.enable_suggestions:
        return []

    suggestions = _check_learned_patterns(merchant, learned_patterns)

    similar = _find_similar_merchants(
        merchant, transactions, SUGGESTION_CONFIG["merchant_similarity_threshold"]
    )
    for category_id, data in similar.items():
        if any(s.category_id == category_id and s.reason == "exact_match" for s in suggestions):
            continue

        frequency_score = min(data["count"] / SUGGESTION_CONFIG["merchant_frequency_cap"], 1.0)
        confidence = (
            data["avg_similarity"] * SUGGESTION_CONFIG["merchant_similarity_weight"]
            + frequency_score * SUGGESTION_CONFIG["merchant_frequency_weight"]
        )
        if confidence >= settings.min_confidence:
            top_merchants = ", ".join(data["merchants"][:2])
            suggestions.append(CategorySuggestion(
                category_id=category_id,
                confidence=confidence,
                reason="similar_merchant",
                details=f"Similar to {top_merchants} ({data['count']} transactions)",
            ))

    amount_patterns = _find_amount_patterns(
        amount, transactions, SUGGESTION_CONFIG["amount_tolerance"]
    )
    for category_id, data in amount_patterns.items():
        existing = next((s for s in suggestions if s.category_id == category_id), None)
        if existing:
            existing.confidence = min(1.0, existing.confidence + SUGGESTION_CONFIG["amount_boost"])
            continue

        frequency_score = min(data["count"] / SUGGESTION_CONFIG["amount_frequency_cap"], 1.0)
        accuracy_score = 1 - data["avg_diff"]
        confidence = (frequency_score * 0.5 + accuracy_score * 0.5) * SUGGESTION_CONFIG["amount_scale"]
        if confidence >= settings.min_confidence:
            suggestions.append(CategorySuggestion(
                category_id=category_id,
                confidence=confidence,
                reason="amount_pattern",
                details=f"Similar amount appears {data['count']} times in this category",
            ))

    ranked = sorted(
        (s for s in suggestions if s.confidence >= settings.min_confidence),
        key=lambda s: (s.reason != "exact_match", -s.confidence),
    )

    seen = set()
    deduplicated = []
    for suggestion in ranked:
        if suggestion.category_id in seen:
            continue
        seen.add(suggestion.category_id)
        deduplicated.append(suggestion)

    return deduplicated[:settings.max_suggestions]


def generate_bulk_suggestions(
    transactions: Sequence[Transaction],
    all_transactions: Sequence[Transaction],
    learned_patterns: Sequence[LearnedPattern],
    settings: Optional[SuggestionSettings] = None,
) -> Dict[str, List[CategorySuggestion]]:
    """
    Suggestions keyed by transaction id; each transaction is excluded from its own history.
    """
    results = {}
    for txn in transactions:
        history = [t for t in all_transactions if t.id != txn.id]
        suggestions = generate_suggestions(
            txn.merchant, txn.amount, history, learned_patterns, settings
        )
        if suggestions:
            results[txn.id] = suggestions
    return results


def validate_suggestion(
    suggestion: CategorySuggestion,
    merchant: str,
    amount: float,
    transactions: Sequence[Transaction],
    learned_patterns: Sequence[LearnedPattern],
) -> bool:
    """Whether a suggestion still holds after the history has changed."""
    fresh = generate_suggestions(
        merchant,
        amount,
        transactions,
        learned_patterns,
        SuggestionSettings(
            enable_suggestions=True,
            min_confidence=suggestion.confidence - 0.1,
            max_suggestions=10,
        ),
    )
    return any(
        s.category_id == suggestion.category_id and s.confidence >= suggestion.confidence * 0.9
        for s in fresh
    )
