"""
Duplicate Detection for imported transactions.

Two modes share one tiered classifier:

- cross-batch: each new transaction against the stored history
- intra-batch: transactions of one import grouped by (day, amount)

Matching is greedy: a new transaction pairs with the first stored
transaction that qualifies, not the globally best one.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..config.engine_config import DUPLICATE_CONFIG
from ..models import Transaction
from ..patterns.merchant_aliases import is_same_merchant, normalize_merchant_for_comparison


logger = logging.getLogger(__name__)

TIERS = DUPLICATE_CONFIG["tiers"]

# Services that legitimately bill twice on the same day (plan changes, retries)
SUBSCRIPTION_SERVICE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"CLAUDE\.AI",
        r"ANTHROPIC",
        r"OPENAI",
        r"CHATGPT",
        r"NETFLIX",
        r"SPOTIFY",
        r"YOUTUBE",
        r"GOOGLE ONE",
        r"HBOMAX",
        r"DISNEY PLUS",
        r"AMAZONPRIME",
    )
]


@dataclass
class DuplicateCandidate:
    """A new transaction that matches one already stored."""
    new_transaction: Transaction
    existing_transaction: Transaction
    confidence: float
    match_type: str  # 'exact', 'likely', 'possible'


@dataclass
class InternalDuplicateCandidate:
    """Two transactions of the same import that look like one charge."""
    transaction1: Transaction
    transaction2: Transaction
    confidence: float
    match_type: str
    is_legitimate: bool = False


@dataclass
class DuplicateDetectionResult:
    unique: List[Transaction] = field(default_factory=list)
    duplicates: List[DuplicateCandidate] = field(default_factory=list)


@dataclass
class InternalDuplicateDetectionResult:
    transactions: List[Transaction] = field(default_factory=list)
    internal_duplicates: List[InternalDuplicateCandidate] = field(default_factory=list)


def string_similarity(a: str, b: str) -> float:
    """
    Description similarity used by the duplicate tiers.

    Returns:
        1.0 when equal, 0.9 when one contains the other (case-insensitive),
        otherwise the Jaccard index of the word sets
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    a_lower = a.lower()
    b_lower = b.lower()
    if a_lower in b_lower or b_lower in a_lower:
        return DUPLICATE_CONFIG["containment_similarity"]

    a_words = set(a_lower.split())
    b_words = set(b_lower.split())
    union = a_words | b_words
    if not union:
        return 0.0
    return len(a_words & b_words) / len(union)


def _same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def _same_amount(a: float, b: float) -> bool:
    return abs(a - b) < DUPLICATE_CONFIG["amount_tolerance"]


def _days_apart(a: datetime, b: datetime) -> float:
    return abs((a - b).total_seconds()) / 86400


def classify_pair(new_txn: Transaction, existing_txn: Transaction) -> Optional[DuplicateCandidate]:
    """
    Run the decision cascade for one pair.

    Returns:
        DuplicateCandidate for the first tier that applies, or None
    """
    if not _same_amount(new_txn.amount, existing_txn.amount):
        return None

    if _same_day(new_txn.date, existing_txn.date):
        if new_txn.description == existing_txn.description:
            return DuplicateCandidate(new_txn, existing_txn, TIERS["exact"], "exact")

        similarity = string_similarity(new_txn.description, existing_txn.description)
        if similarity > DUPLICATE_CONFIG["likely_similarity"]:
            return DuplicateCandidate(new_txn, existing_txn, TIERS["likely"], "likely")
        if similarity > DUPLICATE_CONFIG["possible_similarity"]:
            return DuplicateCandidate(new_txn, existing_txn, TIERS["possible"], "possible")

    if _days_apart(new_txn.date, existing_txn.date) <= DUPLICATE_CONFIG["date_window_days"]:
        if is_same_merchant(new_txn.description, existing_txn.description):
            return DuplicateCandidate(new_txn, existing_txn, TIERS["same_merchant"], "possible")

        merchant_similarity = string_similarity(new_txn.merchant, existing_txn.merchant)
        if merchant_similarity > DUPLICATE_CONFIG["merchant_similarity"]:
            return DuplicateCandidate(new_txn, existing_txn, TIERS["similar_merchant"], "possible")

    return None


def find_best_match(
    new_txn: Transaction, existing: Sequence[Transaction]
) -> Optional[DuplicateCandidate]:
    """First stored transaction that matches under the cascade (greedy)."""
    for existing_txn in existing:
        candidate = classify_pair(new_txn, existing_txn)
        if candidate:
            return candidate
    return None


def detect_duplicates(
    new_transactions: Sequence[Transaction],
    existing_transactions: Sequence[Transaction],
) -> DuplicateDetectionResult:
    """
    Split an import into unique transactions and likely duplicates of stored ones.

    Only candidates above the surface threshold are reported as duplicates;
    weaker matches are treated as unique.
    """
    result = DuplicateDetectionResult()
    threshold = DUPLICATE_CONFIG["surface_threshold"]

    for new_txn in new_transactions:
        match = find_best_match(new_txn, existing_transactions)
        if match and match.confidence > threshold:
            result.duplicates.append(match)
        else:
            result.unique.append(new_txn)

    if result.duplicates:
        logger.info(
            f"Found {len(result.duplicates)} duplicates among {len(new_transactions)} new transactions"
        )
    return result


def is_subscription_charge(description: str) -> bool:
    return any(p.search(description) for p in SUBSCRIPTION_SERVICE_PATTERNS)


def are_legitimately_separate(txn1: Transaction, txn2: Transaction) -> bool:
    """
    Whether two same-day, same-amount charges can both be real.

    True when both are charges from the same known subscription service.
    """
    if not (is_subscription_charge(txn1.description) and is_subscription_charge(txn2.description)):
        return False
    return (
        normalize_merchant_for_comparison(txn1.description)
        == normalize_merchant_for_comparison(txn2.description)
    )


def detect_internal_duplicates(
    transactions: Sequence[Transaction],
) -> InternalDuplicateDetectionResult:
    """
    Find duplicates inside a single import.

    Transactions are grouped by calendar day and amount (2 dp), then compared
    pairwise within each group.
    """
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        key = f"{txn.date.date().isoformat()}:{txn.amount:.2f}"
        groups[key].append(txn)

    duplicates: List[InternalDuplicateCandidate] = []
    for group in groups.values():
        if len(group) < 2:
            continue

        for i in range(len(group)):
            for j in range(i + 1, len(group)):
                txn1, txn2 = group[i], group[j]

                if txn1.description == txn2.description:
                    duplicates.append(InternalDuplicateCandidate(
                        txn1, txn2, TIERS["exact"], "exact",
                        are_legitimately_separate(txn1, txn2),
                    ))
                    continue

                if not is_same_merchant(txn1.description, txn2.description):
                    continue

                similarity = string_similarity(txn1.description, txn2.description)
                if similarity > DUPLICATE_CONFIG["likely_similarity"]:
                    tier, match_type = TIERS["likely"], "likely"
                elif similarity > DUPLICATE_CONFIG["possible_similarity"]:
                    tier, match_type = TIERS["possible"], "possible"
                else:
                    continue

                duplicates.append(InternalDuplicateCandidate(
                    txn1, txn2, tier, match_type, are_legitimately_separate(txn1, txn2),
                ))

    return InternalDuplicateDetectionResult(list(transactions), duplicates)


def get_duplicate_stats(result: DuplicateDetectionResult) -> Dict[str, int]:
    """Counts of unique transactions and duplicates per tier."""
    match_types = [d.match_type for d in result.duplicates]
    return {
        "total": len(result.unique) + len(result.duplicates),
        "unique": len(result.unique),
        "exact": match_types.count("exact"),
        "likely": match_types.count("likely"),
        "possible": match_types.count("possible"),
    }


def get_enhanced_duplicate_stats(result: InternalDuplicateDetectionResult) -> Dict[str, int]:
    match_types = [d.match_type for d in result.internal_duplicates]
    return {
        "total": len(result.transactions),
        "internal_duplicates": len(result.internal_duplicates),
        "internal_exact": match_types.count("exact"),
        "internal_likely": match_types.count("likely"),
        "internal_possible": match_types.count("possible"),
        "internal_legitimate": sum(1 for d in result.internal_duplicates if d.is_legitimate),
    }
