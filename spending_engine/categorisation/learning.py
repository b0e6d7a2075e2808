"""
Pattern learning from manual recategorization.

When a user moves a transaction to a different category the merchant is
remembered as a LearnedPattern:

- new merchant: stored at the initial confidence
- same category again: confidence grows (capped at 1.0)
- different category, few prior occurrences: category switches, confidence resets
- different category, established pattern: category kept, confidence decays

Confidence always stays within [0, 1].
"""

import logging
import random
import string
import time
from datetime import datetime
from typing import List, Optional

from ..config.engine_config import CATEGORIZATION_CONFIG
from ..models import LearnedPattern, now_iso


logger = logging.getLogger(__name__)

LEARNING_CONFIG = CATEGORIZATION_CONFIG["learning"]


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


def generate_record_id(prefix: str) -> str:
    """Time + random id, e.g. ``pattern-1767571200000-k3j9x0a1b``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def normalize_pattern_key(merchant_pattern: str) -> str:
    return (merchant_pattern or "").upper().strip()


def find_learned_pattern(
    patterns: List[LearnedPattern], merchant_pattern: str
) -> Optional[LearnedPattern]:
    key = normalize_pattern_key(merchant_pattern)
    for pattern in patterns:
        if pattern.merchant_pattern == key:
            return pattern
    return None


def learn_pattern(
    patterns: List[LearnedPattern],
    merchant_pattern: str,
    category_id: str,
    now: Optional[datetime] = None,
) -> LearnedPattern:
    """
    Record a manual recategorization.

    Args:
        patterns: Learned patterns, updated in place
        merchant_pattern: Merchant the user recategorized
        category_id: Category the user chose
        now: Clock override for timestamps

    Returns:
        The created or updated LearnedPattern
    """
    key = normalize_pattern_key(merchant_pattern)
    timestamp = now_iso(now)
    existing = find_learned_pattern(patterns, key)

    if existing is None:
        pattern = LearnedPattern(
            id=generate_record_id("pattern"),
            merchant_pattern=key,
            category_id=category_id,
            confidence=LEARNING_CONFIG["initial_confidence"],
            occurrences=1,
            last_used=timestamp,
        )
        patterns.append(pattern)
        logger.info(f"Learned new pattern {key!r} -> {category_id}")
        return pattern

    if existing.category_id == category_id:
        existing.confidence = clamp_confidence(
            existing.confidence + LEARNING_CONFIG["confirm_increment"]
        )
        existing.occurrences += 1
        existing.last_used = timestamp
    elif existing.occurrences < LEARNING_CONFIG["override_max_occurrences"]:
        logger.info(
            f"Pattern {key!r} switched from {existing.category_id} to {category_id}"
        )
        existing.category_id = category_id
        existing.confidence = clamp_confidence(LEARNING_CONFIG["override_confidence"])
        existing.occurrences += 1
        existing.last_used = timestamp
    else:
        existing.confidence = clamp_confidence(
            existing.confidence * LEARNING_CONFIG["contradiction_decay"]
        )

    return existing


def trust_pattern(patterns: List[LearnedPattern], pattern_id: str) -> Optional[LearnedPattern]:
    """Raise a pattern's confidence when the user explicitly trusts it."""
    for pattern in patterns:
        if pattern.id == pattern_id:
            pattern.confidence = clamp_confidence(
                pattern.confidence + LEARNING_CONFIG["trust_increment"]
            )
            return pattern
    return None


def forget_pattern(patterns: List[LearnedPattern], pattern_id: str) -> List[LearnedPattern]:
    return [p for p in patterns if p.id != pattern_id]
