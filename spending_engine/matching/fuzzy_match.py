"""
Fuzzy matching utilities for merchant name comparison.

Blends a Levenshtein-based character similarity with a token-level Jaccard
index. Merchant names are normalized first so processor-appended digits and
legal suffixes do not cause false negatives.
"""

import re
from typing import Dict, List, Optional

from rapidfuzz.distance import Levenshtein

from ..config.engine_config import FUZZY_CONFIG


_PROCESSOR_ID_RE = re.compile(r"\*+\d+$")
_TRAILING_ID_RE = re.compile(r"\s+\d{4,}$")
_LEGAL_SUFFIX_RE = re.compile(
    r"\s+(inc|llc|ltd|corp|corporation|company|co)\b\.?$", re.IGNORECASE
)
_SPECIAL_CHARS_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def levenshtein_distance(str1: str, str2: str) -> int:
    """Minimum number of single-character edits turning str1 into str2."""
    return Levenshtein.distance(str1, str2)


def calculate_similarity(str1: str, str2: str) -> float:
    """
    Character-level similarity between two strings.

    Returns:
        1 - distance / max length, compared case-insensitively (1.0 for two
        empty strings)
    """
    max_len = max(len(str1), len(str2))
    if max_len == 0:
        return 1.0

    distance = levenshtein_distance(str1.lower(), str2.lower())
    return 1 - distance / max_len


def normalize_merchant_name(name: Optional[str]) -> str:
    """
    Normalize a merchant name for comparison.

    Lower-cases, removes payment processor ids and legal-entity suffixes,
    drops special characters and collapses whitespace.
    """
    if not name:
        return ""

    text = name.lower().strip()
    text = _PROCESSOR_ID_RE.sub("", text)
    text = _TRAILING_ID_RE.sub("", text)
    text = _LEGAL_SUFFIX_RE.sub("", text)
    text = _SPECIAL_CHARS_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def tokenize(text: str) -> List[str]:
    return [token for token in text.lower().split() if token]


def token_similarity(str1: str, str2: str) -> float:
    """Jaccard index over the whitespace-separated word sets."""
    tokens1 = set(tokenize(str1))
    tokens2 = set(tokenize(str2))

    if not tokens1 and not tokens2:
        return 1.0
    if not tokens1 or not tokens2:
        return 0.0

    return len(tokens1 & tokens2) / len(tokens1 | tokens2)


def fuzzy_match(
    search: str,
    target: str,
    normalize_first: bool = True,
    levenshtein_weight: float = FUZZY_CONFIG["levenshtein_weight"],
    token_weight: float = FUZZY_CONFIG["token_weight"],
    exact_match_bonus: float = FUZZY_CONFIG["exact_match_bonus"],
) -> float:
    """
    Fuzzy match a search string against a target string.

    Args:
        search: String being looked up
        target: Candidate string
        normalize_first: Apply merchant normalization before comparing
        levenshtein_weight: Weight of the character-level score
        token_weight: Weight of the token-level score
        exact_match_bonus: Added to the containment baseline

    Returns:
        Confidence score between 0.0 and 1.0
    """
    if normalize_first:
        search_str = normalize_merchant_name(search)
        target_str = normalize_merchant_name(target)
    else:
        search_str = (search or "").lower()
        target_str = (target or "").lower()

    if search_str == target_str:
        return 1.0

    # An empty side would otherwise count as contained in anything
    if not search_str or not target_str:
        return 0.0

    if search_str in target_str or target_str in search_str:
        length_penalty = abs(len(search_str) - len(target_str)) / max(
            len(search_str), len(target_str)
        )
        score = (
            FUZZY_CONFIG["containment_base_score"]
            + exact_match_bonus
            - length_penalty * FUZZY_CONFIG["length_penalty_factor"]
        )
        return min(1.0, score)

    levenshtein_score = calculate_similarity(search_str, target_str)
    token_score = token_similarity(search_str, target_str)

    combined = levenshtein_score * levenshtein_weight + token_score * token_weight
    return min(1.0, combined)


def find_best_matches(
    search: str,
    candidates: List[str],
    min_confidence: float = FUZZY_CONFIG["best_matches"]["min_confidence"],
    max_results: int = FUZZY_CONFIG["best_matches"]["max_results"],
    normalize_first: bool = True,
) -> List[Dict]:
    """
    Rank candidates by fuzzy confidence against the search string.

    Returns:
        List of {"value", "confidence"} dicts, best first
    """
    matches = []
    for candidate in candidates:
        confidence = fuzzy_match(search, candidate, normalize_first=normalize_first)
        if confidence >= min_confidence:
            matches.append({"value": candidate, "confidence": confidence})

    matches.sort(key=lambda m: m["confidence"], reverse=True)
    return matches[:max_results]


def fuzzy_pattern_match(
    text: str,
    pattern: str,
    min_confidence: float = FUZZY_CONFIG["pattern_min_confidence"],
) -> bool:
    """Check whether a rule pattern fuzzily matches the given text."""
    return fuzzy_match(pattern, text, normalize_first=True) >= min_confidence
