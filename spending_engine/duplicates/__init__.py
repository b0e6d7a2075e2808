"""
Duplicate detection across and within transaction imports.
"""

from .duplicate_detector import (
    DuplicateCandidate,
    InternalDuplicateCandidate,
    DuplicateDetectionResult,
    InternalDuplicateDetectionResult,
    string_similarity,
    classify_pair,
    find_best_match,
    detect_duplicates,
    detect_internal_duplicates,
    are_legitimately_separate,
    get_duplicate_stats,
    get_enhanced_duplicate_stats,
)

__all__ = [
    "DuplicateCandidate",
    "InternalDuplicateCandidate",
    "DuplicateDetectionResult",
    "InternalDuplicateDetectionResult",
    "string_similarity",
    "classify_pair",
    "find_best_match",
    "detect_duplicates",
    "detect_internal_duplicates",
    "are_legitimately_separate",
    "get_duplicate_stats",
    "get_enhanced_duplicate_stats",
]
