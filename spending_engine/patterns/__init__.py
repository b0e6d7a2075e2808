"""
Pattern tables for categorization, merchant aliasing, and subscription detection.
"""

from .transaction_patterns import (
    BUILTIN_CATEGORY_RULES,
    BUILTIN_RULES_SORTED,
    PROCESSOR_PREFIX_REWRITES,
    LOCATION_CITIES,
    LOCATION_ALIASES,
)
from .merchant_aliases import (
    MERCHANT_ALIASES,
    get_canonical_merchant_name,
    normalize_merchant_for_comparison,
    is_same_merchant,
)
from .known_services import (
    KnownService,
    KNOWN_SERVICES,
    KNOWN_SERVICES_BY_ID,
    find_known_service,
    is_known_service,
)

__all__ = [
    "BUILTIN_CATEGORY_RULES",
    "BUILTIN_RULES_SORTED",
    "PROCESSOR_PREFIX_REWRITES",
    "LOCATION_CITIES",
    "LOCATION_ALIASES",
    "MERCHANT_ALIASES",
    "get_canonical_merchant_name",
    "normalize_merchant_for_comparison",
    "is_same_merchant",
    "KnownService",
    "KNOWN_SERVICES",
    "KNOWN_SERVICES_BY_ID",
    "find_known_service",
    "is_known_service",
]
