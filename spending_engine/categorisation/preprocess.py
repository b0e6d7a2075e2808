"""
Preprocessing utilities for transaction categorization.
Handles merchant extraction, location extraction, and text normalization.
"""

import re
from typing import Optional

from ..patterns.transaction_patterns import (
    PROCESSOR_PREFIX_REWRITES,
    LOCATION_CITIES,
    LOCATION_ALIASES,
)


_PREFIX_REWRITES = [(re.compile(p), repl) for p, repl in PROCESSOR_PREFIX_REWRITES]

_CITY_SUFFIX_RE = re.compile(
    r"\s+(" + "|".join(LOCATION_CITIES) + r").*$", re.IGNORECASE
)
_LOCATION_RE = re.compile(
    "(" + "|".join(LOCATION_CITIES + LOCATION_ALIASES) + ")", re.IGNORECASE
)
_MEXICO_CITY_RE = re.compile(r"MEXICO D\.F\.|CD MEXICO", re.IGNORECASE)
_AMAZON_BILLING_RE = re.compile(r"AMZN\.COM/BILL", re.IGNORECASE)

# Trailing noise after the merchant name, stripped in order
_TRAILING_NOISE = [
    re.compile(r"\s+\d{3}[-.\s]?\d{3}[-.\s]?\d{4}$"),  # phone numbers
    re.compile(r"\s+\d{10}$"),
    re.compile(r"\s+#\d+$"),
    re.compile(r"\s+\d{4,}$"),
]


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text for matching.

    Args:
        text: Raw text to normalize

    Returns:
        Normalized uppercase text
    """
    if not text:
        return ""
    return text.upper().strip()


def extract_merchant_name(description: str) -> str:
    """
    Extract a display merchant name from a raw statement description.

    Removes payment processor prefixes, trailing city names, phone numbers,
    and store or terminal ids.

    Example:
        >>> extract_merchant_name("NETFLIX.COM 888-638-3549")
        'NETFLIX.COM'
    """
    if not description:
        return ""

    merchant = description
    for pattern, replacement in _PREFIX_REWRITES:
        merchant = pattern.sub(replacement, merchant, count=1)

    merchant = _CITY_SUFFIX_RE.sub("", merchant)

    for pattern in _TRAILING_NOISE:
        merchant = pattern.sub("", merchant)

    return merchant.strip()


def extract_location(description: str) -> str:
    """
    Extract the city a charge was made in, if the descriptor names one.

    Returns:
        Upper-cased city name, or "" when none is recognised
    """
    if not description or _AMAZON_BILLING_RE.search(description):
        return ""

    match = _LOCATION_RE.search(description)
    if not match:
        return ""

    location = match.group(1)
    if _MEXICO_CITY_RE.search(location):
        return "MEXICO CITY"
    return location.upper()
