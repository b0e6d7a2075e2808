"""
Merchant alias table.

Maps processor-specific spellings of the same merchant to one canonical name
so duplicate detection can tell "UBER TRIP" and "UBER EATS" charges apart
from unrelated merchants.
"""

import re
from typing import Optional


MERCHANT_ALIASES = {
    "Uber": [r"(?i)^UBER$", r"(?i)UBER TRIP", r"(?i)UBER EATS", r"(?i)UBER ONE"],
    "United Airlines": [r"(?i)UNITED AIRLINES"],
    "Delta Air Lines": [r"(?i)DELTA AIR"],
    "American Airlines": [r"(?i)AMERICAN AIRLINES"],
    "Air France": [r"(?i)AIR FRANCE"],
    "DoorDash": [r"(?i)DOORDASH", r"(?i)BT\*DD"],
    "Amazon": [
        r"(?i)^AMAZON$",
        r"(?i)AMAZON MX MARKETPLACE",
        r"(?i)AMAZON MARKEPLACE",
        r"(?i)AMAZONPRIME",
    ],
    "Canteen": [r"(?i)CANTEEN"],
    "Google": [r"(?i)GOOGLE\*WORKSPACE", r"(?i)GOOGLE ONE"],
    "YouTube": [
        r"(?i)YOUTUBE TV",
        r"(?i)YOUTUBE VIDEOS",
        r"(?i)GOOGLE\s?\*YOUTUBE",
        r"(?i)GOOGLE\*YT PRIMETIME",
    ],
    "Anthropic": [r"(?i)CLAUDE\.AI", r"(?i)ANTHROPIC"],
    "OpenAI": [r"(?i)OPENAI", r"(?i)CHATGPT"],
    "UW Madison": [r"(?i)TCP\*UWMADISONHSG", r"(?i)UW MADISON"],
    "Bilt": [r"(?i)BILT RENT", r"(?i)BILT REWARDS"],
    "Instacart": [r"(?i)INSTACART", r"(?i)IC\* COSTCO"],
    "Levy": [r"(?i)LEVY@"],
    "Monday's": [r"(?i)MONDAY[`']S"],
    "Orpheum Theater": [r"(?i)ORPHEUM THEATER"],
    "Telefonica": [r"(?i)TELEFONICA.*PEGASO"],
    "AT&T": [r"(?i)ATT MOB"],
}

_COMPILED_ALIASES = [
    (canonical, [re.compile(p) for p in patterns])
    for canonical, patterns in MERCHANT_ALIASES.items()
]

_PREFIX_RE = re.compile(
    r"^(BT\*DD \*DOORDASH|DD \*DOORDASH|IC\*|TST\*|PAYPAL \*|GOOGLE\*|SQSP\*|CTLP\*)\s*",
    re.IGNORECASE,
)
_TRAILING_IDS = [
    re.compile(r"\s+\d{10}$"),
    re.compile(r"\s+#\d+$"),
    re.compile(r"\s+\d{4,}$"),
]


def get_canonical_merchant_name(description: str) -> Optional[str]:
    """
    Look up the canonical merchant name for a description.

    Args:
        description: Raw transaction description

    Returns:
        Canonical name if an alias matches, None otherwise
    """
    for canonical, patterns in _COMPILED_ALIASES:
        if any(p.search(description) for p in patterns):
            return canonical
    return None


def normalize_merchant_for_comparison(description: str) -> str:
    """Canonical alias if known, else the description without prefixes or ids."""
    canonical = get_canonical_merchant_name(description)
    if canonical:
        return canonical

    text = _PREFIX_RE.sub("", description)
    for pattern in _TRAILING_IDS:
        text = pattern.sub("", text)
    return text.upper().strip()


def is_same_merchant(description1: str, description2: str) -> bool:
    return (
        normalize_merchant_for_comparison(description1)
        == normalize_merchant_for_comparison(description2)
    )
