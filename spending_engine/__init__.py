"""
Spending Engine - personal finance transaction analysis.

Imports bank statement CSV exports, categorizes each charge, detects
duplicate imports and recurring subscriptions, and suggests categories.

Main Components:
    - matching: Fuzzy string matching
    - patterns: Built-in category rules, merchant aliases, known services
    - categorisation: Four-stage categorization engine and pattern learning
    - duplicates: Cross-batch and intra-batch duplicate detection
    - subscriptions: Subscription detection and analytics
    - suggestions: Ranked category suggestions
    - ingest: CSV parsing and export
    - config: Thresholds, categories, user settings and persistence
"""

from typing import Dict, List, Optional
from datetime import datetime

from .models import Transaction, Subscription, LearnedPattern
from .categorisation.engine import TransactionCategorizer, CategoryMatch
from .config.settings import UserSettings
from .config.settings_storage import SettingsStore
from .duplicates.duplicate_detector import (
    detect_duplicates,
    detect_internal_duplicates,
    get_duplicate_stats,
    get_enhanced_duplicate_stats,
)
from .subscriptions.subscription_detector import detect_subscriptions
from .suggestions.suggestion_engine import CategorySuggestion, generate_suggestions
from .ingest.csv_parser import CSVParseError, parse_csv
from .ingest.export import export_to_csv, export_to_json
from .storage import TransactionStore
from .greetings import SessionGreeting


__version__ = "1.0.0"
__all__ = [
    # Records
    "Transaction",
    "Subscription",
    "LearnedPattern",
    # Categorisation
    "TransactionCategorizer",
    "CategoryMatch",
    # Settings
    "UserSettings",
    "SettingsStore",
    # Duplicates
    "detect_duplicates",
    "detect_internal_duplicates",
    # Subscriptions
    "detect_subscriptions",
    # Suggestions
    "CategorySuggestion",
    "generate_suggestions",
    # Ingest
    "CSVParseError",
    "parse_csv",
    "export_to_csv",
    "export_to_json",
    # Persistence
    "TransactionStore",
    "SessionGreeting",
    # Main function
    "run_import_pipeline",
]


def run_import_pipeline(
    csv_content: str,
    existing_transactions: Optional[List[Transaction]] = None,
    settings: Optional[UserSettings] = None,
    now: Optional[datetime] = None,
) -> Dict:
    """
    Main entry point for importing a statement.

    This function orchestrates the import:
    1. Parse and categorize the CSV with the user's rules
    2. Flag duplicates inside the import
    3. Split the import into new transactions and duplicates of stored ones
    4. Run subscription detection over the combined history

    Args:
        csv_content: Statement CSV text including the header row
        existing_transactions: Previously stored transactions
        settings: User settings; defaults are used when omitted. Auto-added
            subscriptions are written into ``settings.subscriptions``.
        now: Clock override

    Returns:
        Dictionary containing:
            - transactions: Parsed transactions that are not duplicates
            - duplicates: DuplicateCandidate list against stored transactions
            - internal_duplicates: InternalDuplicateCandidate list
            - duplicate_stats: Counts per duplicate tier
            - internal_duplicate_stats: Counts for the intra-batch pass
            - subscriptions: SubscriptionDetectionResult
            - category_summary: Count and total per category of the new transactions

    Raises:
        CSVParseError: If the content is not text
    """
    settings = settings or UserSettings()
    existing = list(existing_transactions or [])

    categorizer = TransactionCategorizer.from_settings(settings)
    parsed = parse_csv(csv_content, categorizer, now=now)

    internal = detect_internal_duplicates(parsed)
    cross = detect_duplicates(parsed, existing)

    history = sorted(existing + cross.unique, key=lambda t: t.date, reverse=True)
    subscriptions = detect_subscriptions(history, settings.subscriptions, now=now)

    return {
        "transactions": cross.unique,
        "duplicates": cross.duplicates,
        "internal_duplicates": internal.internal_duplicates,
        "duplicate_stats": get_duplicate_stats(cross),
        "internal_duplicate_stats": get_enhanced_duplicate_stats(internal),
        "subscriptions": subscriptions,
        "category_summary": categorizer.get_category_summary(cross.unique),
    }
