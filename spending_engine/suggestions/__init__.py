"""
Category suggestions from learned patterns, similar merchants and amounts.
"""

from .suggestion_engine import (
    CategorySuggestion,
    generate_suggestions,
    generate_bulk_suggestions,
    validate_suggestion,
)

__all__ = [
    "CategorySuggestion",
    "generate_suggestions",
    "generate_bulk_suggestions",
    "validate_suggestion",
]
