"""
Engine configuration for the Spending Engine.
Contains matching thresholds, detection tolerances and suggestion weights.
"""

# Billing frequency to projected days between charges
FREQUENCY_DAYS = {
    "weekly": 7,
    "biweekly": 14,
    "monthly": 30,
    "quarterly": 91,
    "semi-annual": 182,
    "annual": 365,
}

# Fuzzy matching defaults
FUZZY_CONFIG = {
    "levenshtein_weight": 0.5,
    "token_weight": 0.5,
    "exact_match_bonus": 0.2,
    "containment_base_score": 0.8,
    "length_penalty_factor": 0.2,
    "best_matches": {
        "min_confidence": 0.6,
        "max_results": 5,
    },
    "pattern_min_confidence": 0.75,
}

# Categorization pipeline thresholds
CATEGORIZATION_CONFIG = {
    "fallback_category": "uncategorized",
    "learned_patterns": {
        "min_confidence": 0.7,
        "fuzzy_min_confidence": 0.8,
        "fuzzy_threshold": 0.85,
    },
    "custom_rules": {
        "fuzzy_threshold": 0.75,
        "amount_eq_tolerance": 0.01,
    },
    # Pattern learning policy applied on manual recategorization
    "learning": {
        "initial_confidence": 0.6,
        "confirm_increment": 0.1,
        "override_confidence": 0.5,
        "override_max_occurrences": 3,
        "contradiction_decay": 0.8,
        "trust_increment": 0.2,
    },
}

# Duplicate detection tiers
DUPLICATE_CONFIG = {
    "amount_tolerance": 0.01,
    "date_window_days": 1,
    "surface_threshold": 0.7,
    "tiers": {
        "exact": 1.0,
        "likely": 0.95,
        "possible": 0.8,
        "same_merchant": 0.75,
        "similar_merchant": 0.7,
    },
    "likely_similarity": 0.8,
    "possible_similarity": 0.6,
    "merchant_similarity": 0.7,
    "containment_similarity": 0.9,
}

# Subscription detection parameters
SUBSCRIPTION_CONFIG = {
    "known_service_confidence": 0.95,
    "auto_add_confidence": 0.9,
    "max_amount_cv": 0.3,
    "interval_tolerance": 0.15,
    "interval_weight": 0.9,
    "occurrence_bonus_per_interval": 0.02,
    "max_occurrence_bonus": 0.1,
    "default_interval_days": 30,
    # (frequency, min avg days, max avg days, max interval std dev)
    "frequency_bands": [
        ("weekly", 6, 8, 2),
        ("biweekly", 13, 15, 3),
        ("monthly", 28, 32, 5),
        ("quarterly", 85, 95, 10),
        ("semi-annual", 175, 190, 15),
        ("annual", 355, 375, 20),
    ],
    # Multipliers converting a charge at a frequency to a monthly figure
    "monthly_multipliers": {
        "weekly": 4.33,
        "biweekly": 2.17,
        "monthly": 1.0,
        "quarterly": 1 / 3,
        "semi-annual": 1 / 6,
        "annual": 1 / 12,
        "irregular": 1.0,
    },
    "price_change_threshold": 0.05,
}

# Category suggestion weights
SUGGESTION_CONFIG = {
    "exact_match_boost": 0.1,
    "exact_match_cap": 0.95,
    "fuzzy_similarity_threshold": 0.7,
    "fuzzy_confidence_factor": 0.9,
    "fuzzy_min_confidence": 0.6,
    "merchant_similarity_threshold": 0.7,
    "merchant_similarity_weight": 0.7,
    "merchant_frequency_weight": 0.3,
    "merchant_frequency_cap": 5,
    "amount_tolerance": 0.15,
    "amount_frequency_cap": 10,
    "amount_scale": 0.7,
    "amount_boost": 0.05,
}
