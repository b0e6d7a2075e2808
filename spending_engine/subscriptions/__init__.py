"""
Subscriptions Module for the Spending Engine.

Detects recurring charges (known services and interval analysis), projects
renewals and summarizes subscription spend.
"""

from .subscription_detector import (
    RecurringPattern,
    UpcomingRenewal,
    SubscriptionDetectionResult,
    detect_subscriptions,
    detect_known_services,
    analyze_recurring_patterns,
    classify_frequency,
    calculate_frequency_confidence,
    get_expected_interval,
    get_upcoming_renewals,
    pattern_to_subscription,
    confirm_pattern,
    update_next_expected_date,
    calculate_monthly_spend,
    calculate_annual_projection,
    get_frequency_label,
)
from .analytics import (
    PriceChange,
    SubscriptionAnalytics,
    normalize_to_monthly,
    get_subscription_transactions,
    calculate_subscription_analytics,
    detect_price_changes,
    get_known_service_info,
    get_detection_explanation,
    format_frequency,
    get_days_until_renewal,
    format_duration,
)

__all__ = [
    # Detection
    "RecurringPattern",
    "UpcomingRenewal",
    "SubscriptionDetectionResult",
    "detect_subscriptions",
    "detect_known_services",
    "analyze_recurring_patterns",
    "classify_frequency",
    "calculate_frequency_confidence",
    "get_expected_interval",
    "get_upcoming_renewals",
    "pattern_to_subscription",
    "confirm_pattern",
    "update_next_expected_date",
    "calculate_monthly_spend",
    "calculate_annual_projection",
    "get_frequency_label",
    # Analytics
    "PriceChange",
    "SubscriptionAnalytics",
    "normalize_to_monthly",
    "get_subscription_transactions",
    "calculate_subscription_analytics",
    "detect_price_changes",
    "get_known_service_info",
    "get_detection_explanation",
    "format_frequency",
    "get_days_until_renewal",
    "format_duration",
]
