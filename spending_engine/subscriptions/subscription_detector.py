"""
Subscription Detection Module for the Spending Engine.

Detects recurring charges in two passes:

1. Known services: merchant signatures from the known-service table, with
   a fixed high confidence.
2. Pattern analysis: charges grouped by merchant; amount consistency (CV)
   and interval statistics classify the billing frequency and score it.

Known services take precedence; the pattern pass skips their merchants.
"""

import logging
import math
import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from ..categorisation.learning import generate_record_id
from ..config.engine_config import FREQUENCY_DAYS, SUBSCRIPTION_CONFIG
from ..models import Subscription, Transaction, now_iso, parse_iso
from ..patterns.known_services import KNOWN_SERVICES, is_known_service
from .analytics import normalize_to_monthly


logger = logging.getLogger(__name__)


@dataclass
class RecurringPattern:
    """A recurring charge found by interval analysis."""
    merchant_pattern: str
    transaction_ids: List[str]
    average_amount: float
    amount_std_dev: float
    frequency: str
    frequency_confidence: float
    interval_days: float  # Average days between charges
    interval_std_dev: float
    first_date: datetime
    last_date: datetime
    occurrence_count: int
    day_of_month_mode: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            "merchant_pattern": self.merchant_pattern,
            "transaction_ids": list(self.transaction_ids),
            "average_amount": self.average_amount,
            "amount_std_dev": self.amount_std_dev,
            "frequency": self.frequency,
            "frequency_confidence": self.frequency_confidence,
            "interval_days": self.interval_days,
            "interval_std_dev": self.interval_std_dev,
            "first_date": self.first_date.isoformat(),
            "last_date": self.last_date.isoformat(),
            "occurrence_count": self.occurrence_count,
            "day_of_month_mode": self.day_of_month_mode,
        }


@dataclass
class UpcomingRenewal:
    subscription_id: str
    subscription_name: str
    expected_date: str
    expected_amount: float
    days_until: int
    category_id: str


@dataclass
class SubscriptionDetectionResult:
    known_services: List[Subscription] = field(default_factory=list)
    patterns: List[RecurringPattern] = field(default_factory=list)
    upcoming_renewals: List[UpcomingRenewal] = field(default_factory=list)


def get_expected_interval(frequency: str) -> int:
    """Projected days between charges; irregular billing assumes monthly."""
    return FREQUENCY_DAYS.get(frequency, SUBSCRIPTION_CONFIG["default_interval_days"])


def calculate_intervals(sorted_txns: Sequence[Transaction]) -> List[int]:
    """Whole days between consecutive charges (input oldest first)."""
    return [
        round((curr.date - prev.date).total_seconds() / 86400)
        for prev, curr in zip(sorted_txns, sorted_txns[1:])
    ]


def classify_frequency(avg_days: float, std_dev: float) -> str:
    """
    Classify the billing frequency from interval statistics.

    Args:
        avg_days: Mean days between charges
        std_dev: Population standard deviation of the intervals

    Returns:
        Frequency name, or 'irregular' if no band fits
    """
    for frequency, min_days, max_days, max_std in SUBSCRIPTION_CONFIG["frequency_bands"]:
        if min_days <= avg_days <= max_days and std_dev < max_std:
            return frequency
    return "irregular"


def calculate_frequency_confidence(intervals: Sequence[int], frequency: str) -> float:
    """
    Score how well the intervals fit the frequency.

    0.9 x the fraction of intervals within 15% of the expected interval, plus
    up to 0.1 for the number of intervals observed, capped at 1.0.
    """
    if not intervals:
        return 0.0

    expected = get_expected_interval(frequency)
    tolerance = expected * SUBSCRIPTION_CONFIG["interval_tolerance"]
    matching = sum(1 for i in intervals if abs(i - expected) <= tolerance)
    match_ratio = matching / len(intervals)

    occurrence_bonus = min(
        SUBSCRIPTION_CONFIG["max_occurrence_bonus"],
        len(intervals) * SUBSCRIPTION_CONFIG["occurrence_bonus_per_interval"],
    )
    return min(1.0, match_ratio * SUBSCRIPTION_CONFIG["interval_weight"] + occurrence_bonus)


def _find_mode(values: Sequence[int]) -> Optional[int]:
    if not values:
        return None
    # Counter preserves first-seen order, so ties go to the earliest value
    return Counter(values).most_common(1)[0][0]


def group_by_merchant(transactions: Sequence[Transaction]) -> Dict[str, List[Transaction]]:
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        groups[txn.merchant.upper().strip()].append(txn)
    return dict(groups)


def estimate_next_billing_date(last_charge: datetime, frequency: str) -> datetime:
    return last_charge + timedelta(days=get_expected_interval(frequency))


def detect_known_services(
    transactions: Sequence[Transaction],
    existing_subscriptions: Sequence[Subscription] = (),
    ignored_patterns: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> List[Subscription]:
    """
    Detect charges from known subscription services.

    Args:
        transactions: Transactions to scan
        existing_subscriptions: Already tracked subscriptions; their services are skipped
        ignored_patterns: Upper-cased merchant patterns the user dismissed
        now: Clock override for record timestamps

    Returns:
        New subscriptions, one per matched service
    """
    tracked_ids = {s.known_service_id for s in existing_subscriptions if s.known_service_id}
    ignored = set(ignored_patterns)
    timestamp = now_iso(now)
    detected = []

    for service in KNOWN_SERVICES:
        if service.id in tracked_ids:
            continue

        matching = [t for t in transactions if service.matches(t.merchant)]
        if not matching:
            continue

        merchant_pattern = matching[0].merchant.upper().strip()
        if merchant_pattern in ignored:
            continue

        amounts = [t.amount for t in matching]
        last_charge = max(matching, key=lambda t: t.date)
        next_expected = estimate_next_billing_date(last_charge.date, service.default_frequency)

        detected.append(Subscription(
            id=generate_record_id(f"sub-{service.id}"),
            name=service.name,
            merchant_pattern=merchant_pattern,
            known_service_id=service.id,
            frequency=service.default_frequency,
            amount=statistics.mean(amounts),
            amount_variance=statistics.pstdev(amounts),
            expected_billing_day=last_charge.date.day,
            next_expected_date=next_expected.isoformat(),
            last_charge_date=last_charge.date.isoformat(),
            status="active",
            detection_method="known-service",
            confidence=SUBSCRIPTION_CONFIG["known_service_confidence"],
            category_id=service.default_category_id,
            created_at=timestamp,
            updated_at=timestamp,
            transaction_ids=[t.id for t in matching],
        ))

    return detected


def analyze_recurring_patterns(
    transactions: Sequence[Transaction],
    settings,
) -> List[RecurringPattern]:
    """
    Find recurring charges from merchants that are not known services.

    Args:
        transactions: Transactions to analyze
        settings: SubscriptionSettings (minimum_occurrences, confidence_threshold)

    Returns:
        Patterns sorted by frequency confidence, highest first
    """
    patterns = []

    for merchant, txns in group_by_merchant(transactions).items():
        if len(txns) < settings.minimum_occurrences:
            continue
        if is_known_service(merchant):
            continue

        amounts = [t.amount for t in txns]
        avg_amount = statistics.mean(amounts)
        amount_std_dev = statistics.pstdev(amounts)
        amount_cv = amount_std_dev / avg_amount if avg_amount > 0 else 0.0
        if amount_cv > SUBSCRIPTION_CONFIG["max_amount_cv"]:
            continue

        sorted_txns = sorted(txns, key=lambda t: t.date)
        intervals = calculate_intervals(sorted_txns)
        if not intervals:
            continue

        avg_interval = statistics.mean(intervals)
        interval_std_dev = statistics.pstdev(intervals)
        frequency = classify_frequency(avg_interval, interval_std_dev)
        confidence = calculate_frequency_confidence(intervals, frequency)

        if confidence < settings.confidence_threshold:
            continue

        patterns.append(RecurringPattern(
            merchant_pattern=merchant,
            transaction_ids=[t.id for t in txns],
            average_amount=avg_amount,
            amount_std_dev=amount_std_dev,
            frequency=frequency,
            frequency_confidence=confidence,
            interval_days=avg_interval,
            interval_std_dev=interval_std_dev,
            first_date=sorted_txns[0].date,
            last_date=sorted_txns[-1].date,
            occurrence_count=len(txns),
            day_of_month_mode=_find_mode([t.date.day for t in txns]),
        ))

    patterns.sort(key=lambda p: p.frequency_confidence, reverse=True)
    return patterns


def get_upcoming_renewals(
    subscriptions: Sequence[Subscription],
    days_ahead: int = 30,
    now: Optional[datetime] = None,
) -> List[UpcomingRenewal]:
    """
    Active subscriptions expected to renew within the next ``days_ahead`` days.

    Returns:
        Renewals sorted by days until renewal, soonest first
    """
    now = parse_iso(now) or datetime.now()
    cutoff = now + timedelta(days=days_ahead)
    renewals = []

    for sub in subscriptions:
        if sub.status != "active":
            continue
        next_date = parse_iso(sub.next_expected_date)
        if next_date is None or next_date < now or next_date > cutoff:
            continue

        days_until = math.ceil((next_date - now).total_seconds() / 86400)
        renewals.append(UpcomingRenewal(
            subscription_id=sub.id,
            subscription_name=sub.name,
            expected_date=sub.next_expected_date,
            expected_amount=sub.amount,
            days_until=days_until,
            category_id=sub.category_id,
        ))

    renewals.sort(key=lambda r: r.days_until)
    return renewals


def update_next_expected_date(subscription: Subscription, charge_date: datetime) -> str:
    """Project the next charge from a newly observed one."""
    return estimate_next_billing_date(charge_date, subscription.frequency).isoformat()


def pattern_to_subscription(
    pattern: RecurringPattern,
    category_id: str,
    default_notify_days_before: int = 3,
    now: Optional[datetime] = None,
) -> Subscription:
    """Turn a detected pattern into a tracked subscription."""
    timestamp = now_iso(now)
    return Subscription(
        id=generate_record_id("sub-pattern"),
        name=pattern.merchant_pattern,
        merchant_pattern=pattern.merchant_pattern,
        frequency=pattern.frequency,
        amount=pattern.average_amount,
        amount_variance=pattern.amount_std_dev,
        expected_billing_day=pattern.day_of_month_mode,
        next_expected_date=estimate_next_billing_date(pattern.last_date, pattern.frequency).isoformat(),
        last_charge_date=pattern.last_date.isoformat(),
        status="active",
        detection_method="pattern-analysis",
        confidence=pattern.frequency_confidence,
        category_id=category_id,
        notify_before_renewal=True,
        notify_days_before=default_notify_days_before,
        created_at=timestamp,
        updated_at=timestamp,
        transaction_ids=list(pattern.transaction_ids),
    )


def detect_subscriptions(
    transactions: Sequence[Transaction],
    subscription_settings,
    now: Optional[datetime] = None,
    days_ahead: int = 30,
) -> SubscriptionDetectionResult:
    """
    Run both detection passes and merge them into the user's settings.

    Known services at or above the auto-add confidence are added to
    ``subscription_settings``. Recurring patterns whose merchant is already
    tracked or ignored are dropped; the rest are returned for confirmation.

    Args:
        transactions: Transaction history
        subscription_settings: SubscriptionSettings, updated in place
        now: Clock override
        days_ahead: Window for upcoming renewals

    Returns:
        SubscriptionDetectionResult
    """
    result = SubscriptionDetectionResult()
    if not subscription_settings.enable_auto_detection:
        result.upcoming_renewals = get_upcoming_renewals(
            subscription_settings.subscriptions, days_ahead, now
        )
        return result

    known = detect_known_services(
        transactions,
        subscription_settings.subscriptions,
        subscription_settings.ignored_patterns,
        now,
    )
    for sub in known:
        if sub.confidence >= SUBSCRIPTION_CONFIG["auto_add_confidence"]:
            subscription_settings.add_subscription(sub)
    result.known_services = known

    tracked = {s.merchant_pattern.upper() for s in subscription_settings.subscriptions}
    ignored = set(subscription_settings.ignored_patterns)
    result.patterns = [
        p for p in analyze_recurring_patterns(transactions, subscription_settings)
        if p.merchant_pattern.upper() not in tracked and p.merchant_pattern.upper() not in ignored
    ]

    result.upcoming_renewals = get_upcoming_renewals(
        subscription_settings.subscriptions, days_ahead, now
    )
    logger.info(
        f"Subscription detection: {len(known)} known services, {len(result.patterns)} new patterns"
    )
    return result


def confirm_pattern(
    subscription_settings,
    pattern: RecurringPattern,
    category_id: str,
    now: Optional[datetime] = None,
) -> Subscription:
    """Track a detected pattern the user confirmed as a subscription."""
    sub = pattern_to_subscription(
        pattern, category_id, subscription_settings.default_notify_days_before, now
    )
    return subscription_settings.add_subscription(sub)


def calculate_monthly_spend(subscriptions: Sequence[Subscription]) -> float:
    """Monthly equivalent of every active subscription."""
    return sum(
        normalize_to_monthly(sub.amount, sub.frequency)
        for sub in subscriptions
        if sub.status == "active"
    )


def calculate_annual_projection(subscriptions: Sequence[Subscription]) -> float:
    return calculate_monthly_spend(subscriptions) * 12


FREQUENCY_LABELS = {
    "weekly": "week",
    "biweekly": "2 weeks",
    "monthly": "month",
    "quarterly": "quarter",
    "semi-annual": "6 months",
    "annual": "year",
    "irregular": "varies",
}


def get_frequency_label(frequency: str) -> str:
    return FREQUENCY_LABELS.get(frequency, frequency)
