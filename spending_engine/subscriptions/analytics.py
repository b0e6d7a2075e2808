"""
Subscription analytics: lifetime spend, projections and price history.
"""

import math
import statistics
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..config.engine_config import SUBSCRIPTION_CONFIG
from ..models import Subscription, Transaction, parse_iso
from ..patterns.known_services import KNOWN_SERVICES_BY_ID, KnownService


@dataclass
class PriceChange:
    date: datetime
    previous_amount: float
    new_amount: float
    percent_change: float
    transaction_id: str


@dataclass
class SubscriptionAnalytics:
    total_lifetime_spend: float
    average_amount: float
    amount_std_dev: float
    monthly_projection: float
    annual_projection: float
    charge_count: int
    subscription_duration_days: int
    price_stability_score: float  # 0-1, higher is more stable
    first_charge_date: Optional[datetime] = None
    last_charge_date: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            "total_lifetime_spend": round(self.total_lifetime_spend, 2),
            "average_amount": round(self.average_amount, 2),
            "amount_std_dev": round(self.amount_std_dev, 2),
            "monthly_projection": round(self.monthly_projection, 2),
            "annual_projection": round(self.annual_projection, 2),
            "charge_count": self.charge_count,
            "subscription_duration_days": self.subscription_duration_days,
            "price_stability_score": round(self.price_stability_score, 3),
            "first_charge_date": self.first_charge_date.isoformat() if self.first_charge_date else None,
            "last_charge_date": self.last_charge_date.isoformat() if self.last_charge_date else None,
        }


def normalize_to_monthly(amount: float, frequency: str) -> float:
    """Monthly equivalent of a charge billed at ``frequency``."""
    multiplier = SUBSCRIPTION_CONFIG["monthly_multipliers"].get(frequency, 1.0)
    return amount * multiplier


def get_subscription_transactions(
    subscription: Subscription, transactions: Sequence[Transaction]
) -> List[Transaction]:
    """
    Transactions belonging to a subscription, newest first.

    A transaction belongs if its id was recorded on the subscription or its
    merchant contains the subscription's merchant pattern.
    """
    pattern = subscription.merchant_pattern.upper()
    txn_ids = set(subscription.transaction_ids)
    matched = [
        t for t in transactions
        if t.id in txn_ids or pattern in t.merchant.upper()
    ]
    return sorted(matched, key=lambda t: t.date, reverse=True)


def calculate_subscription_analytics(
    subscription: Subscription, transactions: Sequence[Transaction]
) -> SubscriptionAnalytics:
    """
    Summarize the charge history of one subscription.

    Without matching transactions the projections fall back to the
    subscription's recorded amount.
    """
    sub_txns = get_subscription_transactions(subscription, transactions)

    if not sub_txns:
        monthly = normalize_to_monthly(subscription.amount, subscription.frequency)
        return SubscriptionAnalytics(
            total_lifetime_spend=0.0,
            average_amount=subscription.amount,
            amount_std_dev=0.0,
            monthly_projection=monthly,
            annual_projection=monthly * 12,
            charge_count=0,
            subscription_duration_days=0,
            price_stability_score=1.0,
        )

    amounts = [t.amount for t in sub_txns]
    total = sum(amounts)
    avg = total / len(amounts)
    std_dev = statistics.pstdev(amounts)
    stability = max(0.0, min(1.0, 1 - std_dev / avg)) if avg > 0 else 1.0

    first_date = sub_txns[-1].date
    last_date = sub_txns[0].date
    duration_days = math.ceil((last_date - first_date).total_seconds() / 86400)

    monthly = normalize_to_monthly(avg, subscription.frequency)
    return SubscriptionAnalytics(
        total_lifetime_spend=total,
        average_amount=avg,
        amount_std_dev=std_dev,
        monthly_projection=monthly,
        annual_projection=monthly * 12,
        charge_count=len(sub_txns),
        subscription_duration_days=duration_days,
        price_stability_score=stability,
        first_charge_date=first_date,
        last_charge_date=last_date,
    )


def detect_price_changes(
    subscription: Subscription,
    transactions: Sequence[Transaction],
    threshold_percent: Optional[float] = None,
) -> List[PriceChange]:
    """
    Consecutive charges whose amount moved by at least ``threshold_percent``.

    Args:
        subscription: Subscription to inspect
        transactions: Transaction history
        threshold_percent: Minimum absolute change in percent (default 5)

    Returns:
        Price changes, oldest first
    """
    if threshold_percent is None:
        threshold_percent = SUBSCRIPTION_CONFIG["price_change_threshold"] * 100

    ordered = sorted(
        get_subscription_transactions(subscription, transactions), key=lambda t: t.date
    )
    changes = []
    for prev, curr in zip(ordered, ordered[1:]):
        if prev.amount == 0:
            continue
        percent_change = (curr.amount - prev.amount) / prev.amount * 100
        if abs(percent_change) >= threshold_percent:
            changes.append(PriceChange(
                date=curr.date,
                previous_amount=prev.amount,
                new_amount=curr.amount,
                percent_change=percent_change,
                transaction_id=curr.id,
            ))
    return changes


def get_known_service_info(subscription: Subscription) -> Optional[KnownService]:
    if not subscription.known_service_id:
        return None
    return KNOWN_SERVICES_BY_ID.get(subscription.known_service_id)


def get_detection_explanation(subscription: Subscription) -> str:
    """Human-readable account of how a subscription was found."""
    method = subscription.detection_method

    if method == "known-service":
        service = get_known_service_info(subscription)
        if service:
            return f'Matched against known service "{service.name}" using pattern recognition.'
        return "Identified as a known subscription service."

    if method == "pattern-analysis":
        return (
            f"Detected through recurring charge analysis. "
            f"{len(subscription.transaction_ids)} transactions match the pattern "
            f'"{subscription.merchant_pattern}" with {subscription.frequency} frequency.'
        )

    if method == "user-confirmed":
        return "Manually confirmed by user as a recurring subscription."

    return "Subscription detected automatically."


_FREQUENCY_UNITS = {
    "weekly": "week",
    "biweekly": "2 weeks",
    "monthly": "month",
    "quarterly": "quarter",
    "semi-annual": "6 months",
    "annual": "year",
    "irregular": "irregular",
}


def format_frequency(frequency: str) -> str:
    return _FREQUENCY_UNITS.get(frequency, frequency)


def get_days_until_renewal(
    subscription: Subscription, now: Optional[datetime] = None
) -> Optional[int]:
    next_date = parse_iso(subscription.next_expected_date)
    if next_date is None:
        return None
    now = parse_iso(now) or datetime.now()
    return math.ceil((next_date - now).total_seconds() / 86400)


def format_duration(days: int) -> str:
    """
    Format a day count, e.g. ``"12 days"``, ``"3 months"``, ``"2y 4mo"``.
    """
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''}"
    months = days // 30
    if months < 12:
        return f"{months} month{'s' if months != 1 else ''}"
    years, remaining_months = divmod(months, 12)
    if remaining_months == 0:
        return f"{years} year{'s' if years != 1 else ''}"
    return f"{years}y {remaining_months}mo"
