"""
Time-of-day greetings with a per-session cache.
"""

import random
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional


GREETING_CACHE_DURATION = timedelta(minutes=30)

# (named, anonymous) variants per time of day
GREETINGS: Dict[str, List[tuple]] = {
    "morning": [
        ("Good morning, {name}!", "Good morning!"),
        ("Rise and shine, {name}!", "Rise and shine!"),
        ("Morning, {name}! Ready to conquer your finances?", "Morning! Ready to conquer your finances?"),
        ("Hey {name}, fresh start today!", "Fresh start today!"),
    ],
    "afternoon": [
        ("Good afternoon, {name}!", "Good afternoon!"),
        ("Hey {name}, how's your day going?", "How's your day going?"),
        ("Afternoon, {name}! Time for a money check-in.", "Time for a money check-in!"),
    ],
    "evening": [
        ("Good evening, {name}!", "Good evening!"),
        ("Evening, {name}! Winding down?", "Winding down?"),
        ("Hey {name}, reviewing your day?", "Reviewing your day?"),
    ],
    "night": [
        ("Hey {name}, burning the midnight oil?", "Burning the midnight oil?"),
        ("Night owl, {name}?", "Night owl mode activated!"),
        ("Late night finance check, {name}?", "Late night finance check!"),
    ],
}


def get_time_of_day(now: datetime) -> str:
    hour = now.hour
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def get_greeting(
    now: datetime,
    user_name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a greeting for the time of day, addressing the user when named."""
    name = (user_name or "").strip()
    named, anonymous = (rng or random).choice(GREETINGS[get_time_of_day(now)])
    return named.format(name=name) if name else anonymous


class SessionGreeting:
    """
    Caches one greeting per user name for 30 minutes.

    Args:
        clock: Returns the current time; defaults to datetime.now
        rng: Random source used to pick greetings
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ):
        self.clock = clock
        self.rng = rng or random.Random()
        self.greeting: Optional[str] = None
        self.timestamp: Optional[datetime] = None
        self.user_name: Optional[str] = None

    def get(self, user_name: Optional[str] = None) -> str:
        now = self.clock()
        if (
            self.greeting is not None
            and now - self.timestamp < GREETING_CACHE_DURATION
            and self.user_name == user_name
        ):
            return self.greeting

        self.greeting = get_greeting(now, user_name, self.rng)
        self.timestamp = now
        self.user_name = user_name
        return self.greeting

    def clear(self) -> None:
        self.greeting = None
        self.timestamp = None
        self.user_name = None
