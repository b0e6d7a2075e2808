"""
Known subscription services.

Each entry maps a service id to the merchant signatures it bills under and
the billing assumptions used until enough charge history exists.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern


@dataclass
class KnownService:
    """A subscription provider recognised by merchant signature."""
    id: str
    name: str
    patterns: List[str]
    default_frequency: str
    default_category_id: str
    website: Optional[str] = None
    compiled: List[Pattern] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self):
        self.compiled = [re.compile(p, re.IGNORECASE) for p in self.patterns]

    def matches(self, merchant: str) -> bool:
        return any(p.search(merchant) for p in self.compiled)


KNOWN_SERVICES = [
    # Streaming & entertainment
    KnownService("netflix", "Netflix", [r"NETFLIX"], "monthly", "entertainment", "netflix.com"),
    KnownService("spotify", "Spotify", [r"SPOTIFY"], "monthly", "entertainment", "spotify.com"),
    KnownService("disney-plus", "Disney+", [r"DISNEY PLUS", r"DISNEY\+", r"DISNEYPLUS"],
                 "monthly", "entertainment"),
    KnownService("hbo-max", "HBO Max", [r"HBOMAX", r"HBO MAX", r"HBO"], "monthly", "entertainment"),
    KnownService("youtube-premium", "YouTube Premium",
                 [r"YOUTUBE PREMIUM", r"GOOGLE\*YOUTUBE", r"YOUTUBE TV"], "monthly", "entertainment"),
    KnownService("amazon-prime", "Amazon Prime", [r"AMAZONPRIME", r"PRIME VIDEO", r"AMAZON PRIME"],
                 "annual", "entertainment"),
    KnownService("paramount-plus", "Paramount+", [r"PARAMNTPLUS", r"PARAMOUNT\+", r"PARAMOUNT PLUS"],
                 "monthly", "entertainment"),
    KnownService("apple-tv", "Apple TV+", [r"APPLE TV", r"APPLE\.COM.*TV"], "monthly", "entertainment"),
    KnownService("peacock", "Peacock", [r"PEACOCK"], "monthly", "entertainment"),

    # AI & work tools
    KnownService("chatgpt", "ChatGPT Plus", [r"CHATGPT", r"OPENAI"], "monthly", "work-ai",
                 "chat.openai.com"),
    KnownService("claude-ai", "Claude Pro", [r"CLAUDE\.AI", r"ANTHROPIC"], "monthly", "work-ai",
                 "claude.ai"),
    KnownService("perplexity", "Perplexity Pro", [r"PERPLEXITY"], "monthly", "work-ai"),
    KnownService("github-copilot", "GitHub Copilot", [r"GITHUB", r"COPILOT"], "monthly", "work-ai"),
    KnownService("vercel", "Vercel", [r"VERCEL"], "monthly", "work-ai"),
    KnownService("supabase", "Supabase", [r"SUPABASE"], "monthly", "work-ai"),
    KnownService("notion", "Notion", [r"NOTION"], "monthly", "work-ai"),
    KnownService("linear", "Linear", [r"LINEAR"], "monthly", "work-ai"),

    # Cloud storage
    KnownService("google-one", "Google One", [r"GOOGLE ONE", r"GOOGLE\*DRIVE"], "monthly", "personal"),
    KnownService("icloud", "iCloud+", [r"APPLE\.COM.*BILL", r"ICLOUD"], "monthly", "personal"),
    KnownService("dropbox", "Dropbox", [r"DROPBOX"], "monthly", "personal"),

    # Health & fitness
    KnownService("whoop", "WHOOP", [r"WHOOP"], "monthly", "health-sports"),
    KnownService("strava", "Strava", [r"STRAVA"], "monthly", "health-sports"),
    KnownService("peloton", "Peloton", [r"PELOTON"], "monthly", "health-sports"),

    # Food & delivery
    KnownService("doordash", "DoorDash DashPass", [r"DOORDASH.*DASHPASS", r"DASHPASS"],
                 "monthly", "personal"),
    KnownService("uber-one", "Uber One", [r"UBER ONE", r"UBER\*ONE"], "monthly", "transportation"),

    # Music & audio
    KnownService("apple-music", "Apple Music", [r"APPLE MUSIC"], "monthly", "entertainment"),
    KnownService("audible", "Audible", [r"AUDIBLE"], "monthly", "entertainment"),
    KnownService("splice", "Splice", [r"SPLICE"], "monthly", "entertainment"),

    # News & reading
    KnownService("nyt", "New York Times", [r"NYT", r"NEW YORK TIMES", r"NYTIMES"],
                 "monthly", "entertainment"),
    KnownService("medium", "Medium", [r"MEDIUM\.COM", r"MEDIUM MEMBERSHIP"], "monthly", "entertainment"),
]

KNOWN_SERVICES_BY_ID = {service.id: service for service in KNOWN_SERVICES}


def find_known_service(merchant: str) -> Optional[KnownService]:
    """Return the first known service whose signature appears in the merchant."""
    for service in KNOWN_SERVICES:
        if service.matches(merchant):
            return service
    return None


def is_known_service(merchant: str) -> bool:
    return find_known_service(merchant) is not None
