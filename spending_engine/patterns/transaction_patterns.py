"""
Built-in categorization patterns for the Spending Engine.
Merchant signatures seen on US and Mexican card statements, keyed by category id.

Rules are evaluated highest priority first; the first matching regex wins.
"""

BUILTIN_CATEGORY_RULES = {
    # Big-ticket expenses first
    "school-housing": {
        "regex_patterns": [
            r"(?i)TCP\*UWMADISONHSG",
            r"(?i)BILT RENT",
            r"(?i)BILT REWARDS",
            r"(?i)UW MADISON",
            r"(?i)UNIVERSITY BOOK",
            r"(?i)REDEFINED-A-CAPPELLA",
        ],
        "priority": 100,
        "description": "School & Housing",
    },

    "work-ai": {
        "regex_patterns": [
            r"(?i)CLAUDE\.AI",
            r"(?i)ANTHROPIC",
            r"(?i)OPENAI",
            r"(?i)CHATGPT",
            r"(?i)SUPABASE",
            r"(?i)VERCEL",
            r"(?i)650 INDUSTRIES",
            r"(?i)SQSP\*",
            r"(?i)RUNWAY",
            r"(?i)CODERABBIT",
            r"(?i)WINDSURF",
            r"(?i)PERPLEXITY",
            r"(?i)MOBBIN",
            r"(?i)MOONFLASH",
            r"(?i)GOOGLE\*WORKSPACE",
        ],
        "priority": 90,
        "description": "Work & AI",
    },

    "transportation": {
        "regex_patterns": [
            r"(?i)^UBER$",
            r"(?i)UBER TRIP",
            r"(?i)UBER ONE",
            r"(?i)LYFT",
            r"(?i)UNITED AIRLINES",
            r"(?i)DELTA AIR",
            r"(?i)AMERICAN AIRLINES",
            r"(?i)AIR FRANCE",
        ],
        "priority": 85,
        "description": "Transportation",
    },

    # Bars, clubs and nightlife apps
    "nightlife": {
        "regex_patterns": [
            r"(?i)TST\* THE DOUBLE U",
            r"(?i)TST\* STATE STREET BRATS",
            r"(?i)TST\* THE KOLLEGE KLUB",
            r"(?i)TST\* CHASERS",
            r"(?i)TST\* RED ROCK",
            r"(?i)TST\* MOON BAR",
            r"(?i)TST\* FREEHOUSE PUB",
            r"(?i)TST\* ENO VINO",
            r"(?i)TST\* VINTAGE SPIRITS",
            r"(?i)TST\* RED - MADISON",
            r"(?i)LINELEAP",
            r"(?i)SOTTO NIGHT CLUB",
            r"(?i)DOUBLE TAP MADISON",
            r"(?i)WHISKEY JACKS",
            r"(?i)RILEYS WINES",
            r"(?i)BAR 27",
            r"(?i)PAUL'S NEIGHBORHOOD BAR",
            r"(?i)JAYS\s+MADISON",
            r"(?i)WANDOS",
            r"(?i)ABARR LA EUR",
        ],
        "priority": 80,
        "description": "Nightlife",
    },

    # Streaming, movies, music
    "entertainment": {
        "regex_patterns": [
            r"(?i)NETFLIX",
            r"(?i)SPOTIFY",
            r"(?i)HBO\s?MAX",
            r"(?i)DISNEY PLUS",
            r"(?i)YOUTUBE TV",
            r"(?i)YOUTUBE VIDEOS",
            r"(?i)GOOGLE\s?\*YOUTUBE",
            r"(?i)GOOGLE\*YT PRIMETIME",
            r"(?i)GOOGLE ONE",
            r"(?i)GOOGLE\*GOOGLE ONE",
            r"(?i)SPLICE",
            r"(?i)SOUNDCLOUD",
            r"(?i)MUSICVERTER",
            r"(?i)KINDLE",
            r"(?i)AMC THEATRE",
            r"(?i)ORPHEUM THEATER",
            r"(?i)MILLENNIUMSIPOS\*CINEMA",
            r"(?i)PARAMNTPLUS",
            r"(?i)AMAZONPRIME",
            r"(?i)TOUCHTUNES",
            r"(?i)GOOGLE \*TV",
        ],
        "priority": 75,
        "description": "Entertainment",
    },

    "health-sports": {
        "regex_patterns": [
            r"(?i)GOLF MADISON",
            r"(?i)WHOOP",
            r"(?i)MYLAB BOX",
        ],
        "priority": 70,
        "description": "Health & Sports",
    },

    "groceries-supplies": {
        "regex_patterns": [
            r"(?i)COSTCO",
            r"(?i)INSTACART",
            r"(?i)SUPERAMA",
            r"(?i)TARGET",
            r"(?i)STOP N SHOP",
            r"(?i)WALMART",
            r"(?i)HEB",
            r"(?i)SAM'S CLUB",
            r"(?i)TRADER JOE",
            r"(?i)WHOLE FOODS",
        ],
        "priority": 65,
        "description": "Groceries & Supplies",
    },

    "eating-out-delivery": {
        "regex_patterns": [
            # Delivery services
            r"(?i)UBER EATS",
            r"(?i)DOORDASH",
            r"(?i)BT\*DD",
            r"(?i)RAPPI",
            r"(?i)GRUBHUB",
            # Fast food
            r"(?i)CHIPOTLE",
            r"(?i)QDOBA",
            r"(?i)TACO BELL",
            r"(?i)RAISING CANES",
            r"(?i)JIMMY JOHNS",
            r"(?i)DOMINO'S",
            # Coffee
            r"(?i)STARBUCKS",
            r"(?i)BARRIQUES",
            # Restaurants
            r"(?i)GANDHI",
            r"(?i)JAPONEZ",
            r"(?i)ASIAN KITCHEN",
            r"(?i)IANSPIZZA",
            r"(?i)PAULS PEL'MENI",
            r"(?i)FRESH MADISON",
            r"(?i)MONDAY[`']S",
            r"(?i)TST\* THE STUFFED OLIVE",
            r"(?i)BASSETT STREET BRUNCH",
            r"(?i)ZAZA SNACKS",
            r"(?i)PARADIES-MADTOWN",
            r"(?i)CANTEEN",
            r"(?i)LEVY@",
        ],
        "priority": 60,
        "description": "Eating Out & Delivery",
    },

    "shopping-retail": {
        "regex_patterns": [
            r"(?i)NORDSTROM",
            r"(?i)MASSIMO DUTTI",
            r"(?i)ZARA",
            r"(?i)H&M",
            r"(?i)MACY'S",
            r"(?i)GAP",
        ],
        "priority": 55,
        "description": "Shopping & Retail",
    },

    # Electronics and miscellaneous personal spend
    "personal": {
        "regex_patterns": [
            r"(?i)AMAZON",
            r"(?i)APPLE\.COM",
            r"(?i)PAYPAL \*APPLE",
            r"(?i)PAYPAL \*MICROSOFT",
            r"(?i)PAYPAL \*NESPRESSO",
            r"(?i)TELEFONICA.*PEGASO",
            r"(?i)ATT MOB",
        ],
        "priority": 50,
        "description": "Personal",
    },
}


# Pre-sorted (highest priority first) so the table is not re-sorted per call
BUILTIN_RULES_SORTED = sorted(
    BUILTIN_CATEGORY_RULES.items(),
    key=lambda item: item[1]["priority"],
    reverse=True,
)


# Prefixes added by payment processors ahead of the real merchant name.
# Applied in order; each is (regex, replacement).
PROCESSOR_PREFIX_REWRITES = [
    (r"(?i)^BT\*DD \*DOORDASH ", ""),
    (r"(?i)^DD \*DOORDASH", "DOORDASH"),
    (r"(?i)^IC\* ", ""),
    (r"(?i)^TST\* ", ""),
    (r"(?i)^PAYPAL \*", ""),
    (r"(?i)^GOOGLE\*", "GOOGLE "),
    (r"(?i)^SQSP\* ", "SQUARESPACE "),
    (r"(?i)^CTLP\*", ""),
]

# Cities that terminal descriptors append after the merchant name
LOCATION_CITIES = [
    "MADISON",
    "SAN FRANCISCO",
    "NEW YORK",
    "MEXICO CITY",
    "CIUDAD DE MEX",
    "HOUSTON",
    "BOSTON",
    "SINGAPORE",
    "LONDON",
    "PALO ALTO",
    "CUPERTINO",
    "BELLEVILLE",
    "MIDDLETON",
    "CHARLOTTE",
    "ATLANTA",
    "NEWPORT BEACH",
    "MOUNTAIN VIEW",
    "WALNUT CREEK",
    "COVINA",
    "LOS ANGELES",
]

# Extra spellings only recognised when extracting a location
LOCATION_ALIASES = [
    r"MEXICO D\.F\.",
    "CD MEXICO",
    "SCHAUMBURG",
]
