"""Ordered pattern tables used by the forecasting pipeline.

Every table is evaluated top to bottom and the first match wins, so more
specific entries must precede broader ones.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "CATEGORIES",
    "MERCHANT_PATTERNS",
    "MERCHANT_NOISE_PATTERNS",
    "FEED_CATEGORY_HINTS",
    "CATEGORY_KEYWORDS",
    "NOISE_MERCHANT_PATTERNS",
    "INCOME_TRANSFER_PATTERNS",
    "PAYDOWN_PATTERNS",
    "NEVER_RECURRING_PATTERNS",
    "SUBSCRIPTION_PATTERNS",
    "EVENT_DRIVEN_CATEGORIES",
]

CATEGORIES: Final[tuple[str, ...]] = (
    "Housing",
    "Transport",
    "Groceries",
    "Food & Drink",
    "Shopping",
    "Entertainment",
    "Utilities",
    "Subscriptions",
    "Insurance",
    "Healthcare",
    "Travel",
    "Education",
    "Personal Care",
    "Gifts & Donations",
    "Income",
    "Transfer",
    "Auto",
    "Other",
)

# Raw feed name pattern -> display name.
MERCHANT_PATTERNS: Final[tuple[tuple[str, str], ...]] = (
    (r"apple\s*card|applecard|gsbank", "Apple Card"),
    (r"\bsofi\b", "SoFi"),
    (r"mazda\s*fin", "Mazda Financial"),
    (r"capital\s*one", "Capital One"),
    (r"paypal", "PayPal"),
    (r"at&t|att\*?\s*bill", "AT&T"),
    (r"t-?mobile", "T-Mobile"),
    (r"verizon", "Verizon"),
    (r"comcast|xfinity", "Xfinity"),
    (r"spectrum", "Spectrum"),
    (r"netflix", "Netflix"),
    (r"spotify", "Spotify"),
    (r"hulu", "Hulu"),
    (r"disney\s*\+|disneyplus|disney\s*plus", "Disney+"),
    (r"hbo\s*max|\bhbo\b", "HBO Max"),
    (r"apple\s*music", "Apple Music"),
    (r"youtube", "YouTube"),
    (r"amazon\s*prime", "Amazon Prime"),
    (r"audible", "Audible"),
    (r"claude\.?ai|anthropic", "Anthropic"),
    (r"openai|chatgpt", "OpenAI"),
    (r"adobe", "Adobe"),
    (r"playstation|\bpsn\b", "PlayStation"),
    (r"digital\s*ocean", "DigitalOcean"),
    (r"supabase", "Supabase"),
    (r"github", "GitHub"),
    (r"google\s*\*?\s*cloud|\bgcp\b", "Google Cloud"),
    (r"vercel", "Vercel"),
    (r"railway", "Railway"),
    (r"\baws\b|amazon\s*web", "AWS"),
    (r"\bbilt\b", "Bilt (Rent)"),
    (r"dominion\s*energy", "Dominion Energy"),
    (r"pg&?e\b|pacific\s*gas", "PG&E"),
    (r"duke\s*energy", "Duke Energy"),
    (r"dept\s*(of\s*)?education|student\s*l[no]", "Dept of Education"),
    (r"allegiant", "Allegiant Air"),
    (r"southwest", "Southwest Airlines"),
    (r"united\s*air", "United Airlines"),
    (r"delta\s*air", "Delta Airlines"),
    (r"american\s*air", "American Airlines"),
    (r"jetblue", "JetBlue"),
    (r"\busps\b|postal\s*service", "USPS"),
    (r"fedex", "FedEx"),
    (r"\bups\b", "UPS"),
    (r"starbucks", "Starbucks"),
    (r"mcdonald", "McDonald's"),
    (r"chick-?fil-?a", "Chick-fil-A"),
    (r"chipotle", "Chipotle"),
    (r"dunkin", "Dunkin'"),
    (r"domino", "Domino's"),
    (r"panera", "Panera Bread"),
    (r"doordash", "DoorDash"),
    (r"grubhub", "Grubhub"),
    (r"uber\s*eats?", "Uber Eats"),
    (r"uber(?!\s*eat)", "Uber"),
    (r"lyft", "Lyft"),
    (r"chevron", "Chevron"),
    (r"exxon", "ExxonMobil"),
    (r"speedway", "Speedway"),
    (r"wawa", "Wawa"),
    (r"amazon\s*mkt|amazon(?!\s*prime)(?!\s*web)", "Amazon"),
    (r"walmart", "Walmart"),
    (r"\btarget\b", "Target"),
    (r"costco", "Costco"),
    (r"best\s*buy", "Best Buy"),
    (r"home\s*depot", "Home Depot"),
    (r"ikea", "IKEA"),
    (r"whole\s*foods", "Whole Foods"),
    (r"trader\s*joe", "Trader Joe's"),
    (r"safeway", "Safeway"),
    (r"kroger", "Kroger"),
    (r"publix", "Publix"),
    (r"\baldi\b", "Aldi"),
    (r"harris\s*teeter", "Harris Teeter"),
    (r"food\s*lion", "Food Lion"),
    (r"geico", "GEICO"),
    (r"state\s*farm", "State Farm"),
    (r"progressive", "Progressive"),
    (r"\bcvs\b", "CVS Pharmacy"),
    (r"walgreens", "Walgreens"),
    (r"zelle", "Zelle"),
    (r"venmo", "Venmo"),
    (r"cash\s*app", "Cash App"),
    (r"robinhood", "Robinhood"),
)

# Stripped from names that have no known mapping, applied in order.
MERCHANT_NOISE_PATTERNS: Final[tuple[str, ...]] = (
    r"^(ach|pos|debit|credit|purchase|withdrawal|deposit|payment|online|recurring|check|chk|electronic)\s+",
    r"\s+(ach|pos|debit|credit|purchase|withdrawal|deposit|payment|online|recurring|check|chk|electronic)$",
    r"\s+(inc|llc|ltd|corp|co|company|enterprises)\.?$",
    r"\s*#\d+\s*",
    r"\s*\d{4,}\s*",
    r"\s*\*+\s*",
)

# Feed category label fragment -> internal category.
FEED_CATEGORY_HINTS: Final[tuple[tuple[str, str], ...]] = (
    ("food", "Food & Drink"),
    ("restaurant", "Food & Drink"),
    ("travel", "Travel"),
    ("airline", "Travel"),
    ("shop", "Shopping"),
    ("merchandise", "Shopping"),
    ("transfer", "Transfer"),
    ("recreation", "Entertainment"),
    ("entertainment", "Entertainment"),
)

CATEGORY_KEYWORDS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("Income", ("payroll", "direct dep", "salary", "wage", "income", "deposit", "paycheck")),
    ("Transfer", ("transfer", "zelle", "venmo", "cashapp", "cash app", "xfer")),
    ("Housing", ("rent", "mortgage", "hoa", "property tax", "landlord", "apartment", "real estate")),
    ("Auto", ("mazda", "ford motor", "auto loan", "car payment", "car loan")),
    (
        "Food & Drink",
        (
            "starbucks", "mcdonald", "burger", "coffee", "restaurant", "food", "cafe", "pizza",
            "taco", "chipotle", "subway", "doordash", "grubhub", "uber eat", "panera", "chick-fil",
            "dunkin", "wendy", "domino", "dine", "dining", "bar ", "pub ", "brew", "bakery",
        ),
    ),
    (
        "Transport",
        (
            "lyft", "chevron", "shell", "gas", "exxon", "bp ", "mobil", "fuel", "parking", "toll",
            "transit", "metro", "bus fare", "uber",
        ),
    ),
    (
        "Groceries",
        (
            "safeway", "whole foods", "trader joe", "market", "costco", "grocery", "kroger",
            "publix", "aldi", "wegmans", "food lion", "sprouts", "harris teeter", "albertson",
        ),
    ),
    (
        "Subscriptions",
        (
            "netflix", "spotify", "hulu", "disney+", "disney plus", "apple music", "youtube",
            "amazon prime", "hbo", "paramount", "peacock", "audible", "anthropic", "claude",
            "openai", "chatgpt", "adobe", "dropbox", "icloud", "google storage", "microsoft 365",
            "canva", "notion", "github", "gym member", "membership",
        ),
    ),
    (
        "Entertainment",
        (
            "cinema", "movie", "theater", "theatre", "concert", "ticket", "game", "steam",
            "playstation", "xbox", "nintendo", "bowling", "golf", "museum", "zoo",
        ),
    ),
    (
        "Utilities",
        (
            "pg&e", "water", "electric", "energy", "internet", "at&t", "verizon", "t-mobile",
            "comcast", "xfinity", "spectrum", "utility", "utilities", "sewer", "trash", "power",
        ),
    ),
    (
        "Insurance",
        ("insurance", "geico", "state farm", "allstate", "progressive", "usaa", "liberty mutual"),
    ),
    (
        "Healthcare",
        (
            "pharmacy", "cvs", "walgreens", "doctor", "hospital", "medical", "dental", "vision",
            "health", "clinic", "urgent care", "prescription", "therapy",
        ),
    ),
    (
        "Travel",
        (
            "airline", "airlines", "air lines", "airbnb", "hotel", "flight", "marriott", "hilton",
            "hyatt", "booking.com", "expedia", "cruise", "resort", "jetblue",
        ),
    ),
    (
        "Shopping",
        (
            "amazon", "target", "walmart", "ebay", "etsy", "best buy", "apple store", "ikea",
            "home depot", "lowe", "nordstrom", "macy", "tj maxx", "nike", "zara", "online purchase",
        ),
    ),
    (
        "Education",
        ("tuition", "university", "college", "school", "student", "textbook", "udemy", "coursera"),
    ),
    (
        "Personal Care",
        ("salon", "barber", "haircut", "spa ", "nail", "beauty", "sephora", "ulta", "cosmetic"),
    ),
    (
        "Gifts & Donations",
        ("gift", "donation", "charity", "nonprofit", "church", "gofundme", "patreon"),
    ),
)

# Rows that move money between the user's own accounts or settle balances.
NOISE_MERCHANT_PATTERNS: Final[tuple[str, ...]] = (
    r"credit\s*card\s*(payment|pmt|autopay)",
    r"\bautopay\b|\bauto\s*pay\b|\bauto-pay\b",
    r"payment\s*-?\s*thank\s*you|thank\s*you\s*for\s*your\s*payment",
    r"statement\s*credit",
    r"interest\s*(paid|charged?|payment)",
    r"(internal|online|mobile|account)\s*transfer\s*(to|from)",
    r"transfer\s*(to|from)\s*(savings|checking|chk|sav|share|brokerage)",
    r"(to|from)\s*(savings|checking)\s*(acct|account)",
)

# Incoming feed "Transfer" rows that are really earned or returned money.
INCOME_TRANSFER_PATTERNS: Final[tuple[str, ...]] = (
    r"payroll",
    r"direct\s*dep",
    r"\bsalary\b",
    r"\bwages?\b",
    r"paycheck",
    r"\brefund\b",
    r"reimburse",
    r"tax\s*ref",
)

# Outgoing feed "Transfer" rows that pay down a balance elsewhere.
PAYDOWN_PATTERNS: Final[tuple[str, ...]] = (
    r"credit\s*card",
    r"card\s*(payment|pmt)",
    r"loan\s*(payment|pmt)",
    r"loan\s*payments",
    r"pay\s*-?\s*off|payoff",
    r"pay\s*down",
    r"balance\s*(payment|transfer)",
)

# Merchants that are one-off by nature, even when they repeat.
NEVER_RECURRING_PATTERNS: Final[tuple[str, ...]] = (
    r"air\s*lines?|airways|\bairline",
    r"allegiant|southwest|jetblue|spirit\s*air|frontier\s*air",
    r"hotel|marriott|hilton|hyatt|holiday\s*inn|airbnb|vrbo",
    r"expedia|booking\.com|priceline|travelocity|kayak|orbitz",
    r"\busps\b|fedex|\bups\b|\bdhl\b|freight",
    r"clerky|legalzoom|attorney|law\s*office|notary|\bcpa\b",
)

# SaaS, streaming and cloud-infrastructure merchants. These charge cards on
# the exact billing date, weekends included.
SUBSCRIPTION_PATTERNS: Final[tuple[str, ...]] = (
    r"netflix|spotify|hulu|disney\+|hbo|\bmax\b|paramount|peacock|crunchyroll",
    r"apple\s*music|icloud|youtube|amazon\s*prime|audible",
    r"anthropic|openai|adobe|dropbox|canva|notion|microsoft\s*365|office\s*365",
    r"github|digitalocean|supabase|vercel|railway|render|\baws\b|google\s*cloud",
    r"playstation",
)

EVENT_DRIVEN_CATEGORIES: Final[frozenset[str]] = frozenset(
    {"Travel", "Entertainment", "Shopping", "Personal Care", "Gifts & Donations"}
)
