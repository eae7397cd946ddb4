"""
Named policy tables for feature extraction and scoring.

Every list here is ordered on purpose: industry inference stops at the
first matching rule, and reasons are emitted in the order rules fire.
Bump CONSTANTS_VERSION whenever a table or tunable changes so exported
training data can be traced back to the policy that produced it.
"""

from __future__ import annotations

CONSTANTS_VERSION = "2024.4"

# ---------------------------------------------------------------------------
# Feature extraction
# ---------------------------------------------------------------------------

DEFAULT_INDUSTRY = "Tech"

# (industry label, keywords) -- checked top to bottom, first hit wins
INDUSTRY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("AI", ("ai", "artificial intelligence", "machine learning", "ml", "deep learning", "llm")),
    ("Fintech", ("fintech", "financial", "banking", "payment", "lending")),
    ("Healthcare", ("health", "healthcare", "medical", "biotech", "bio", "clinical")),
    ("Crypto", ("crypto", "blockchain", "web3", "defi")),
)

HEADLINE_ROLE_SEPARATOR = " at "

# ---------------------------------------------------------------------------
# Lexical embedder
# ---------------------------------------------------------------------------

EMBEDDING_DIM = 100
MIN_TOKEN_LENGTH = 3  # tokens of length <= 2 are dropped

# ---------------------------------------------------------------------------
# Preference store
# ---------------------------------------------------------------------------

PREFERENCE_CATEGORIES = (
    "role",
    "industry",
    "region",
    "company",
    "signal",
    "highlight",
    "affiliation",
)

# categories matched by case-insensitive equality; the rest by tag substring
EXACT_MATCH_CATEGORIES = frozenset({"role", "industry", "region", "company", "signal"})

PREFERENCE_STEP = 0.15
MAX_REASONS_PER_RECORD = 5
MAX_AFFILIATIONS_LEARNED = 3

# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

BASE_SCORE = 50.0
MIN_SCORE = 0
MAX_SCORE = 100

MATCH_THRESHOLD = 0.1
MATCH_GAIN = 20.0

SIMILARITY_FLOOR = 0.4
SIMILARITY_GAIN = 15.0

HIGH_VALUE_SENIORITY = ("Founder", "Co-Founder", "C-Level")
SENIORITY_BONUS = 5.0

# compared after normalisation (lower-case, alphanumerics only)
HIGH_VALUE_SIGNALS = ("New Company", "Spinout")
SIGNAL_BONUS = 10.0

# ---------------------------------------------------------------------------
# Ledger / rewards
# ---------------------------------------------------------------------------

LEDGER_MAX_EVENTS = 500

REWARD_SIGNALS = {
    "LIKE": 1.0,
    "DISLIKE": -1.0,
    "SAVE": 2.0,
    "SKIP": -0.2,
}

# id -> last seen FeatureTuple, oldest dropped first
CATALOG_MAX_ENTITIES = 2000
