"""Centralized heuristic vocabularies shared across the evidence pipeline.

This module is the SINGLE SOURCE OF TRUTH for every word list and domain
list that drives keyword derivation, query building, competitor extraction
and signal scoring.  Reused by:
  - Keyword Deriver / Query Builder
  - Competitor Extractor / Competitor Cleaner
  - Signal Scorer

Tables are immutable (frozenset / tuple) so classification behaviour can be
tuned and tested here without touching the code that consumes them.
"""

from __future__ import annotations

VOCABULARY_VERSION = "2024.1"

# ── Keyword derivation ──────────────────────────────────────────────────
# Dropped from free text before keywords are ranked.
KEYWORD_STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "this", "but", "they", "have",
    "had", "what", "said", "each", "which", "their", "time", "if",
    "up", "out", "many", "then", "them", "these", "so", "some", "her",
    "would", "make", "like", "into", "him", "two", "more",
    "very", "after", "words", "long", "than", "first", "been", "call",
    "who", "oil", "sit", "now", "find", "down", "day", "did", "get",
    "come", "made", "may", "part",
})

MAX_KEYWORDS = 8

# ── Query building ──────────────────────────────────────────────────────
# Presence of any of these in the query/keywords switches the builder to
# recruiting-specific query variants.
JOB_DOMAIN_TERMS: tuple[str, ...] = (
    "resume", "cv", "ats", "applicant", "recruiting", "hiring", "job", "career",
    "candidate", "employment", "background check", "verification", "screening",
    "talent", "recruiter", "hr", "human resources",
)

# Context values that mean "not provided".
UNKNOWN_CONTEXT_VALUE = "unknown"

MAX_QUERY_KEYWORDS = 5
MAX_SEARCH_QUERIES = 8

# ── Competitor extraction ───────────────────────────────────────────────
# Substring-matched against the result domain.
ENTERPRISE_ATS_DOMAINS: tuple[str, ...] = (
    "workday", "icims", "greenhouse", "lever", "smartrecruiters",
    "jobvite", "taleo", "cornerstone", "peoplefluent", "successfactors",
    "adp", "ultipro", "bamboohr", "zenefits",
)

# Substring-matched against the domain (and the text, for the
# "allow anyway" rule).
PRODUCT_INDICATORS: tuple[str, ...] = (
    "app", "software", "saas", "pricing", "product", "solutions", "platform", "tools",
)

# Category → lowercase keyword phrases.  Order matters: it is the
# category order used when reporting and classifying.
CATEGORY_ATS = "ATS"
CATEGORY_RESUME_OPTIMIZER = "Resume Optimizer"
CATEGORY_SCREENING_MATCHING = "Screening/Matching"
CATEGORY_VERIFICATION_BACKGROUND = "Verification/Background"
CATEGORY_OTHER = "Other"

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    CATEGORY_ATS: (
        "ats", "applicant tracking", "talent acquisition", "recruiting software",
        "hiring platform", "talent management",
    ),
    CATEGORY_RESUME_OPTIMIZER: (
        "resume optimization", "ats keyword", "resume checker", "resume analyzer",
        "resume builder", "resume scanner",
    ),
    CATEGORY_SCREENING_MATCHING: (
        "resume screening", "candidate matching", "resume parsing", "skill matching",
        "screening tool", "matching algorithm",
    ),
    CATEGORY_VERIFICATION_BACKGROUND: (
        "background check", "employment verification", "identity verification",
        "candidate verification", "credential check",
    ),
}

CATEGORY_OVERLAP_REASONS: dict[str, str] = {
    CATEGORY_ATS: "ATS platform that handles resume parsing and candidate tracking",
    CATEGORY_RESUME_OPTIMIZER: "Resume optimization tool that helps candidates improve ATS compatibility",
    CATEGORY_SCREENING_MATCHING: "Automated screening and matching solution for candidate evaluation",
    CATEGORY_VERIFICATION_BACKGROUND: "Background check and employment verification service",
    CATEGORY_OTHER: "Related solution in the hiring/recruitment space",
}

# +5 each when present in title + snippet.
GENERIC_PRODUCT_TERMS: tuple[str, ...] = (
    "pricing", "free trial", "demo", "features", "integrations", "api",
)

TUTORIAL_TERMS: tuple[str, ...] = ("how to build", "tutorial")

# Score weights
SCORE_ENTERPRISE_DOMAIN = 50
SCORE_PRODUCT_DOMAIN = 20
SCORE_PER_CATEGORY_MATCH = 10
SCORE_PER_PRODUCT_TERM = 5
SCORE_TUTORIAL_PENALTY = 10
SCORE_GITHUB_PENALTY = 5
SCORE_MIN_COMPETITOR = 10
ENTERPRISE_ATS_CATEGORY_BONUS = 5

CONFIDENCE_HIGH_SCORE = 40
CONFIDENCE_MED_SCORE = 20

MAX_COMPETITORS = 8
MAX_EVIDENCE_SNIPPETS = 3
EVIDENCE_SNIPPET_CHARS = 150

# ── Competitor cleaning (display) ───────────────────────────────────────
# Regex patterns (case-insensitive) that mark listicles / directories.
NON_COMPETITOR_PATTERNS: tuple[str, ...] = (
    r"\b(best|top|list)\b",
    r"\b(tools|directory|directories)\b",
    r"\b(blog|guide|tutorial)\b",
    r"\b(forum|discussion|community)\b",
    r"\b(comparison|compare|vs)\b",
    r"\b(review|reviews)\b",
    r"\b(roundup|collection)\b",
    r"\b(\d+\s+(best|top|tools))\b",
)

CONTENT_AGGREGATOR_DOMAINS: frozenset[str] = frozenset({
    "medium.com", "reddit.com", "quora.com", "sendpulse.com", "dev.to",
    "hashnode.com", "substack.com", "wordpress.com", "blogger.com",
    "tumblr.com", "producthunt.com", "hackernews.com", "news.ycombinator.com",
    "linkedin.com", "facebook.com", "twitter.com", "x.com", "instagram.com",
    "youtube.com", "capterra.com", "g2.com", "trustpilot.com", "getapp.com",
    "softwareadvice.com",
})

# ── Signal scoring ──────────────────────────────────────────────────────
PAIN_INDICATORS: tuple[str, ...] = (
    "how to", "struggling", "problem", "issue", "pain", "manual", "annoying",
    "need", "difficult", "challenge", "frustrating", "boring", "tedious",
    "error", "bug", "broken", "missing", "lack", "wish", "want",
)

PRICING_MARKER = "pricing"

HIGH_COMMENT_THRESHOLD = 10
VERY_RECENT_DAYS = 30
RECENT_DAYS = 90

# Recency when the forum returned nothing.  Forum silence is expected for
# enterprise / B2B tools, so finding an enterprise competitor lifts the
# neutral default slightly.
RECENCY_ENTERPRISE_DEFAULT = 60
RECENCY_NEUTRAL_DEFAULT = 50

# Overall score weights (sum to 1.0)
OVERALL_WEIGHT_DENSITY = 0.35
OVERALL_WEIGHT_PAIN = 0.40
OVERALL_WEIGHT_RECENCY = 0.25

LOW_COVERAGE_THRESHOLD = 30

# ── Citations ───────────────────────────────────────────────────────────
MAX_WEB_CITATIONS = 5
MAX_FORUM_CITATIONS = 3
MAX_COMPETITOR_CITATIONS = 3

HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
