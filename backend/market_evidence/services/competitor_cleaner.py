"""Competitor cleaning for display.

Pipeline:
  1. Drop invalid entries (no name / no website / no description)
  2. Drop listicles, directories, reviews and content aggregators
  3. Reshape survivors into ``DisplayCompetitor`` records
"""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urlparse

from ..constants import CONTENT_AGGREGATOR_DOMAINS, NON_COMPETITOR_PATTERNS
from ..schemas.competitor_schema import Competitor, DisplayCompetitor

_NON_COMPETITOR_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE) for pattern in NON_COMPETITOR_PATTERNS
)

_DEFAULT_DESCRIPTION = "Competitor in your market space."


# ===================================================================== #
#  Step 1 — Extract domain                                                #
# ===================================================================== #

def _clean_domain(url_or_domain: str) -> str:
    value = url_or_domain.strip().lower()
    if "://" in value or value.startswith("www."):
        try:
            hostname = urlparse(value if "://" in value else f"https://{value}").hostname
        except ValueError:
            hostname = None
        if hostname:
            value = hostname
    return value[4:] if value.startswith("www.") else value


# ===================================================================== #
#  Step 2 — Hard filter                                                   #
# ===================================================================== #

def _is_valid(competitor: Competitor) -> bool:
    if not competitor.name.strip():
        return False
    if not (competitor.domain or competitor.url):
        return False
    return bool(competitor.overlap_reason.strip())


def _is_non_competitor(competitor: Competitor) -> bool:
    text = f"{competitor.name} {competitor.overlap_reason}"
    if any(pattern.search(text) for pattern in _NON_COMPETITOR_RES):
        return True

    domain = _clean_domain(competitor.domain or competitor.url)
    # Exact host or subdomain; "x.com" must not match "dropbox.com".
    return any(
        domain == aggregator or domain.endswith(f".{aggregator}")
        for aggregator in CONTENT_AGGREGATOR_DOMAINS
    )


def filter_competitors(competitors: List[Competitor]) -> List[Competitor]:
    """Keep only entries that look like real competing products."""
    survivors = [c for c in competitors if _is_valid(c) and not _is_non_competitor(c)]
    print(f"🔍 [CLEANER] Display filter: {len(competitors)} → {len(survivors)} competitors")
    return survivors


# ===================================================================== #
#  Step 3 — Display shape                                                 #
# ===================================================================== #

def _normalize_competitor(competitor: Competitor) -> DisplayCompetitor:
    website = competitor.url or (f"https://{competitor.domain}" if competitor.domain else "")
    overlap = competitor.overlap_reason.strip()
    return DisplayCompetitor(
        name=competitor.name.strip(),
        website=website,
        description=overlap or _DEFAULT_DESCRIPTION,
        overlap_summary=overlap,
        category=competitor.category,
        confidence=competitor.confidence,
    )


def normalize_competitors(competitors: List[Competitor]) -> List[DisplayCompetitor]:
    return [_normalize_competitor(c) for c in competitors]
