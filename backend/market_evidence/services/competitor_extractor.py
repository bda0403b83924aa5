"""Deterministic Competitor Extractor.

Turns ranked web-search results into a short list of likely competitors.

Pipeline:
  1. Domain filter (product-like / enterprise ATS / product wording)
  2. Likelihood score per item; items below the minimum are dropped
  3. Deduplicate by domain, keeping the highest-scoring item
  4. Classify, name and rank the survivors (enterprise ATS first)

Rules
-----
- NO LLM calls
- NO external API calls
- Every word list comes from ``constants``
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple
from urllib.parse import urlparse

from ..constants import (
    CATEGORY_ATS,
    CATEGORY_KEYWORDS,
    CATEGORY_OTHER,
    CATEGORY_OVERLAP_REASONS,
    CONFIDENCE_HIGH_SCORE,
    CONFIDENCE_MED_SCORE,
    ENTERPRISE_ATS_CATEGORY_BONUS,
    ENTERPRISE_ATS_DOMAINS,
    EVIDENCE_SNIPPET_CHARS,
    GENERIC_PRODUCT_TERMS,
    MAX_COMPETITORS,
    MAX_EVIDENCE_SNIPPETS,
    PRODUCT_INDICATORS,
    SCORE_ENTERPRISE_DOMAIN,
    SCORE_GITHUB_PENALTY,
    SCORE_MIN_COMPETITOR,
    SCORE_PER_CATEGORY_MATCH,
    SCORE_PER_PRODUCT_TERM,
    SCORE_PRODUCT_DOMAIN,
    SCORE_TUTORIAL_PENALTY,
    TUTORIAL_TERMS,
)
from ..schemas.competitor_schema import Competitor, CompetitorCategory, Confidence
from ..schemas.search_schema import QueryResult, SearchResultItem


_TITLE_SEPARATOR_RE = re.compile(r"[-|–—:•]")
_TITLE_PRODUCT_NOUN_RE = re.compile(r"\s*(software|tool|platform|app|solution|ATS).*$", re.IGNORECASE)

_ALL_CATEGORY_KEYWORDS: tuple[str, ...] = tuple(
    kw for keywords in CATEGORY_KEYWORDS.values() for kw in keywords
)


# ===================================================================== #
#  Domain helpers                                                         #
# ===================================================================== #

def extract_domain(url: str) -> str:
    """Hostname without a leading ``www.``, lowercased.

    Falls back to the lowercased input when no hostname can be parsed.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        hostname = None
    if not hostname:
        return url.lower()
    hostname = hostname.lower()
    return hostname[4:] if hostname.startswith("www.") else hostname


def is_enterprise_ats(domain: str) -> bool:
    return any(ats in domain for ats in ENTERPRISE_ATS_DOMAINS)


def is_product_domain(domain: str) -> bool:
    return any(indicator in domain for indicator in PRODUCT_INDICATORS)


def _item_text(item: SearchResultItem) -> str:
    return f"{item.title} {item.snippet}".lower()


def _has_product_wording(text: str) -> bool:
    return any(term in text for term in PRODUCT_INDICATORS) or any(
        kw in text for kw in _ALL_CATEGORY_KEYWORDS
    )


# ===================================================================== #
#  Scoring / classification                                               #
# ===================================================================== #

def compute_competitor_score(item: SearchResultItem, domain: str) -> int:
    """Likelihood that *item* is a competing product, floored at 0."""
    text = _item_text(item)
    score = 0

    if is_enterprise_ats(domain):
        score += SCORE_ENTERPRISE_DOMAIN
    if is_product_domain(domain):
        score += SCORE_PRODUCT_DOMAIN

    for keywords in CATEGORY_KEYWORDS.values():
        score += SCORE_PER_CATEGORY_MATCH * sum(1 for kw in keywords if kw in text)

    score += SCORE_PER_PRODUCT_TERM * sum(1 for term in GENERIC_PRODUCT_TERMS if term in text)

    if any(term in text for term in TUTORIAL_TERMS):
        score -= SCORE_TUTORIAL_PENALTY
    if ("github.com" in text or domain == "github.com") and "enterprise" not in text:
        score -= SCORE_GITHUB_PENALTY

    return max(0, score)


def classify_category(item: SearchResultItem, domain: str) -> CompetitorCategory:
    """Pick the named category with the most keyword hits.

    A tie for first place, or no hits at all, classifies as Other.
    """
    text = _item_text(item)
    counts: Dict[str, int] = {
        category: sum(1 for kw in keywords if kw in text)
        for category, keywords in CATEGORY_KEYWORDS.items()
    }
    if is_enterprise_ats(domain):
        counts[CATEGORY_ATS] += ENTERPRISE_ATS_CATEGORY_BONUS

    top = max(counts.values())
    leaders = [category for category, count in counts.items() if count == top]
    if top <= 0 or len(leaders) > 1:
        return CompetitorCategory(CATEGORY_OTHER)
    return CompetitorCategory(leaders[0])


def determine_confidence(score: int, enterprise: bool) -> Confidence:
    if enterprise or score >= CONFIDENCE_HIGH_SCORE:
        return "high"
    if score >= CONFIDENCE_MED_SCORE:
        return "med"
    return "low"


def extract_company_name(title: str, domain: str) -> str:
    """Company name from the title prefix, else the capitalised domain root."""
    prefix = _TITLE_SEPARATOR_RE.split(title, maxsplit=1)[0]
    name = _TITLE_PRODUCT_NOUN_RE.sub("", prefix).strip()
    if 2 < len(name) < 50:
        return name

    root = domain.split(".")[0]
    return root[:1].upper() + root[1:]


def _evidence_snippets(winner: str, seen: List[str]) -> List[str]:
    snippets: list[str] = []
    for snippet in [winner, *seen]:
        clipped = snippet[:EVIDENCE_SNIPPET_CHARS]
        if clipped and clipped not in snippets:
            snippets.append(clipped)
        if len(snippets) >= MAX_EVIDENCE_SNIPPETS:
            break
    return snippets


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

def extract_competitors(results: List[QueryResult]) -> List[Competitor]:
    """Extract up to 8 ranked, domain-unique competitors from *results*.

    Parameters
    ----------
    results : list[QueryResult]
        Per-query web-search results in submission order.

    Returns
    -------
    list[Competitor]
        Enterprise ATS vendors first, then by descending score.
    """
    best: Dict[str, Tuple[SearchResultItem, int]] = {}
    snippets_by_domain: Dict[str, List[str]] = {}

    for query_result in results:
        for item in query_result.items:
            if not item.link:
                continue
            domain = extract_domain(item.link)

            if not is_product_domain(domain) and not is_enterprise_ats(domain):
                if not _has_product_wording(_item_text(item)):
                    continue

            score = compute_competitor_score(item, domain)
            if score < SCORE_MIN_COMPETITOR:
                continue

            if item.snippet:
                snippets_by_domain.setdefault(domain, []).append(item.snippet)

            existing = best.get(domain)
            if existing is None or score > existing[1]:
                best[domain] = (item, score)

    ranked = sorted(
        best.items(),
        key=lambda entry: (not is_enterprise_ats(entry[0]), -entry[1][1]),
    )

    competitors: list[Competitor] = []
    for domain, (item, score) in ranked[:MAX_COMPETITORS]:
        enterprise = is_enterprise_ats(domain)
        category = classify_category(item, domain)
        competitors.append(Competitor(
            name=extract_company_name(item.title, domain),
            domain=domain,
            url=item.link,
            category=category,
            overlap_reason=CATEGORY_OVERLAP_REASONS[category.value],
            evidence_snippets=_evidence_snippets(item.snippet, snippets_by_domain.get(domain, [])),
            confidence=determine_confidence(score, enterprise),
        ))

    print(f"🏢 [COMPETITORS] {len(best)} unique domains → {len(competitors)} competitors")
    return competitors
