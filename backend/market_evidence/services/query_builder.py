"""Deterministic Search Query Builder.

Converts keywords (plus optional startup / feature context) into a bounded,
deduplicated list of strategic web-search queries for competitor discovery.

Rules
-----
- NO LLM calls
- NO randomness
- NO external API calls
- Pure transformation: same input → same, identically ordered output
"""

from __future__ import annotations

from typing import List, Optional

from ..constants import (
    JOB_DOMAIN_TERMS,
    MAX_QUERY_KEYWORDS,
    MAX_SEARCH_QUERIES,
    UNKNOWN_CONTEXT_VALUE,
)
from ..schemas.query_schema import FeatureContext, StartupContext
from .keyword_deriver import derive_keywords


# ===================================================================== #
#  Internal helpers                                                       #
# ===================================================================== #

def _dedupe(items: List[str]) -> List[str]:
    """Return *items* with exact duplicates removed, preserving order."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _known(value: Optional[str]) -> Optional[str]:
    """Return *value* unless it is empty or the literal 'unknown'."""
    if not value or value == UNKNOWN_CONTEXT_VALUE:
        return None
    return value


def _problem_phrase(text: str) -> str:
    return " ".join(derive_keywords(text)[:3])


def is_job_related(query: str, keywords: List[str]) -> bool:
    """Return True if the query/keywords mention recruiting or HR terms."""
    combined = f"{query} {' '.join(keywords)}".lower()
    return any(term in combined for term in JOB_DOMAIN_TERMS)


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

def build_search_queries(
    query: str,
    keywords: Optional[List[str]] = None,
    startup: Optional[StartupContext] = None,
    feature: Optional[FeatureContext] = None,
) -> List[str]:
    """Build up to 8 unique strategic search queries.

    Context variants only fill the slots left after the baseline,
    domain and discovery queries.

    Parameters
    ----------
    query:
        The free-text feature description.
    keywords:
        Keyword override.  Derived from *query* when ``None``.
    startup, feature:
        Optional business context used for extra targeted queries.

    Returns
    -------
    list[str]
        Empty when no keyword string can be formed.
    """
    if keywords is None:
        keywords = derive_keywords(query)
    kw = " ".join(keywords[:MAX_QUERY_KEYWORDS]).strip()
    if not kw:
        return []

    job_domain = is_job_related(query, keywords)
    startup = startup or StartupContext()
    feature = feature or FeatureContext()

    queries: list[str] = []

    # ------------------------------------------------------------------ #
    #  1. Core product searches (always)                                  #
    # ------------------------------------------------------------------ #
    queries.append(f"{kw} software")
    queries.append(f"{kw} tool")
    queries.append(f"{kw} pricing")
    queries.append(f"{kw} alternatives")

    # ------------------------------------------------------------------ #
    #  2. Domain-specific variants                                        #
    # ------------------------------------------------------------------ #
    if job_domain:
        queries.append(f"{kw} ATS")
        queries.append(f"{kw} for recruiters")
    else:
        queries.append(f"{kw} platform")

    # ------------------------------------------------------------------ #
    #  3. Discovery intent                                                #
    # ------------------------------------------------------------------ #
    queries.append(f"best {kw} tools")
    queries.append(f"top {kw} software")

    # ------------------------------------------------------------------ #
    #  4. Startup / feature context                                       #
    # ------------------------------------------------------------------ #
    startup_name = _known(startup.name)
    if startup_name:
        queries.append(f"{startup_name} competitors")
        queries.append(f"alternatives to {startup_name}")

    startup_audience = _known(startup.target_audience)
    if startup_audience:
        queries.append(f"{kw} for {startup_audience}")

    startup_problem = _known(startup.problem_solved)
    if startup_problem:
        phrase = _problem_phrase(startup_problem)
        if phrase:
            queries.append(f"{phrase} solution")

    if feature.title:
        queries.append(f"{feature.title} alternatives")

    feature_audience = _known(feature.target_audience)
    if feature_audience:
        queries.append(f"{kw} {feature_audience}")

    feature_problem = _known(feature.problem_solved)
    if feature_problem:
        phrase = _problem_phrase(feature_problem)
        if phrase:
            queries.append(f"{phrase} tool")

    # ------------------------------------------------------------------ #
    #  5. Recruiting sub-category discovery                               #
    # ------------------------------------------------------------------ #
    if job_domain:
        if any("resume" in k or "cv" in k for k in keywords):
            queries.append("ATS resume parsing software")
            queries.append("resume screening automation tool")
        if any("verif" in k or "background" in k for k in keywords):
            queries.append("employment verification API background check")
            queries.append("identity verification service")

    # ------------------------------------------------------------------ #
    #  6. Buyer intent                                                    #
    # ------------------------------------------------------------------ #
    if job_domain:
        queries.append(f"{kw} for hiring teams")
    else:
        queries.append(f"{kw} enterprise solution")

    return _dedupe(queries)[:MAX_SEARCH_QUERIES]
