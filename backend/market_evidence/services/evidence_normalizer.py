"""Evidence Normalizer.

Pure merge of the fetched sources and extracted competitors into the
unscored evidence record.  Signals are computed separately by the signal
scorer so this shape can be built and checked on its own.

Rules
-----
- NO external API calls
- NO scoring
- Every citation carries a non-empty URL
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from ..constants import (
    MAX_COMPETITOR_CITATIONS,
    MAX_FORUM_CITATIONS,
    MAX_WEB_CITATIONS,
)
from ..schemas.competitor_schema import Competitor, CompetitorSummary
from ..schemas.evidence_schema import (
    Citation,
    ForumEvidence,
    UnscoredEvidence,
    WebEvidence,
)
from ..schemas.search_schema import ForumHit, QueryResult
from .competitor_extractor import is_enterprise_ats

_TOP_COMPETITOR_NAMES = 5


def generate_competitor_summary(competitors: List[Competitor]) -> CompetitorSummary:
    """Summarise how crowded the market looks.

    ``high`` with 5+ competitors or any enterprise ATS vendor, ``medium``
    with 3+, otherwise ``low``.
    """
    total = len(competitors)
    enterprise_count = sum(1 for c in competitors if is_enterprise_ats(c.domain))

    if total >= 5 or enterprise_count > 0:
        saturation = "high"
    elif total >= 3:
        saturation = "medium"
    else:
        saturation = "low"

    return CompetitorSummary(
        total_competitors_found=total,
        top_competitors=[c.name for c in competitors[:_TOP_COMPETITOR_NAMES]],
        saturation_signal=saturation,
    )


def build_citations(
    web_results: List[QueryResult],
    forum_hits: List[ForumHit],
    competitors: List[Competitor],
) -> List[Citation]:
    """Top web items, then forum stories, then competitor homepages."""
    citations: list[Citation] = []

    web_items = [item for result in web_results for item in result.items]
    for item in web_items[:MAX_WEB_CITATIONS]:
        if item.link:
            citations.append(Citation(source="web", title=item.title, url=item.link))

    for hit in forum_hits[:MAX_FORUM_CITATIONS]:
        if hit.url:
            citations.append(Citation(source="forum", title=hit.title, url=hit.url))

    for competitor in competitors[:MAX_COMPETITOR_CITATIONS]:
        if competitor.url:
            citations.append(Citation(source="web", title=competitor.name, url=competitor.url))

    return citations


def normalize_evidence(
    web_results: List[QueryResult],
    forum_hits: List[ForumHit],
    competitors: List[Competitor],
    *,
    configured: bool,
    now: Optional[datetime] = None,
) -> UnscoredEvidence:
    """Merge all sources into an ``UnscoredEvidence`` record.

    Parameters
    ----------
    web_results : list[QueryResult]
        Per-query web results in submission order.
    forum_hits : list[ForumHit]
        Forum stories in provider order.
    competitors : list[Competitor]
        Output of the competitor extractor.
    configured : bool
        Whether any web provider was reachable with credentials.
    now : datetime, optional
        Generation timestamp; defaults to the current UTC time.
    """
    return UnscoredEvidence(
        web=WebEvidence(configured=configured, queries=web_results),
        forum=ForumEvidence(hits=forum_hits),
        competitors=competitors,
        competitor_summary=generate_competitor_summary(competitors),
        citations=build_citations(web_results, forum_hits, competitors),
        generated_at=now or datetime.now(timezone.utc),
    )
