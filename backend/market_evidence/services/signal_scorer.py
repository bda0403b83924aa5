"""Deterministic Signal Scorer.

Converts unscored evidence into 0-100 market signals, explanatory notes
and per-metric backing evidence using fixed formulas.

Rules
-----
- NO API calls
- NO LLMs
- NO randomness: the only clock input is the injectable ``now``
- Every score is clamped to [0, 100] and exposed as an integer
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..constants import (
    HIGH_COMMENT_THRESHOLD,
    HN_ITEM_URL,
    LOW_COVERAGE_THRESHOLD,
    OVERALL_WEIGHT_DENSITY,
    OVERALL_WEIGHT_PAIN,
    OVERALL_WEIGHT_RECENCY,
    PAIN_INDICATORS,
    PRICING_MARKER,
    RECENCY_ENTERPRISE_DEFAULT,
    RECENCY_NEUTRAL_DEFAULT,
    RECENT_DAYS,
    VERY_RECENT_DAYS,
)
from ..schemas.competitor_schema import Competitor
from ..schemas.evidence_schema import ForumEvidence, UnscoredEvidence, WebEvidence
from ..schemas.search_schema import ForumHit, SearchResultItem
from ..schemas.signals_schema import (
    CompetitorDensityEvidence,
    CompetitorEvidence,
    CoverageCounts,
    EvidenceCoverageEvidence,
    PainIndicator,
    PainSignalEvidence,
    PerMetricEvidence,
    RecencyEvidence,
    RecentHit,
    SampleCitation,
    Signals,
)
from .competitor_extractor import is_enterprise_ats

_MAX_METRIC_ITEMS = 3
_MAX_FORUM_PAIN_ITEMS = 2
_MAX_SAMPLE_CITATIONS = 2
_PAIN_SNIPPET_CHARS = 200


# ===================================================================== #
#  Internal helpers                                                       #
# ===================================================================== #

def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp *value* to [lo, hi]."""
    return max(lo, min(hi, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_score(value: float) -> int:
    return int(_clamp(_round_half_up(value)))


def _web_items(web: WebEvidence) -> List[SearchResultItem]:
    return [item for result in web.queries for item in result.items]


def _enterprise_count(competitors: List[Competitor]) -> int:
    return sum(1 for c in competitors if is_enterprise_ats(c.domain))


def _parse_created_at(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are treated as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_pricing_page(item: SearchResultItem) -> bool:
    return PRICING_MARKER in item.link.lower() or PRICING_MARKER in item.title.lower()


def _has_pain_terms(text: str) -> bool:
    lowered = text.lower()
    return any(indicator in lowered for indicator in PAIN_INDICATORS)


# ===================================================================== #
#  Individual metrics                                                     #
# ===================================================================== #

def compute_competitor_density(competitors: List[Competitor]) -> int:
    count = len(competitors)
    if count == 0:
        base = 0
    elif count <= 10:
        base = min(50, count * 5)
    elif count <= 20:
        base = 50 + (count - 10) * 3
    else:
        base = min(100, 80 + (count - 20))

    return min(100, base + 20 * _enterprise_count(competitors))


def compute_market_established(competitors: List[Competitor]) -> bool:
    return len(competitors) >= 3 or _enterprise_count(competitors) > 0


def compute_recency_score(
    forum: ForumEvidence,
    competitors: List[Competitor],
    *,
    now: Optional[datetime] = None,
) -> int:
    """Score how recent the forum discussion is.

    With no stories at all the score falls back to a neutral default,
    slightly higher when an enterprise vendor was found.  Stories with an
    unparseable date count towards the total only.
    """
    hits = forum.hits
    if not hits:
        if _enterprise_count(competitors) > 0:
            return RECENCY_ENTERPRISE_DEFAULT
        return RECENCY_NEUTRAL_DEFAULT

    now = now or datetime.now(timezone.utc)
    very_recent_window = timedelta(days=VERY_RECENT_DAYS)
    recent_window = timedelta(days=RECENT_DAYS)

    very_recent = 0
    recent = 0
    for hit in hits:
        created = _parse_created_at(hit.created_at)
        if created is None:
            continue
        age = now - created
        if age < very_recent_window:
            very_recent += 1
        elif age < recent_window:
            recent += 1

    total = len(hits)
    if very_recent / total > 0.3:
        return 90
    if very_recent / total > 0.1 or recent / total > 0.5:
        return 70
    if recent / total > 0.2:
        return 50
    return 30


def compute_pain_signal(web: WebEvidence, forum: ForumEvidence) -> float:
    """Pain score from web snippet wording plus forum comment activity.

    Each half contributes at most 50.  Returned unrounded so the overall
    score sees the exact value.
    """
    score = 0.0

    snippets = [item.snippet.lower() for item in _web_items(web)]
    if snippets:
        matches = sum(
            1 for snippet in snippets for indicator in PAIN_INDICATORS if indicator in snippet
        )
        score += min(50.0, matches / len(snippets) * 100)

    if forum.hits:
        busy = sum(1 for hit in forum.hits if hit.num_comments > HIGH_COMMENT_THRESHOLD)
        score += min(50.0, busy / len(forum.hits) * 100)

    return min(100.0, score)


def compute_evidence_coverage(
    web: WebEvidence,
    competitors: List[Competitor],
    forum: ForumEvidence,
) -> int:
    score = 0
    items = _web_items(web)

    item_count = len(items)
    if item_count >= 30:
        score += 40
    elif item_count >= 20:
        score += 30
    elif item_count >= 10:
        score += 20
    elif item_count > 0:
        score += 10

    if len(competitors) >= 5:
        score += 40
    elif len(competitors) >= 3:
        score += 30
    elif competitors:
        score += 20

    if any(_is_pricing_page(item) for item in items):
        score += 10

    if len(forum.hits) >= 5:
        score += 10
    elif forum.hits:
        score += 5

    return min(100, score)


def compute_overall_score(
    competitor_density: float,
    recency_score: float,
    pain_signal: float,
    evidence_coverage: float,
) -> int:
    """Coverage-weighted blend of the other metrics.

    Coverage scales every term, so the density term ``(100 - density * w)``
    tends towards 100 (not 0) as coverage drops while pain and recency
    tend towards 0.
    """
    weight = evidence_coverage / 100
    score = (
        (100 - competitor_density * weight) * OVERALL_WEIGHT_DENSITY
        + pain_signal * weight * OVERALL_WEIGHT_PAIN
        + recency_score * weight * OVERALL_WEIGHT_RECENCY
    )
    return _to_score(score)


# ===================================================================== #
#  Notes / per-metric evidence                                            #
# ===================================================================== #

def generate_notes(
    competitor_density: float,
    recency_score: float,
    pain_signal: float,
    evidence_coverage: float,
    market_established: bool,
    competitors: List[Competitor],
    web: WebEvidence,
    forum: ForumEvidence,
) -> List[str]:
    """Ordered, human-readable explanation of the computed signals."""
    notes: list[str] = []
    item_count = len(_web_items(web))
    hit_count = len(forum.hits)
    count = len(competitors)
    enterprise = _enterprise_count(competitors)

    notes.append(f"Analyzed {item_count} web search results and {hit_count} Hacker News stories")
    notes.append(
        f"Found {count} competitor{'' if count == 1 else 's'} "
        f"({enterprise} enterprise ATS{'' if enterprise == 1 else 'es'})"
    )

    if market_established:
        suffix = ", including enterprise ATS platforms" if enterprise > 0 else ""
        notes.append(f"Market is ESTABLISHED: {count} competitors found{suffix}")
    else:
        notes.append(f"Market establishment unclear: {count} competitors found")

    density = _round_half_up(competitor_density)
    if competitor_density > 70:
        notes.append(f"High competitor density ({density}): Found many existing products in this space")
    elif competitor_density > 30:
        notes.append(f"Moderate competitor density ({density}): Some existing solutions detected")
    else:
        notes.append(f"Low competitor density ({density}): Few direct competitors found")

    pain = _round_half_up(pain_signal)
    if pain_signal > 60:
        notes.append(
            f"Strong pain signals ({pain}): Users actively discussing problems related to this feature"
        )
    elif pain_signal > 30:
        notes.append(f"Moderate pain signals ({pain}): Some evidence of user needs")
    else:
        notes.append(f"Weak pain signals ({pain}): Limited evidence of active problem discussion")

    recency = _round_half_up(recency_score)
    if hit_count == 0 and enterprise > 0:
        notes.append(
            "Note: Hacker News may not represent recruiter/HR discussions - "
            "low HN activity is expected for B2B HR tools"
        )
    elif recency_score > 70:
        notes.append(f"Recent activity ({recency}): Current discussions and interest in related topics")
    elif hit_count > 0:
        notes.append(f"Mixed recency ({recency}): Some historical interest, less recent activity")

    coverage = _round_half_up(evidence_coverage)
    if evidence_coverage < LOW_COVERAGE_THRESHOLD:
        notes.append(
            f"⚠️ Low evidence coverage ({coverage}): Limited data - verdict confidence should reflect this"
        )
    else:
        if evidence_coverage >= 70:
            band = "good"
        elif evidence_coverage >= 50:
            band = "moderate"
        else:
            band = "limited"
        notes.append(f"Evidence coverage: {coverage}/100 ({band})")

    return notes


def _forum_url(hit: ForumHit) -> str:
    return hit.url or HN_ITEM_URL.format(id=hit.id)


def build_per_metric_evidence(
    evidence: UnscoredEvidence,
    *,
    now: Optional[datetime] = None,
) -> PerMetricEvidence:
    """Collect the items that back each metric, for inline display."""
    now = now or datetime.now(timezone.utc)
    items = _web_items(evidence.web)
    hits = evidence.forum.hits
    competitors = evidence.competitors

    top_competitors = [
        CompetitorEvidence(
            name=c.name,
            url=c.url,
            snippet=c.evidence_snippets[0] if c.evidence_snippets else "",
        )
        for c in competitors[:_MAX_METRIC_ITEMS]
    ]

    indicators: list[PainIndicator] = []
    for item in items:
        if len(indicators) >= _MAX_METRIC_ITEMS:
            break
        if _has_pain_terms(item.snippet):
            indicators.append(PainIndicator(
                title=item.title,
                url=item.link,
                snippet=item.snippet[:_PAIN_SNIPPET_CHARS],
                source="web",
            ))
    busy_hits = [hit for hit in hits if hit.num_comments > HIGH_COMMENT_THRESHOLD]
    for hit in busy_hits[:_MAX_FORUM_PAIN_ITEMS]:
        indicators.append(PainIndicator(
            title=hit.title,
            url=_forum_url(hit),
            snippet=f"{hit.num_comments} comments - {hit.points} points",
            source="forum",
        ))

    recent_hits = [
        RecentHit(
            title=hit.title,
            url=hit.url,
            date=hit.created_at or "Unknown",
            comments=hit.num_comments,
        )
        for hit in hits[:_MAX_METRIC_ITEMS]
        if hit.url
    ]

    cutoff = now - timedelta(days=RECENT_DAYS)
    recent_count = 0
    for hit in hits:
        created = _parse_created_at(hit.created_at)
        if created is not None and created > cutoff:
            recent_count += 1

    samples = [
        SampleCitation(title=item.title, url=item.link, source="web")
        for item in items[:_MAX_SAMPLE_CITATIONS]
    ]
    samples.extend(
        SampleCitation(title=hit.title, url=hit.url, source="forum")
        for hit in hits[:1]
        if hit.url
    )

    return PerMetricEvidence(
        competitor_density=CompetitorDensityEvidence(competitors=top_competitors),
        pain_signal=PainSignalEvidence(indicators=indicators[:_MAX_METRIC_ITEMS]),
        recency=RecencyEvidence(
            recent_hits=recent_hits,
            summary=f"{recent_count} of {len(hits)} posts in last {RECENT_DAYS} days",
        ),
        evidence_coverage=EvidenceCoverageEvidence(
            counts=CoverageCounts(
                web=len(items),
                forum=len(hits),
                competitors=len(competitors),
                pricing_pages=sum(1 for item in items if _is_pricing_page(item)),
            ),
            sample_citations=samples[:_MAX_SAMPLE_CITATIONS],
        ),
    )


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

def empty_signals(note: str) -> Signals:
    """All-zero signals carrying a single explanatory note."""
    return Signals(
        competitor_density=0,
        recency_score=0,
        pain_signal=0,
        evidence_coverage=0,
        overall_score=0,
        market_established=False,
        notes=[note],
        per_metric_evidence=PerMetricEvidence(),
    )


def compute_signals(evidence: UnscoredEvidence, *, now: Optional[datetime] = None) -> Signals:
    """Compute every market signal from *evidence*.

    Parameters
    ----------
    evidence : UnscoredEvidence
        Merged web / forum / competitor evidence.
    now : datetime, optional
        Reference time for recency; defaults to the current UTC time.

    Returns
    -------
    Signals
        Integer scores in [0, 100] plus notes and per-metric evidence.
    """
    now = now or datetime.now(timezone.utc)
    competitors = evidence.competitors

    competitor_density = compute_competitor_density(competitors)
    market_established = compute_market_established(competitors)
    recency_score = compute_recency_score(evidence.forum, competitors, now=now)
    pain_signal = compute_pain_signal(evidence.web, evidence.forum)
    evidence_coverage = compute_evidence_coverage(evidence.web, competitors, evidence.forum)
    overall_score = compute_overall_score(
        competitor_density, recency_score, pain_signal, evidence_coverage
    )

    notes = generate_notes(
        competitor_density,
        recency_score,
        pain_signal,
        evidence_coverage,
        market_established,
        competitors,
        evidence.web,
        evidence.forum,
    )

    return Signals(
        competitor_density=_to_score(competitor_density),
        recency_score=_to_score(recency_score),
        pain_signal=_to_score(pain_signal),
        evidence_coverage=_to_score(evidence_coverage),
        overall_score=overall_score,
        market_established=market_established,
        notes=notes,
        per_metric_evidence=build_per_metric_evidence(evidence, now=now),
    )
