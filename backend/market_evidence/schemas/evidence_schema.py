"""Evidence stage records.

Each pipeline stage produces its own fully-typed record:

    RawFetchResult  ->  UnscoredEvidence  ->  NormalizedEvidence

Every required field must be supplied at construction time.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel
from .competitor_schema import Competitor, CompetitorSummary, DisplayCompetitor
from .search_schema import ForumHit, QueryResult, WebSearchBatch
from .signals_schema import CitationSource, Signals

WarningType = Literal[
    "missing_config",
    "rate_limit",
    "auth_error",
    "api_error",
    "no_results",
    "timeout",
    "internal_error",
]


class Citation(CamelModel):
    source: CitationSource
    title: str
    url: str = Field(..., min_length=1)


class EvidenceWarning(CamelModel):
    """User-visible degradation notice attached to the evidence."""

    type: WarningType
    message: str
    details: Optional[str] = None


class WebEvidence(CamelModel):
    configured: bool
    queries: list[QueryResult] = Field(default_factory=list)


class ForumEvidence(CamelModel):
    hits: list[ForumHit] = Field(default_factory=list)


class RawFetchResult(CamelModel):
    """Joined output of the two concurrent source fetches."""

    web: WebSearchBatch
    forum_hits: list[ForumHit]
    web_timed_out: bool = False
    forum_timed_out: bool = False


class UnscoredEvidence(CamelModel):
    """Merged evidence without signals."""

    web: WebEvidence
    forum: ForumEvidence
    competitors: list[Competitor]
    competitor_summary: CompetitorSummary
    citations: list[Citation]
    generated_at: datetime


class NormalizedEvidence(UnscoredEvidence):
    """Root aggregate handed to the downstream verdict generator."""

    signals: Signals
    warnings: list[EvidenceWarning] = Field(default_factory=list)

    @classmethod
    def from_unscored(
        cls,
        unscored: UnscoredEvidence,
        signals: Signals,
        warnings: list[EvidenceWarning],
    ) -> "NormalizedEvidence":
        return cls(
            web=unscored.web,
            forum=unscored.forum,
            competitors=unscored.competitors,
            competitor_summary=unscored.competitor_summary,
            citations=unscored.citations,
            generated_at=unscored.generated_at,
            signals=signals,
            warnings=warnings,
        )


class EvidenceSearchResponse(CamelModel):
    evidence: NormalizedEvidence
    evidence_missing: bool = Field(
        default=False,
        description="True when neither source contributed any data",
    )
    display_competitors: list[DisplayCompetitor] = Field(default_factory=list)
