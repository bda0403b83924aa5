from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

CitationSource = Literal["web", "forum"]


class CompetitorEvidence(CamelModel):
    name: str
    url: str
    snippet: str = ""


class PainIndicator(CamelModel):
    title: str
    url: str
    snippet: str = ""
    source: CitationSource


class RecentHit(CamelModel):
    title: str
    url: str
    date: str
    comments: Optional[int] = None


class SampleCitation(CamelModel):
    title: str
    url: str
    source: CitationSource


class CompetitorDensityEvidence(CamelModel):
    competitors: list[CompetitorEvidence] = Field(default_factory=list)


class PainSignalEvidence(CamelModel):
    indicators: list[PainIndicator] = Field(default_factory=list)


class RecencyEvidence(CamelModel):
    recent_hits: list[RecentHit] = Field(default_factory=list)
    summary: str = ""


class CoverageCounts(CamelModel):
    web: int = 0
    forum: int = 0
    competitors: int = 0
    pricing_pages: int = 0


class EvidenceCoverageEvidence(CamelModel):
    counts: CoverageCounts = Field(default_factory=CoverageCounts)
    sample_citations: list[SampleCitation] = Field(default_factory=list)


class PerMetricEvidence(CamelModel):
    """Structured backing data for each metric, for inline UI display."""

    competitor_density: CompetitorDensityEvidence = Field(default_factory=CompetitorDensityEvidence)
    pain_signal: PainSignalEvidence = Field(default_factory=PainSignalEvidence)
    recency: RecencyEvidence = Field(default_factory=RecencyEvidence)
    evidence_coverage: EvidenceCoverageEvidence = Field(default_factory=EvidenceCoverageEvidence)


class Signals(CamelModel):
    """Deterministic market signals computed from normalized evidence.

    Every score is an integer on a 0-100 scale.
    """

    competitor_density: int = Field(..., ge=0, le=100)
    recency_score: int = Field(..., ge=0, le=100)
    pain_signal: int = Field(..., ge=0, le=100)
    evidence_coverage: int = Field(..., ge=0, le=100)
    overall_score: int = Field(..., ge=0, le=100)
    market_established: bool
    notes: list[str] = Field(default_factory=list)
    per_metric_evidence: PerMetricEvidence = Field(default_factory=PerMetricEvidence)
