from enum import Enum
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel
from ..constants import (
    CATEGORY_ATS,
    CATEGORY_OTHER,
    CATEGORY_RESUME_OPTIMIZER,
    CATEGORY_SCREENING_MATCHING,
    CATEGORY_VERIFICATION_BACKGROUND,
    EVIDENCE_SNIPPET_CHARS,
    MAX_EVIDENCE_SNIPPETS,
)

Confidence = Literal["high", "med", "low"]
SaturationSignal = Literal["low", "medium", "high"]


class CompetitorCategory(str, Enum):
    ATS = CATEGORY_ATS
    RESUME_OPTIMIZER = CATEGORY_RESUME_OPTIMIZER
    SCREENING_MATCHING = CATEGORY_SCREENING_MATCHING
    VERIFICATION_BACKGROUND = CATEGORY_VERIFICATION_BACKGROUND
    OTHER = CATEGORY_OTHER


class Competitor(CamelModel):
    """A likely competitor extracted from web-search results.

    At most one Competitor exists per ``domain`` in any extraction result.
    """

    name: str
    domain: str
    url: str
    category: CompetitorCategory = CompetitorCategory.OTHER
    overlap_reason: str = ""
    evidence_snippets: list[str] = Field(
        default_factory=list,
        max_length=MAX_EVIDENCE_SNIPPETS,
        description=f"Up to {MAX_EVIDENCE_SNIPPETS} snippets, each <= {EVIDENCE_SNIPPET_CHARS} chars",
    )
    confidence: Confidence = "low"


class CompetitorSummary(CamelModel):
    total_competitors_found: int = Field(..., ge=0)
    top_competitors: list[str] = Field(..., max_length=5)
    saturation_signal: SaturationSignal


class DisplayCompetitor(CamelModel):
    """Display-ready competitor after listicle / aggregator filtering."""

    name: str
    website: str
    description: str
    overlap_summary: str = ""
    category: Optional[CompetitorCategory] = None
    confidence: Optional[Confidence] = None
