from typing import Optional

from pydantic import Field

from .base import CamelModel


class StartupContext(CamelModel):
    """Optional business context about the startup behind the feature."""

    name: Optional[str] = None
    target_audience: Optional[str] = None
    problem_solved: Optional[str] = None
    website_url: Optional[str] = None


class FeatureContext(CamelModel):
    """Optional context about the feature being evaluated."""

    title: Optional[str] = None
    description: Optional[str] = None
    problem_solved: Optional[str] = None
    target_audience: Optional[str] = None


class EvidenceQueryInput(CamelModel):
    """Request body for an evidence search."""

    query: str = Field(
        ...,
        min_length=1,
        description="Short description of the product feature to research",
        examples=["AI resume screening for applicant tracking"],
    )
    keywords: Optional[list[str]] = Field(
        default=None,
        description="Keyword override; derived from the query when omitted",
    )
    startup: Optional[StartupContext] = None
    feature: Optional[FeatureContext] = None
