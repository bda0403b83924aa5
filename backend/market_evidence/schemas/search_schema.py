from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

SearchErrorType = Literal["missing_config", "rate_limit", "auth_error", "api_error"]
WebProvider = Literal["serper", "google_cse"]


class SearchResultItem(CamelModel):
    """One ranked web-search hit."""

    title: str = ""
    snippet: str = ""
    link: str = ""
    display_link: Optional[str] = None


class SearchError(CamelModel):
    """Typed failure of a single provider call."""

    type: SearchErrorType
    status_code: Optional[int] = None
    message: str = ""


class ProviderDiagnostics(CamelModel):
    """Debug data for one provider call, returned with that call's result."""

    provider: WebProvider
    status_code: Optional[int] = None
    duration_ms: float = Field(default=0.0, ge=0.0)
    body_preview: Optional[str] = Field(
        default=None,
        description="First 200 characters of an error response body",
    )


class QueryResult(CamelModel):
    """Result of a single web-search query: items or a typed error."""

    query: str
    items: list[SearchResultItem] = Field(default_factory=list)
    error: Optional[SearchError] = None
    provider: Optional[WebProvider] = None
    diagnostics: list[ProviderDiagnostics] = Field(default_factory=list)


class QueryError(CamelModel):
    query: str
    error: SearchError


class WebSearchBatch(CamelModel):
    """Sequential multi-query fan-out result.

    ``results`` preserves query-submission order.
    """

    configured: bool
    results: list[QueryResult] = Field(default_factory=list)
    errors: list[QueryError] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(len(r.items) for r in self.results)


class ForumHit(CamelModel):
    """A Hacker News story returned by the forum index."""

    title: str = ""
    url: Optional[str] = None
    points: int = 0
    num_comments: int = 0
    created_at: Optional[str] = None
    id: str
