# Schemas package
from .query_schema import EvidenceQueryInput, FeatureContext, StartupContext
from .search_schema import (
    ForumHit,
    ProviderDiagnostics,
    QueryError,
    QueryResult,
    SearchError,
    SearchResultItem,
    WebSearchBatch,
)
from .competitor_schema import (
    Competitor,
    CompetitorCategory,
    CompetitorSummary,
    DisplayCompetitor,
)
from .signals_schema import PerMetricEvidence, Signals
from .evidence_schema import (
    Citation,
    EvidenceSearchResponse,
    EvidenceWarning,
    ForumEvidence,
    NormalizedEvidence,
    RawFetchResult,
    UnscoredEvidence,
    WebEvidence,
)

__all__ = [
    "EvidenceQueryInput",
    "StartupContext",
    "FeatureContext",
    "SearchResultItem",
    "SearchError",
    "ProviderDiagnostics",
    "QueryResult",
    "QueryError",
    "WebSearchBatch",
    "ForumHit",
    "Competitor",
    "CompetitorCategory",
    "CompetitorSummary",
    "DisplayCompetitor",
    "Signals",
    "PerMetricEvidence",
    "Citation",
    "EvidenceWarning",
    "WebEvidence",
    "ForumEvidence",
    "RawFetchResult",
    "UnscoredEvidence",
    "NormalizedEvidence",
    "EvidenceSearchResponse",
]
