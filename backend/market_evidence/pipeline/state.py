import operator
from typing import Annotated, Optional, TypedDict

from ..schemas.competitor_schema import Competitor
from ..schemas.evidence_schema import EvidenceWarning, UnscoredEvidence
from ..schemas.query_schema import FeatureContext, StartupContext
from ..schemas.search_schema import ForumHit, WebSearchBatch
from ..schemas.signals_schema import Signals


class EvidenceState(TypedDict):
    # Input
    query: str
    keywords: list[str]
    startup: Optional[StartupContext]
    feature: Optional[FeatureContext]
    web_timeout: float
    forum_timeout: float

    # building-queries
    search_queries: list[str]

    # fetching (parallel nodes; each writes only its own keys)
    web_batch: Optional[WebSearchBatch]
    web_timed_out: bool
    forum_hits: list[ForumHit]
    forum_timed_out: bool

    # extracting / normalizing / scoring
    competitors: list[Competitor]
    unscored: Optional[UnscoredEvidence]
    signals: Optional[Signals]

    # Metadata (appended to by every node, including the parallel pair)
    warnings: Annotated[list[EvidenceWarning], operator.add]
    completed_stages: Annotated[list[str], operator.add]
