"""
Evidence Pipeline Nodes

Each node reads what it needs from ``EvidenceState`` and returns a partial
update.  The two fetch nodes run in the same superstep and write disjoint
keys; ``warnings`` and ``completed_stages`` are merged by reducer.

Failure policy:
- Source failures and timeouts become typed fallbacks plus warnings
- Heuristic crashes (extraction / normalization / scoring) become neutral
  data plus an ``internal_error`` warning
- Only an empty query set raises (``EmptyInputError``)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, TypeVar

from ..errors import EmptyInputError, InternalExtractionFailure
from ..schemas.evidence_schema import (
    EvidenceWarning,
    ForumEvidence,
    RawFetchResult,
    UnscoredEvidence,
    WebEvidence,
)
from ..schemas.search_schema import WebSearchBatch
from ..services.competitor_extractor import extract_competitors
from ..services.evidence_normalizer import generate_competitor_summary, normalize_evidence
from ..services.forum_search_client import search_forum
from ..services.http_client import Timeouts
from ..services.query_builder import build_search_queries
from ..services.signal_scorer import compute_signals, empty_signals
from ..services.web_search_client import search_many
from .state import EvidenceState
from .timing import StepTimer, log_timing, with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCORING_FAILED_NOTE = "Signal computation failed - scores unavailable for this run"


# ===================================================================== #
#  Internal helpers                                                       #
# ===================================================================== #

def _run_heuristic(stage: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call *func*, re-raising any crash as ``InternalExtractionFailure``."""
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        raise InternalExtractionFailure(stage, exc) from exc


def _web_warnings(batch: WebSearchBatch) -> List[EvidenceWarning]:
    warnings: list[EvidenceWarning] = []

    if not batch.configured:
        warnings.append(EvidenceWarning(
            type="missing_config",
            message="Web search not configured",
            details="Set SERPER_API_KEY, or GOOGLE_CSE_API_KEY and GOOGLE_CSE_CX, to enable web search results",
        ))

    error_types = [e.error.type for e in batch.errors]
    if "rate_limit" in error_types:
        warnings.append(EvidenceWarning(
            type="rate_limit",
            message="Web search rate limit reached",
            details="Some queries were skipped due to rate limiting",
        ))
    if "auth_error" in error_types:
        warnings.append(EvidenceWarning(
            type="auth_error",
            message="Web search authentication failed",
            details="Check your API key and quota",
        ))
    api_errors = error_types.count("api_error")
    if api_errors:
        warnings.append(EvidenceWarning(
            type="api_error",
            message="Web search provider error",
            details=f"{api_errors} of {len(batch.results)} queries failed",
        ))

    if batch.configured and batch.item_count == 0:
        warnings.append(EvidenceWarning(
            type="no_results",
            message="No web search results found",
            details="Try adjusting search queries or check if queries are too specific",
        ))

    return warnings


def _raw_fetch(state: EvidenceState) -> RawFetchResult:
    """Joined output of both fetch nodes."""
    return RawFetchResult(
        web=state.get("web_batch") or WebSearchBatch(configured=False),
        forum_hits=state.get("forum_hits") or [],
        web_timed_out=state.get("web_timed_out", False),
        forum_timed_out=state.get("forum_timed_out", False),
    )


def _timeout_warning(source: str, seconds: float) -> EvidenceWarning:
    return EvidenceWarning(
        type="timeout",
        message=f"{source} timed out",
        details=f"No response within {seconds:g}s; continuing without it",
    )


# ===================================================================== #
#  Nodes                                                                  #
# ===================================================================== #

async def build_queries(state: EvidenceState) -> Dict[str, Any]:
    """Build the strategic web queries for this run."""
    queries = build_search_queries(
        state["query"],
        state["keywords"],
        state.get("startup"),
        state.get("feature"),
    )
    if not queries:
        raise EmptyInputError("Could not generate search queries from input", code="NO_QUERIES")

    log_timing("build_queries", f"built {len(queries)} queries")
    return {"search_queries": queries, "completed_stages": ["building-queries"]}


async def fetch_web(state: EvidenceState) -> Dict[str, Any]:
    """Run the web-search batch under its deadline."""
    timer = StepTimer("fetch_web")
    seconds = state.get("web_timeout") or Timeouts.WEB_BATCH

    try:
        async with timer.async_step("search_many"):
            batch, timed_out = await with_timeout(
                search_many(state["search_queries"]),
                seconds,
                WebSearchBatch(configured=False),
                "fetch_web",
            )
    except Exception as exc:
        logger.error("Web fetch crashed: %s", exc)
        return {
            "web_batch": WebSearchBatch(configured=False),
            "web_timed_out": False,
            "warnings": [EvidenceWarning(
                type="internal_error",
                message="Web search failed unexpectedly",
                details=str(exc),
            )],
            "completed_stages": ["fetching-web"],
        }

    warnings = [_timeout_warning("Web search", seconds)] if timed_out else _web_warnings(batch)

    print(
        f"🌐 [EVIDENCE] web configured={batch.configured} items={batch.item_count} "
        f"errors={len(batch.errors)} timed_out={timed_out}"
    )
    timer.summary()
    return {
        "web_batch": batch,
        "web_timed_out": timed_out,
        "warnings": warnings,
        "completed_stages": ["fetching-web"],
    }


async def fetch_forum(state: EvidenceState) -> Dict[str, Any]:
    """Fetch Hacker News stories under their deadline."""
    timer = StepTimer("fetch_forum")
    seconds = state.get("forum_timeout") or Timeouts.FORUM
    warnings: list[EvidenceWarning] = []

    try:
        async with timer.async_step("search_forum"):
            hits, timed_out = await with_timeout(
                search_forum(state["keywords"]),
                seconds,
                [],
                "fetch_forum",
            )
    except Exception as exc:
        logger.error("Forum fetch crashed: %s", exc)
        hits, timed_out = [], False
        warnings.append(EvidenceWarning(
            type="internal_error",
            message="Hacker News search failed unexpectedly",
            details=str(exc),
        ))

    if timed_out:
        warnings.append(_timeout_warning("Hacker News search", seconds))

    print(f"🗨️ [EVIDENCE] forum hits={len(hits)} timed_out={timed_out}")
    timer.summary()
    return {
        "forum_hits": hits,
        "forum_timed_out": timed_out,
        "warnings": warnings,
        "completed_stages": ["fetching-forum"],
    }


async def extract_competitors_node(state: EvidenceState) -> Dict[str, Any]:
    """Extract competitors from the joined web results."""
    timer = StepTimer("extract_competitors")
    raw = _raw_fetch(state)

    try:
        with timer.step("extract"):
            competitors = _run_heuristic("competitor extraction", extract_competitors, raw.web.results)
    except InternalExtractionFailure as exc:
        logger.error("%s", exc)
        return {
            "competitors": [],
            "warnings": [EvidenceWarning(
                type="internal_error",
                message="Competitor extraction failed",
                details=str(exc.cause),
            )],
            "completed_stages": ["extracting"],
        }

    return {"competitors": competitors, "completed_stages": ["extracting"]}


async def normalize(state: EvidenceState) -> Dict[str, Any]:
    """Merge every source into the unscored evidence record.

    A merge crash keeps the raw source data but drops competitors and
    citations.
    """
    raw = _raw_fetch(state)

    try:
        unscored = _run_heuristic(
            "evidence normalization",
            normalize_evidence,
            raw.web.results,
            raw.forum_hits,
            state.get("competitors") or [],
            configured=raw.web.configured,
        )
    except InternalExtractionFailure as exc:
        logger.error("%s", exc)
        unscored = UnscoredEvidence(
            web=WebEvidence(configured=raw.web.configured, queries=raw.web.results),
            forum=ForumEvidence(hits=raw.forum_hits),
            competitors=[],
            competitor_summary=generate_competitor_summary([]),
            citations=[],
            generated_at=datetime.now(timezone.utc),
        )
        return {
            "unscored": unscored,
            "warnings": [EvidenceWarning(
                type="internal_error",
                message="Evidence normalization failed",
                details=str(exc.cause),
            )],
            "completed_stages": ["normalizing"],
        }

    return {"unscored": unscored, "completed_stages": ["normalizing"]}


async def score(state: EvidenceState) -> Dict[str, Any]:
    """Compute market signals; a crash yields zeroed signals."""
    timer = StepTimer("score")

    try:
        with timer.step("compute_signals"):
            signals = _run_heuristic("signal scoring", compute_signals, state["unscored"])
    except InternalExtractionFailure as exc:
        logger.error("%s", exc)
        return {
            "signals": empty_signals(SCORING_FAILED_NOTE),
            "warnings": [EvidenceWarning(
                type="internal_error",
                message="Signal scoring failed",
                details=str(exc.cause),
            )],
            "completed_stages": ["scoring", "done"],
        }

    print(
        f"📊 [EVIDENCE] Signals: competitorDensity={signals.competitor_density}, "
        f"evidenceCoverage={signals.evidence_coverage}, marketEstablished={signals.market_established}"
    )
    return {"signals": signals, "completed_stages": ["scoring", "done"]}
