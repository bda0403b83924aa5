"""Evidence pipeline tests (source clients patched at the node module)."""

import asyncio
import os
import sys
from unittest.mock import AsyncMock, patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from market_evidence.errors import EmptyInputError
from market_evidence.pipeline import build_evidence, build_evidence_for_request, evidence_graph, with_timeout
from market_evidence.pipeline.nodes import SCORING_FAILED_NOTE, build_queries
from market_evidence.schemas import (
    EvidenceQueryInput,
    ForumHit,
    QueryError,
    QueryResult,
    SearchError,
    SearchResultItem,
    WebSearchBatch,
)

NODES = "market_evidence.pipeline.nodes"


def _batch_with_items():
    result = QueryResult(
        query="resume screening ats software",
        provider="serper",
        items=[
            SearchResultItem(
                title="Workday Recruiting",
                link="https://www.workday.com/recruiting",
                snippet="Workday applicant tracking for enterprises",
            ),
            SearchResultItem(
                title="Screenly | Resume screening",
                link="https://screenly.io/pricing",
                snippet="resume screening and candidate matching with a free trial",
            ),
        ],
    )
    return WebSearchBatch(configured=True, results=[result])


def _rate_limited_batch(queries):
    error = SearchError(type="rate_limit", status_code=429, message="serper returned HTTP 429")
    results = [QueryResult(query=q, provider="serper", error=error) for q in queries]
    return WebSearchBatch(
        configured=True,
        results=results,
        errors=[QueryError(query=q, error=error) for q in queries],
    )


HITS = [
    ForumHit(title="Ask HN: hiring is broken", url="https://news.ycombinator.com/item?id=1",
             points=40, num_comments=80, created_at="2024-05-01T00:00:00Z", id="1"),
]


def _run(coro):
    return asyncio.run(coro)


def _warning_types(evidence):
    return [w.type for w in evidence.warnings]


# ===================================================================== #
#  Happy path                                                             #
# ===================================================================== #

class TestBuildEvidence:
    def test_merges_all_sources(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=_batch_with_items())) as web, \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=HITS)) as forum:
            evidence = _run(build_evidence("AI resume screening for ATS", ["resume", "screening", "ats"]))

        queries = web.call_args.args[0]
        assert queries[0] == "resume screening ats software"
        forum.assert_awaited_once_with(["resume", "screening", "ats"])

        assert evidence.web.configured is True
        assert [c.domain for c in evidence.competitors] == ["workday.com", "screenly.io"]
        assert evidence.competitor_summary.saturation_signal == "high"
        assert evidence.forum.hits == HITS
        assert [c.source for c in evidence.citations] == ["web", "web", "forum", "web", "web"]
        assert evidence.signals.market_established is True
        assert evidence.warnings == []

    def test_keywords_derived_from_query(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])) as forum:
            _run(build_evidence("AI resume screening for applicant tracking"))

        forum.assert_awaited_once_with(["applicant", "screening", "tracking", "resume"])

    def test_keyword_override_is_normalized(self):
        override = [" Resume ", "resume", "ATS", "one", "two", "three", "four", "five", "six", "seven"]
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])) as forum:
            _run(build_evidence("resume screening", override))

        forum.assert_awaited_once_with(["resume", "ats", "one", "two", "three", "four", "five", "six"])

    def test_request_wrapper(self):
        request = EvidenceQueryInput(query="invoice automation", startup={"name": "Billr"})
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))) as web, \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])):
            _run(build_evidence_for_request(request))

        assert "Billr competitors" in web.call_args.args[0]

    def test_serializes_for_consumer(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=_batch_with_items())), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=HITS)):
            evidence = _run(build_evidence("resume screening", ["resume", "screening"]))

        dumped = evidence.model_dump(mode="json", by_alias=True)
        assert {"web", "forum", "competitors", "competitorSummary", "citations", "signals", "generatedAt"} <= set(dumped)
        assert dumped["competitors"][0]["evidenceSnippets"]


# ===================================================================== #
#  Degraded sources                                                       #
# ===================================================================== #

class TestDegradedSources:
    def test_no_results_anywhere(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])):
            evidence = _run(build_evidence("resume screening ats", ["resume", "screening", "ats"]))

        assert evidence.competitors == []
        assert evidence.signals.competitor_density == 0
        assert evidence.signals.market_established is False
        assert evidence.signals.evidence_coverage == 0
        assert evidence.signals.recency_score == 50
        assert evidence.signals.pain_signal == 0
        assert evidence.signals.overall_score == 35
        assert _warning_types(evidence) == ["no_results"]

    def test_rate_limited_everywhere(self):
        async def rate_limited(queries):
            return _rate_limited_batch(queries)

        with patch(f"{NODES}.search_many", new=rate_limited), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])):
            evidence = _run(build_evidence("resume screening", ["resume", "screening", "ats"]))

        assert evidence.web.configured is True
        assert all(q.items == [] for q in evidence.web.queries)
        assert "rate_limit" in _warning_types(evidence)
        assert "missing_config" not in _warning_types(evidence)
        assert evidence.signals.evidence_coverage == 0

    def test_auth_and_api_errors_reported(self):
        auth = SearchError(type="auth_error", status_code=401)
        api = SearchError(type="api_error", status_code=500)
        batch = WebSearchBatch(
            configured=True,
            results=[QueryResult(query="a", error=auth), QueryResult(query="b", error=api)],
            errors=[QueryError(query="a", error=auth), QueryError(query="b", error=api)],
        )
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=batch)), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])):
            evidence = _run(build_evidence("resume screening", ["resume"]))

        types = _warning_types(evidence)
        assert "auth_error" in types
        assert "api_error" in types

    def test_missing_config(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=False))), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=HITS)):
            evidence = _run(build_evidence("resume screening", ["resume"]))

        assert _warning_types(evidence) == ["missing_config"]
        assert evidence.web.configured is False
        assert evidence.forum.hits == HITS

    def test_forum_timeout_substitutes_empty_hits(self):
        async def slow_forum(keywords):
            await asyncio.sleep(5)
            return HITS

        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))), \
             patch(f"{NODES}.search_forum", new=slow_forum):
            evidence = _run(build_evidence("resume screening", ["resume"], forum_timeout=0.05))

        assert evidence.forum.hits == []
        assert "timeout" in _warning_types(evidence)
        assert evidence.signals.recency_score == 50

    def test_web_timeout_uses_unconfigured_fallback(self):
        async def slow_web(queries):
            await asyncio.sleep(5)
            return _batch_with_items()

        with patch(f"{NODES}.search_many", new=slow_web), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=HITS)):
            evidence = _run(build_evidence("resume screening", ["resume"], web_timeout=0.05))

        assert evidence.web.configured is False
        assert evidence.web.queries == []
        assert _warning_types(evidence) == ["timeout"]
        assert evidence.forum.hits == HITS


# ===================================================================== #
#  Heuristic failures                                                     #
# ===================================================================== #

class TestHeuristicFailures:
    def test_extraction_crash_yields_no_competitors(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=_batch_with_items())), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])), \
             patch(f"{NODES}.extract_competitors", side_effect=RuntimeError("bad regex")):
            evidence = _run(build_evidence("resume screening", ["resume"]))

        assert evidence.competitors == []
        assert "internal_error" in _warning_types(evidence)
        assert evidence.signals.competitor_density == 0

    def test_scoring_crash_yields_empty_signals(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=_batch_with_items())), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])), \
             patch(f"{NODES}.compute_signals", side_effect=ZeroDivisionError("division by zero")):
            evidence = _run(build_evidence("resume screening", ["resume"]))

        assert evidence.signals.overall_score == 0
        assert evidence.signals.notes == [SCORING_FAILED_NOTE]
        assert len(evidence.competitors) == 2
        assert "internal_error" in _warning_types(evidence)

    def test_normalization_crash_keeps_raw_sources(self):
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=_batch_with_items())), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=HITS)), \
             patch(f"{NODES}.normalize_evidence", side_effect=RuntimeError("merge bug")):
            evidence = _run(build_evidence("resume screening", ["resume"]))

        assert evidence.web.configured is True
        assert len(evidence.web.queries[0].items) == 2
        assert evidence.forum.hits == HITS
        assert evidence.competitors == []
        assert evidence.citations == []
        assert evidence.competitor_summary.saturation_signal == "low"
        assert [w.message for w in evidence.warnings] == ["Evidence normalization failed"]
        assert evidence.warnings[0].details == "merge bug"


# ===================================================================== #
#  Input validation                                                       #
# ===================================================================== #

class TestEmptyInput:
    def test_no_keywords_derivable(self):
        with pytest.raises(EmptyInputError) as exc_info:
            _run(build_evidence("a an the of"))
        assert exc_info.value.code == "NO_KEYWORDS"

    def test_blank_keyword_override(self):
        with pytest.raises(EmptyInputError):
            _run(build_evidence("resume screening", ["  ", ""]))

    def test_no_queries_buildable(self):
        state = {"query": "the", "keywords": [], "startup": None, "feature": None}
        with pytest.raises(EmptyInputError) as exc_info:
            _run(build_queries(state))
        assert exc_info.value.code == "NO_QUERIES"


# ===================================================================== #
#  Graph / timeout plumbing                                               #
# ===================================================================== #

class TestGraph:
    def test_records_every_stage(self):
        initial_state = {
            "query": "resume screening",
            "keywords": ["resume"],
            "startup": None,
            "feature": None,
            "web_timeout": 1.0,
            "forum_timeout": 1.0,
            "warnings": [],
            "completed_stages": [],
        }
        with patch(f"{NODES}.search_many", new=AsyncMock(return_value=WebSearchBatch(configured=True))), \
             patch(f"{NODES}.search_forum", new=AsyncMock(return_value=[])):
            final_state = _run(evidence_graph.ainvoke(initial_state))

        stages = final_state["completed_stages"]
        assert stages[0] == "building-queries"
        assert set(stages[1:3]) == {"fetching-web", "fetching-forum"}
        assert stages[3:] == ["extracting", "normalizing", "scoring", "done"]


class TestWithTimeout:
    def test_returns_result_in_time(self):
        async def quick():
            return "done"

        assert _run(with_timeout(quick(), 1.0, "fallback", "quick")) == ("done", False)

    def test_returns_fallback_when_late(self):
        async def slow():
            await asyncio.sleep(5)
            return "late"

        assert _run(with_timeout(slow(), 0.01, "fallback", "slow")) == ("fallback", True)

    def test_propagates_early_errors(self):
        async def broken():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            _run(with_timeout(broken(), 1.0, "fallback", "broken"))
