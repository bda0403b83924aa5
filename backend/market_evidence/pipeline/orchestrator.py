"""Evidence Orchestrator.

Public entry point: derives keywords, runs the evidence graph and returns
the scored ``NormalizedEvidence``.

Rules
-----
- Upstream failures never raise; they arrive as ``warnings``
- ``EmptyInputError`` is the only exception callers must handle
- Nothing is cached or persisted between calls
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import log_runtime_env_diagnostics_once
from ..constants import MAX_KEYWORDS
from ..errors import EmptyInputError
from ..schemas.evidence_schema import NormalizedEvidence
from ..schemas.query_schema import EvidenceQueryInput, FeatureContext, StartupContext
from ..services.http_client import Timeouts
from ..services.keyword_deriver import derive_keywords
from .graph import evidence_graph
from .timing import async_timer

logger = logging.getLogger(__name__)


async def build_evidence(
    query: str,
    keywords: Optional[List[str]] = None,
    *,
    startup: Optional[StartupContext] = None,
    feature: Optional[FeatureContext] = None,
    web_timeout: float = Timeouts.WEB_BATCH,
    forum_timeout: float = Timeouts.FORUM,
) -> NormalizedEvidence:
    """Gather, merge and score market evidence for *query*.

    Parameters
    ----------
    query : str
        Free-text feature description.
    keywords : list[str], optional
        Keyword override; derived from *query* when omitted.
    startup, feature : optional
        Business context for extra targeted queries.
    web_timeout, forum_timeout : float
        Per-source deadlines in seconds.

    Raises
    ------
    EmptyInputError
        When no keywords or no queries can be formed.
    """
    log_runtime_env_diagnostics_once("build_evidence")

    if keywords is not None:
        # Overrides follow the derived-keyword shape: lowercase, unique, at most 8.
        stripped = [k.strip().lower() for k in keywords if k and k.strip()]
        resolved = list(dict.fromkeys(stripped))[:MAX_KEYWORDS]
    else:
        resolved = derive_keywords(query)
    if not resolved:
        raise EmptyInputError("Could not derive keywords from query", code="NO_KEYWORDS")

    initial_state = {
        "query": query,
        "keywords": resolved,
        "startup": startup,
        "feature": feature,
        "web_timeout": web_timeout,
        "forum_timeout": forum_timeout,
        "warnings": [],
        "completed_stages": [],
    }

    async with async_timer("evidence", "PIPELINE"):
        final_state = await evidence_graph.ainvoke(initial_state)

    evidence = NormalizedEvidence.from_unscored(
        final_state["unscored"],
        final_state["signals"],
        final_state.get("warnings", []),
    )

    logger.info(
        "[Evidence] webConfigured=%s webItems=%d forumHits=%d competitors=%d warnings=%d stages=%s",
        evidence.web.configured,
        sum(len(q.items) for q in evidence.web.queries),
        len(evidence.forum.hits),
        len(evidence.competitors),
        len(evidence.warnings),
        ",".join(final_state.get("completed_stages", [])),
    )
    return evidence


async def build_evidence_for_request(request: EvidenceQueryInput) -> NormalizedEvidence:
    """Run ``build_evidence`` for a validated request body."""
    return await build_evidence(
        request.query,
        request.keywords,
        startup=request.startup,
        feature=request.feature,
    )
