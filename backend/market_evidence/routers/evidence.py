"""
Evidence Router with Timing Instrumentation

Handles the /evidence endpoints: a full evidence search and a
credential-presence probe for the web-search providers.
"""

import time
from fastapi import APIRouter, HTTPException, status

from ..config import get_search_env
from ..errors import EmptyInputError
from ..pipeline import build_evidence_for_request
from ..schemas import EvidenceQueryInput, EvidenceSearchResponse
from ..services.competitor_cleaner import filter_competitors, normalize_competitors


router = APIRouter(
    prefix="/evidence",
    tags=["Evidence"],
    responses={
        400: {"description": "No keywords or queries could be derived from the input"},
        500: {"description": "Internal server error during evidence search"},
    }
)


@router.post(
    "/search",
    response_model=EvidenceSearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Search Market Evidence",
    response_description="Normalized evidence with citations, competitors, signals and warnings"
)
async def search_evidence(request: EvidenceQueryInput) -> EvidenceSearchResponse:
    """
    Gather web and forum evidence for a feature and score it.

    Upstream failures never fail the request: they are reported in
    ``evidence.warnings``.
    """
    start_time = time.perf_counter()
    print("[TIMING] evidence_endpoint: START")

    try:
        evidence = await build_evidence_for_request(request)
    except EmptyInputError as e:
        print(f"[TIMING] evidence_endpoint: REJECTED — {e.code}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": e.code, "message": str(e)},
        )

    web_items = sum(len(q.items) for q in evidence.web.queries)
    response = EvidenceSearchResponse(
        evidence=evidence,
        evidence_missing=web_items == 0 and not evidence.forum.hits,
        display_competitors=normalize_competitors(filter_competitors(evidence.competitors)),
    )

    total_duration = (time.perf_counter() - start_time) * 1000
    print(f"[TIMING] evidence_endpoint: END — duration={total_duration:.0f}ms")
    return response


@router.get(
    "/sources",
    summary="Evidence Source Configuration",
    description="Report which evidence sources have credentials (booleans only)",
)
async def evidence_sources():
    """Credential presence per provider; never returns secret values."""
    env = get_search_env()
    return {
        "serper": env.serper_configured,
        "googleCse": env.google_cse_configured,
        "hackerNews": True,
        "webConfigured": env.configured,
    }


@router.get(
    "/health",
    summary="Health Check",
    description="Check if the evidence service is running",
    response_description="Health status"
)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "healthy", "service": "market-evidence"}
