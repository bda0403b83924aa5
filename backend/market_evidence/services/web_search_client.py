"""Web Search Client.

Queries a web-search provider for each strategic query and returns typed
results.  Serper.dev is the primary provider; Google Custom Search is used
only when Serper has no credentials.

Rules
-----
- NEVER raises: every transport / HTTP / parse failure becomes a
  ``SearchError`` on the returned ``QueryResult``
- NO retries (a failure degrades to an empty result)
- Sequential multi-query fan-out with a small inter-call delay
- Diagnostics travel with each result, never in module state
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from ..config import (
    GOOGLE_CSE_API_KEY_ENV,
    GOOGLE_CSE_CX_ENV,
    SERPER_API_KEY_ENV,
    get_search_env,
)
from ..schemas.search_schema import (
    ProviderDiagnostics,
    QueryError,
    QueryResult,
    SearchError,
    SearchResultItem,
    WebSearchBatch,
)
from .http_client import (
    INTER_QUERY_DELAY,
    RESULTS_PER_QUERY,
    classify_status,
    client_session,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Provider endpoints
# ---------------------------------------------------------------------------
_SERPER_API_URL = "https://google.serper.dev/search"
_GOOGLE_CSE_API_URL = "https://www.googleapis.com/customsearch/v1"

_BODY_PREVIEW_CHARS = 200


# ===================================================================== #
#  Internal helpers                                                       #
# ===================================================================== #

def _get_serper_key() -> str:
    """Read the Serper.dev API key from the environment."""
    key = os.getenv(SERPER_API_KEY_ENV, "").strip()
    if not key:
        raise EnvironmentError(f"{SERPER_API_KEY_ENV} environment variable not set")
    return key


def _get_google_cse_credentials() -> tuple[str, str]:
    """Read the Google CSE API key and engine id from the environment."""
    key = os.getenv(GOOGLE_CSE_API_KEY_ENV, "").strip()
    cx = os.getenv(GOOGLE_CSE_CX_ENV, "").strip()
    if not key or not cx:
        raise EnvironmentError(
            f"{GOOGLE_CSE_API_KEY_ENV} and {GOOGLE_CSE_CX_ENV} must be set to use Google CSE"
        )
    return key, cx


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)


def _to_item(raw: Dict[str, Any]) -> SearchResultItem:
    return SearchResultItem(
        title=str(raw.get("title") or ""),
        snippet=str(raw.get("snippet") or ""),
        link=str(raw.get("link") or ""),
        display_link=raw.get("displayLink") or None,
    )


def _error_result(
    query: str,
    provider: str,
    error_type: str,
    message: str,
    status_code: Optional[int] = None,
    diagnostics: Optional[ProviderDiagnostics] = None,
) -> QueryResult:
    return QueryResult(
        query=query,
        items=[],
        error=SearchError(type=error_type, status_code=status_code, message=message),
        provider=provider,
        diagnostics=[diagnostics] if diagnostics else [],
    )


async def _send(
    query: str,
    provider: str,
    request: Awaitable[httpx.Response],
    parse_items: Callable[[Dict[str, Any]], List[SearchResultItem]],
) -> QueryResult:
    """Await *request* and translate the response into a ``QueryResult``."""
    start = time.perf_counter()
    try:
        response = await request
    except httpx.HTTPError as exc:
        diag = ProviderDiagnostics(provider=provider, duration_ms=_elapsed_ms(start))
        logger.warning("%s transport error for query=%r: %s", provider, query, exc)
        return _error_result(query, provider, "api_error", f"Transport error: {exc}", diagnostics=diag)

    status_code = response.status_code
    diag = ProviderDiagnostics(
        provider=provider,
        status_code=status_code,
        duration_ms=_elapsed_ms(start),
    )

    error_type = classify_status(status_code)
    if error_type is not None:
        diag.body_preview = response.text[:_BODY_PREVIEW_CHARS]
        print(f"⚠️ [WEB] {provider} HTTP {status_code} ({error_type}) for query={query!r}")
        logger.warning("%s HTTP %d for query=%r", provider, status_code, query)
        return _error_result(
            query, provider, error_type,
            f"{provider} returned HTTP {status_code}",
            status_code=status_code,
            diagnostics=diag,
        )

    try:
        data = response.json()
        items = parse_items(data)
    except (ValueError, TypeError, AttributeError) as exc:
        diag.body_preview = response.text[:_BODY_PREVIEW_CHARS]
        logger.warning("%s returned an unreadable body for query=%r: %s", provider, query, exc)
        return _error_result(
            query, provider, "api_error",
            f"{provider} response could not be parsed: {exc}",
            status_code=status_code,
            diagnostics=diag,
        )

    print(f"📄 [WEB] {provider} returned {len(items)} items for query={query!r}")
    return QueryResult(query=query, items=items, provider=provider, diagnostics=[diag])


def _parse_serper(data: Dict[str, Any]) -> List[SearchResultItem]:
    organic = data.get("organic") or []
    return [_to_item(raw) for raw in organic]


def _parse_google_cse(data: Dict[str, Any]) -> List[SearchResultItem]:
    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise ValueError(f"provider error: {message}")
    return [_to_item(raw) for raw in data.get("items") or []]


async def _search_serper(client: httpx.AsyncClient, query: str) -> QueryResult:
    try:
        api_key = _get_serper_key()
    except EnvironmentError as exc:
        return _error_result(query, "serper", "missing_config", str(exc))

    request = client.post(
        _SERPER_API_URL,
        headers={"X-API-KEY": api_key, "Content-Type": "application/json"},
        json={"q": query, "num": RESULTS_PER_QUERY},
    )
    return await _send(query, "serper", request, _parse_serper)


async def _search_google_cse(client: httpx.AsyncClient, query: str) -> QueryResult:
    try:
        api_key, cx = _get_google_cse_credentials()
    except EnvironmentError as exc:
        return _error_result(query, "google_cse", "missing_config", str(exc))

    request = client.get(
        _GOOGLE_CSE_API_URL,
        params={"key": api_key, "cx": cx, "q": query, "num": str(RESULTS_PER_QUERY)},
    )
    return await _send(query, "google_cse", request, _parse_google_cse)


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

async def search(query: str, *, client: Optional[httpx.AsyncClient] = None) -> QueryResult:
    """Run one web search, falling back to Google CSE only on missing config.

    Rate-limit and auth errors from the primary provider are definitive and
    returned as-is.  This coroutine never raises.
    """
    print(f"🔎 [WEB] Searching: {query!r}")
    try:
        async with client_session(client, "serper") as http:
            primary = await _search_serper(http, query)
            if primary.error is None or primary.error.type != "missing_config":
                return primary

            secondary = await _search_google_cse(http, query)
            secondary.diagnostics = primary.diagnostics + secondary.diagnostics
            return secondary
    except Exception as exc:
        logger.warning("Web search failed unexpectedly for query=%r: %s", query, exc)
        return _error_result(query, "serper", "api_error", f"Unexpected error: {exc}")


async def search_many(
    queries: List[str],
    *,
    delay: float = INTER_QUERY_DELAY,
    client: Optional[httpx.AsyncClient] = None,
) -> WebSearchBatch:
    """Run *queries* sequentially and collect every per-query result.

    Parameters
    ----------
    queries:
        Query strings; result order matches this order.
    delay:
        Seconds to wait between consecutive calls (not after the last).
    client:
        Optional shared client (tests inject a mock transport here).

    Returns
    -------
    WebSearchBatch
        All results, the aggregated ``configured`` flag and the error list.
    """
    results: list[QueryResult] = []
    try:
        async with client_session(client, "serper") as http:
            for index, query in enumerate(queries):
                results.append(await search(query, client=http))
                if delay > 0 and index < len(queries) - 1:
                    await asyncio.sleep(delay)
    except Exception as exc:
        logger.warning("Web search batch aborted after %d queries: %s", len(results), exc)

    if results:
        configured = any(
            r.error is None or r.error.type != "missing_config" for r in results
        )
    else:
        configured = get_search_env().configured

    errors = [QueryError(query=r.query, error=r.error) for r in results if r.error is not None]
    item_count = sum(len(r.items) for r in results)
    logger.info(
        "[WEB] batch complete: queries=%d items=%d errors=%d configured=%s",
        len(results), item_count, len(errors), configured,
    )
    return WebSearchBatch(configured=configured, results=results, errors=errors)
