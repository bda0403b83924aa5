"""
Async HTTP Client Configuration

Timeout presets for each external evidence source and a helper that either
reuses a caller-supplied ``httpx.AsyncClient`` or opens a short-lived one.
"""

import httpx
from typing import AsyncIterator, Optional
from contextlib import asynccontextmanager


# Timeout configurations (in seconds)
class Timeouts:
    """Timeout presets for external services."""
    SERPER = 5.0        # single Serper.dev request
    GOOGLE_CSE = 5.0    # single Google Custom Search request
    HN_ALGOLIA = 10.0   # single Hacker News (Algolia) request

    # Per-source deadline for the whole fetch stage.  The slower branch is
    # abandoned (not cancelled) when it overruns.
    WEB_BATCH = 6.0
    FORUM = 4.0

    CONNECT = 5.0


# Delay between sequential web queries (politeness towards rate limits)
INTER_QUERY_DELAY = 0.2

# Results requested per web query
RESULTS_PER_QUERY = 10


def get_timeout(service: str) -> httpx.Timeout:
    """Get timeout configuration for a service."""
    timeouts = {
        "serper": Timeouts.SERPER,
        "google_cse": Timeouts.GOOGLE_CSE,
        "hn_algolia": Timeouts.HN_ALGOLIA,
    }
    seconds = timeouts.get(service.lower(), 10.0)
    return httpx.Timeout(seconds, connect=min(seconds, Timeouts.CONNECT))


@asynccontextmanager
async def client_session(
    client: Optional[httpx.AsyncClient],
    service: str,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* untouched, or a fresh client closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=get_timeout(service), follow_redirects=True) as fresh:
        yield fresh


def classify_status(status_code: int) -> Optional[str]:
    """Map an HTTP status to a search error type (None for 2xx)."""
    if 200 <= status_code < 300:
        return None
    if status_code == 429:
        return "rate_limit"
    if status_code in (401, 403):
        return "auth_error"
    return "api_error"
