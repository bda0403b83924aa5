"""Forum Search Client (Hacker News via Algolia).

Fetches up to 10 Hacker News stories matching the feature keywords.  No
credentials are required.

Rules
-----
- NEVER raises: any failure returns an empty list
- NO retries
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..constants import MAX_QUERY_KEYWORDS
from ..schemas.search_schema import ForumHit
from .http_client import client_session

logger = logging.getLogger(__name__)

_HN_SEARCH_URL = "https://hn.algolia.com/api/v1/search"
_HITS_PER_PAGE = 10


def _to_hit(raw: Dict[str, Any]) -> ForumHit:
    return ForumHit(
        title=str(raw.get("title") or ""),
        url=raw.get("url") or None,
        points=int(raw.get("points") or 0),
        num_comments=int(raw.get("num_comments") or 0),
        created_at=raw.get("created_at") or None,
        id=str(raw.get("objectID") or ""),
    )


async def search_forum(
    keywords: List[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> List[ForumHit]:
    """Search Hacker News stories for the first five *keywords*.

    Returns hits in provider order, or ``[]`` when the keyword string is
    empty or the request fails for any reason.
    """
    keyword_string = " ".join(keywords[:MAX_QUERY_KEYWORDS]).strip()
    if not keyword_string:
        return []

    params = {
        "query": keyword_string,
        "tags": "story",
        "hitsPerPage": str(_HITS_PER_PAGE),
    }
    print(f"🗨️ [HN] Fetching stories for: {keyword_string!r}")

    try:
        async with client_session(client, "hn_algolia") as http:
            response = await http.get(_HN_SEARCH_URL, params=params)

        if response.status_code != 200:
            logger.warning(
                "[HN] API error %d: %s",
                response.status_code, response.text[:200],
            )
            return []

        data = response.json()
        hits = [_to_hit(raw) for raw in (data.get("hits") or [])[:_HITS_PER_PAGE]]
    except httpx.TimeoutException:
        logger.warning("[HN] Request timeout for %r", keyword_string)
        return []
    except Exception as exc:
        logger.warning("[HN] Error fetching Hacker News for %r: %s", keyword_string, exc)
        return []

    print(f"📄 [HN] Received {data.get('nbHits', len(hits))} total hits, returning {len(hits)}")
    return hits
