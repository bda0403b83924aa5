"""Web and forum search client tests (provider HTTP mocked with httpx.MockTransport)."""

import asyncio
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx

from market_evidence.services.forum_search_client import search_forum
from market_evidence.services.web_search_client import search, search_many


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _run_search(handler, query="resume screening software"):
    async def _go():
        async with _client(handler) as client:
            return await search(query, client=client)
    return asyncio.run(_go())


def _run_batch(handler, queries):
    async def _go():
        async with _client(handler) as client:
            return await search_many(queries, delay=0, client=client)
    return asyncio.run(_go())


def _run_forum(handler, keywords):
    async def _go():
        async with _client(handler) as client:
            return await search_forum(keywords, client=client)
    return asyncio.run(_go())


SERPER_BODY = {
    "organic": [
        {"title": "Greenhouse ATS", "link": "https://www.greenhouse.com", "snippet": "Applicant tracking"},
        {"title": "Lever", "link": "https://www.lever.co", "snippet": "Hiring platform"},
    ]
}


# ===================================================================== #
#  Serper (primary)                                                       #
# ===================================================================== #

class TestSerperSearch:
    def test_success_maps_organic_items(self, serper_env):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=SERPER_BODY)

        result = _run_search(handler)

        assert result.error is None
        assert result.provider == "serper"
        assert [i.link for i in result.items] == ["https://www.greenhouse.com", "https://www.lever.co"]
        assert result.items[0].snippet == "Applicant tracking"

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://google.serper.dev/search"
        assert request.headers["X-API-KEY"] == "serper-test-key"
        assert json.loads(request.content) == {"q": "resume screening software", "num": 10}

    def test_diagnostics_returned_with_result(self, serper_env):
        result = _run_search(lambda request: httpx.Response(200, json=SERPER_BODY))
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].provider == "serper"
        assert result.diagnostics[0].status_code == 200
        assert result.diagnostics[0].body_preview is None

    def test_rate_limit(self, serper_env):
        result = _run_search(lambda request: httpx.Response(429, text="slow down"))
        assert result.items == []
        assert result.error.type == "rate_limit"
        assert result.error.status_code == 429
        assert result.diagnostics[0].body_preview == "slow down"

    def test_auth_errors(self, serper_env):
        for status in (401, 403):
            result = _run_search(lambda request, s=status: httpx.Response(s))
            assert result.error.type == "auth_error"
            assert result.error.status_code == status

    def test_other_status_is_api_error(self, serper_env):
        result = _run_search(lambda request: httpx.Response(500, text="boom"))
        assert result.error.type == "api_error"
        assert result.error.status_code == 500

    def test_unparseable_body_is_api_error(self, serper_env):
        result = _run_search(lambda request: httpx.Response(200, text="<html>not json</html>"))
        assert result.error.type == "api_error"
        assert result.items == []

    def test_transport_error_never_raises(self, serper_env):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = _run_search(handler)
        assert result.error.type == "api_error"
        assert result.items == []

    def test_rate_limit_does_not_fall_back(self, serper_env, google_cse_env):
        calls = []

        def handler(request):
            calls.append(request.url.host)
            return httpx.Response(429)

        result = _run_search(handler)
        assert result.error.type == "rate_limit"
        assert calls == ["google.serper.dev"]


# ===================================================================== #
#  Google CSE (secondary) / missing config                               #
# ===================================================================== #

class TestGoogleCseFallback:
    def test_missing_config_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        result = _run_search(handler)
        assert result.error.type == "missing_config"
        assert result.items == []
        assert calls == []

    def test_falls_back_when_serper_unconfigured(self, google_cse_env):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "items": [{"title": "Workday", "link": "https://www.workday.com", "snippet": "HR", "displayLink": "www.workday.com"}],
            })

        result = _run_search(handler)

        assert result.error is None
        assert result.provider == "google_cse"
        assert result.items[0].display_link == "www.workday.com"
        params = seen[0].url.params
        assert seen[0].url.host == "www.googleapis.com"
        assert params["key"] == "cse-test-key"
        assert params["cx"] == "cse-test-cx"
        assert params["q"] == "resume screening software"
        assert params["num"] == "10"

    def test_error_object_in_success_body(self, google_cse_env):
        body = {"error": {"code": 400, "message": "Invalid Value"}}
        result = _run_search(lambda request: httpx.Response(200, json=body))
        assert result.error.type == "api_error"
        assert "Invalid Value" in result.error.message


# ===================================================================== #
#  search_many                                                            #
# ===================================================================== #

class TestSearchMany:
    def test_preserves_order_and_collects_errors(self, serper_env):
        def handler(request):
            query = json.loads(request.content)["q"]
            if query == "second":
                return httpx.Response(429)
            return httpx.Response(200, json={"organic": [{"title": query, "link": f"https://{query}.io", "snippet": ""}]})

        batch = _run_batch(handler, ["first", "second", "third"])

        assert [r.query for r in batch.results] == ["first", "second", "third"]
        assert batch.configured is True
        assert batch.item_count == 2
        assert len(batch.errors) == 1
        assert batch.errors[0].query == "second"
        assert batch.errors[0].error.type == "rate_limit"

    def test_all_rate_limited_is_still_configured(self, serper_env):
        batch = _run_batch(lambda request: httpx.Response(429), ["a b", "c d"])
        assert batch.configured is True
        assert batch.item_count == 0
        assert all(e.error.type == "rate_limit" for e in batch.errors)

    def test_unconfigured_batch(self):
        batch = _run_batch(lambda request: httpx.Response(200, json={}), ["a b", "c d"])
        assert batch.configured is False
        assert [e.error.type for e in batch.errors] == ["missing_config", "missing_config"]

    def test_no_queries_uses_env(self, serper_env):
        batch = _run_batch(lambda request: httpx.Response(200, json={}), [])
        assert batch.configured is True
        assert batch.results == []

    def test_no_queries_without_env(self):
        batch = _run_batch(lambda request: httpx.Response(200, json={}), [])
        assert batch.configured is False


# ===================================================================== #
#  Hacker News                                                            #
# ===================================================================== #

class TestForumSearch:
    def test_maps_hits(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "nbHits": 2,
                "hits": [
                    {"title": "Ask HN: ATS pain", "url": "https://example.com/a", "points": 12,
                     "num_comments": 40, "created_at": "2024-05-01T10:00:00.000Z", "objectID": "101"},
                    {"title": "Show HN: Screener", "objectID": "102"},
                ],
            })

        hits = _run_forum(handler, ["resume", "screening", "ats", "hiring", "talent", "extra"])

        assert [h.id for h in hits] == ["101", "102"]
        assert hits[0].num_comments == 40
        assert hits[1].url is None
        assert hits[1].points == 0
        assert hits[1].num_comments == 0

        params = seen[0].url.params
        assert seen[0].url.host == "hn.algolia.com"
        assert params["query"] == "resume screening ats hiring talent"
        assert params["tags"] == "story"
        assert params["hitsPerPage"] == "10"

    def test_empty_keywords_make_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"hits": []})

        assert _run_forum(handler, []) == []
        assert calls == []

    def test_failures_return_empty_list(self):
        def broken(request):
            raise httpx.ReadTimeout("too slow", request=request)

        assert _run_forum(lambda request: httpx.Response(503), ["resume"]) == []
        assert _run_forum(lambda request: httpx.Response(200, text="nope"), ["resume"]) == []
        assert _run_forum(broken, ["resume"]) == []
