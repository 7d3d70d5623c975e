import json

import httpx
import pytest

from fakes import FakeClock

from hatchbot.services.pipeline import AnswerPipeline, PipelineFailure, PipelineSuccess
from hatchbot.services.result_cache import ShareResultCache
from hatchbot.services.search_api import BackendClient, SearchClient, SharePublisher
from hatchbot.services.summarizer import Failed, Summarizer, Summary, Unavailable


BASE_URL = "https://search.example.com"


class StubSummarizer(Summarizer):
    def __init__(self, outcome):
        super().__init__(api_key=None)
        self.outcome = outcome
        self.calls = 0

    async def summarize(self, query, answer, max_chars=900):
        self.calls += 1
        return self.outcome


def _pipeline(handler, summarizer, cache, max_chars=900) -> AnswerPipeline:
    backend = BackendClient(BASE_URL, transport=httpx.MockTransport(handler))
    return AnswerPipeline(
        search_client=SearchClient(backend),
        share_publisher=SharePublisher(backend),
        summarizer=summarizer,
        cache=cache,
        summary_max_chars=max_chars,
    )


def _backend_handler(answer="...", search_status=200, share_status=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url.path)
        if request.url.path == "/api/search":
            if search_status >= 400:
                return httpx.Response(search_status, json={"error": "Search index offline"})
            return httpx.Response(200, json={"answer": answer, "queryType": "factual", "sources": {}})
        if share_status >= 400:
            return httpx.Response(share_status, json={})
        return httpx.Response(200, json={"url": "/s/abc123", "id": "abc123"})

    return handler


@pytest.mark.asyncio
async def test_successful_run_caches_result_under_share_id():
    cache = ShareResultCache(clock=FakeClock())
    pipeline = _pipeline(_backend_handler(), StubSummarizer(Unavailable()), cache)

    outcome = await pipeline.run("What happens in episode 4?")

    assert isinstance(outcome, PipelineSuccess)
    cached = cache.get("abc123")
    assert cached is not None
    assert cached.share_url == BASE_URL + "/s/abc123"
    assert cached.query == "What happens in episode 4?"
    assert cached.answer == "..."
    assert cached.summary is None


@pytest.mark.asyncio
async def test_unconfigured_summarizer_falls_back_to_trimmed_answer():
    answer = "The hosts talk about the ending for a very long time. " * 10
    cache = ShareResultCache(clock=FakeClock())
    pipeline = _pipeline(_backend_handler(answer=answer), StubSummarizer(Unavailable()), cache, max_chars=100)

    outcome = await pipeline.run("q")

    assert outcome.description == answer[:97] + "..."
    assert len(outcome.description) == 100


@pytest.mark.asyncio
async def test_failed_summary_degrades_silently():
    cache = ShareResultCache(clock=FakeClock())
    pipeline = _pipeline(_backend_handler(answer="short"), StubSummarizer(Failed("boom")), cache)

    outcome = await pipeline.run("q")

    assert isinstance(outcome, PipelineSuccess)
    assert outcome.description == "short"
    assert cache.get("abc123").summary is None


@pytest.mark.asyncio
async def test_summary_becomes_description_and_is_cached():
    cache = ShareResultCache(clock=FakeClock())
    pipeline = _pipeline(_backend_handler(), StubSummarizer(Summary("They hated it.")), cache)

    outcome = await pipeline.run("q")

    assert outcome.description == "They hated it."
    assert cache.get("abc123").summary == "They hated it."


@pytest.mark.asyncio
async def test_search_failure_short_circuits():
    calls = []
    cache = ShareResultCache(clock=FakeClock())
    summarizer = StubSummarizer(Unavailable())
    pipeline = _pipeline(_backend_handler(search_status=500, calls=calls), summarizer, cache)

    outcome = await pipeline.run("q")

    assert outcome == PipelineFailure("search", "Search index offline")
    assert calls == ["/api/search"]
    assert summarizer.calls == 0
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_share_failure_writes_nothing():
    cache = ShareResultCache(clock=FakeClock())
    summarizer = StubSummarizer(Summary("unused"))
    pipeline = _pipeline(_backend_handler(share_status=503), summarizer, cache)

    outcome = await pipeline.run("q")

    assert outcome == PipelineFailure("share", "Search failed")
    assert summarizer.calls == 0
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_mixed_shape_sources_are_cached_and_shared_unchanged():
    search_payload = {
        "answer": "They argue about the ending.",
        "queryType": "interpretive",
        "sources": {
            "transcripts": [{"episodeTitle": "Alien", "speakers": None, "score": 1}],
            "metadata": [{"film": "Alien", "season": None, "guest": None, "relevantFields": {"runtime": 117}}],
        },
    }
    share_bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/search":
            return httpx.Response(200, json=search_payload)
        share_bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"url": "/s/abc123", "id": "abc123"})

    cache = ShareResultCache(clock=FakeClock())
    outcome = await _pipeline(handler, StubSummarizer(Unavailable()), cache).run("q")

    assert isinstance(outcome, PipelineSuccess)
    assert share_bodies == [{"query": "q", "result": search_payload}]
    assert cache.get("abc123").sources == search_payload["sources"]
