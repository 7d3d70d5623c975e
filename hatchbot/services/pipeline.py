"""Command pipeline: search, share, summarize, then cache the answer.

Search and share are required; the first of them to fail stops the run and
nothing is cached. Summarization is optional and only changes the description
that ends up in the reply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from hatchbot.errors import UpstreamError
from hatchbot.models.cached_result import CachedResult
from hatchbot.services.result_cache import ShareResultCache
from hatchbot.services.search_api import SearchClient, SharePublisher
from hatchbot.services.summarizer import Failed, Summarizer, Summary, Unavailable
from hatchbot.services.text_utils import trim_text


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineSuccess:
    cached: CachedResult
    description: str


@dataclass(frozen=True)
class PipelineFailure:
    step: str
    message: str


PipelineResult = Union[PipelineSuccess, PipelineFailure]


class AnswerPipeline:
    def __init__(
        self,
        search_client: SearchClient,
        share_publisher: SharePublisher,
        summarizer: Summarizer,
        cache: ShareResultCache,
        summary_max_chars: int = 900,
    ) -> None:
        self.search_client = search_client
        self.share_publisher = share_publisher
        self.summarizer = summarizer
        self.cache = cache
        self.summary_max_chars = summary_max_chars

    async def run(self, query: str) -> PipelineResult:
        try:
            result = await self.search_client.search(query)
        except UpstreamError as exc:
            logger.warning("Search failed for %r: %s", query, exc)
            return PipelineFailure("search", str(exc))

        try:
            share = await self.share_publisher.create_share(query, result)
        except UpstreamError as exc:
            logger.warning("Share creation failed for %r: %s", query, exc)
            return PipelineFailure("share", str(exc))

        summary = await self._summarize(query, result.answer)

        cached = CachedResult(
            share_id=share.share_id,
            share_url=share.share_url,
            query=query,
            answer=result.answer,
            summary=summary,
            sources=result.sources,
        )
        self.cache.put(share.share_id, cached)
        logger.info("Cached result %s for %r", share.share_id, query)

        description = summary or trim_text(result.answer, self.summary_max_chars)
        return PipelineSuccess(cached=cached, description=description)

    async def _summarize(self, query: str, answer: str) -> str | None:
        outcome = await self.summarizer.summarize(query, answer, max_chars=self.summary_max_chars)
        if isinstance(outcome, Summary):
            return outcome.text
        if isinstance(outcome, Failed):
            logger.warning("Summary generation failed, falling back to raw answer: %s", outcome.reason)
        elif isinstance(outcome, Unavailable):
            logger.debug("No summarization provider configured")
        return None
