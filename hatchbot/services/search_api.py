from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from hatchbot.errors import UpstreamError
from hatchbot.schemas.search import SearchRequest, SearchResponse
from hatchbot.schemas.share import PublishedShare, ShareResponse


logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Search failed"
TIMEOUT_ERROR = "Search service timed out"


class BackendClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._post_with_retry(url, payload)
        except httpx.TimeoutException as exc:
            logger.warning("POST %s timed out twice: %s", url, exc)
            raise UpstreamError(TIMEOUT_ERROR) from exc
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", url, exc)
            raise UpstreamError(str(exc) or DEFAULT_ERROR) from exc

        if response.status_code >= 400:
            raise UpstreamError(self._error_message(response))
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(DEFAULT_ERROR) from exc

    @retry(
        retry=retry_if_exception_type(httpx.TimeoutException),
        stop=stop_after_attempt(2),
        reraise=True,
    )
    async def _post_with_retry(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(url, json=payload)

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return DEFAULT_ERROR
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return DEFAULT_ERROR


class SearchClient:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def search(self, query: str) -> SearchResponse:
        request = SearchRequest(query=query)
        data = await self.backend.post_json("/api/search", request.model_dump())
        try:
            return SearchResponse.from_payload(data)
        except ValidationError as exc:
            logger.warning("Unexpected search payload for %r: %s", query, exc)
            raise UpstreamError("Search returned an unexpected response") from exc


class SharePublisher:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def create_share(self, query: str, result: SearchResponse) -> PublishedShare:
        data = await self.backend.post_json("/api/share", {"query": query, "result": result.to_wire()})
        try:
            share = ShareResponse.model_validate(data)
        except ValidationError as exc:
            logger.warning("Unexpected share payload: %s", exc)
            raise UpstreamError("Share creation returned an unexpected response") from exc
        return PublishedShare(share_id=share.id, share_url=f"{self.backend.base_url}{share.url}")
