from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable

from hatchbot.models.cached_result import CachedResult


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60


class ShareResultCache:
    """In-process store of answered queries keyed by share id.

    Entries expire a fixed ``ttl_seconds`` after they were written; reads never
    extend that window. Stale entries are dropped by the read that sees them.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedResult] = {}

    def put(self, share_id: str, result: CachedResult) -> None:
        self._entries[share_id] = replace(result, share_id=share_id, created_at=self._clock())

    def get(self, share_id: str) -> CachedResult | None:
        cached = self._entries.get(share_id)
        if cached is None:
            return None
        if self._is_expired(cached, self._clock()):
            del self._entries[share_id]
            logger.debug("Evicted expired result %s", share_id)
            return None
        return cached

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [share_id for share_id, cached in self._entries.items() if self._is_expired(cached, now)]
        for share_id in expired:
            del self._entries[share_id]
        return len(expired)

    def _is_expired(self, cached: CachedResult, now: float) -> bool:
        return now - cached.created_at > self.ttl_seconds

    def __contains__(self, share_id: object) -> bool:
        return share_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
