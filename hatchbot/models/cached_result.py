from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CachedResult:
    share_id: str
    share_url: str
    query: str
    answer: str
    summary: str | None
    sources: dict[str, Any] = field(default_factory=dict)
    created_at: float = 0.0
