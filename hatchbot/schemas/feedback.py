from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class FeedbackRow(BaseModel):
    timestamp: str
    user_tag: str
    user_id: str
    query: str
    share_url: str
    summary: str | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    rating: Literal["up", "down"] = "down"

    def to_sheet_values(self) -> list[str]:
        return [
            self.timestamp,
            self.user_tag,
            self.user_id,
            self.query,
            self.share_url,
            self.summary or "",
            self.guild_id or "",
            self.channel_id or "",
            self.rating,
        ]
