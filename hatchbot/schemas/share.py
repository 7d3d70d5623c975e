from __future__ import annotations

from pydantic import BaseModel


class ShareResponse(BaseModel):
    url: str
    id: str


class PublishedShare(BaseModel):
    share_id: str
    share_url: str
