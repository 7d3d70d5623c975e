from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class TranscriptSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    episode_title: str = Field(alias="episodeTitle")
    episode_number: int | None = Field(default=None, alias="episodeNumber")
    speakers: str | None = None
    start_timestamp: str | None = Field(default=None, alias="startTimestamp")
    end_timestamp: str | None = Field(default=None, alias="endTimestamp")
    text: str | None = None
    score: float | None = None


class MetadataSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    film: str
    season: int | None = None
    episode: int | None = None
    release_date: str | None = Field(default=None, alias="releaseDate")
    guest: str | None = None
    reviewer: str | None = None
    relevant_fields: dict[str, Any] = Field(default_factory=dict, alias="relevantFields")


def _parse_entries(model: type[BaseModel], entries: Any) -> list[Any]:
    if not isinstance(entries, list):
        return []
    parsed = []
    for entry in entries:
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError:
            continue
    return parsed


class SearchSources(BaseModel):
    """Display view over the raw ``sources`` object; entries that do not parse are skipped."""

    transcripts: list[TranscriptSource] = Field(default_factory=list)
    metadata: list[MetadataSource] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> SearchSources:
        raw = raw or {}
        return cls(
            transcripts=_parse_entries(TranscriptSource, raw.get("transcripts")),
            metadata=_parse_entries(MetadataSource, raw.get("metadata")),
        )


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    answer: str
    query_type: Any = Field(default=None, alias="queryType")
    sources: dict[str, Any] = Field(default_factory=dict)
    payload: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @field_validator("sources", mode="before")
    @classmethod
    def _sources_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SearchResponse:
        response = cls.model_validate(data)
        response.payload = data
        return response

    def to_wire(self) -> dict[str, Any]:
        if self.payload:
            return self.payload
        return self.model_dump(by_alias=True)
