from __future__ import annotations

from dataclasses import dataclass

import discord

from hatchbot.actions import ButtonAction, build_custom_id
from hatchbot.models.cached_result import CachedResult
from hatchbot.schemas.search import MetadataSource, SearchSources, TranscriptSource
from hatchbot.services.text_utils import normalize_whitespace, trim_text


EMBED_COLOR = 0x5865F2
FOOTER_TEXT = "Escape Hatch Podcast Search"
TITLE_MAX_CHARS = 256
MORE_MAX_CHARS = 4000
MESSAGE_MAX_CHARS = 2000
EXCERPT_MAX_CHARS = 200
MAX_SOURCES_PER_KIND = 5

EXPIRED_MESSAGE = "This result has expired. Please run the command again."
FEEDBACK_UP_ACK = "Thanks for the feedback!"
FEEDBACK_DOWN_ACK = "Thanks — we'll use this to improve."
NO_SOURCES_MESSAGE = "No sources were returned for this answer."


@dataclass
class RenderedMessage:
    embed: discord.Embed
    view: discord.ui.View


class MessageRenderer:
    def __init__(self, color: int = EMBED_COLOR, footer: str = FOOTER_TEXT) -> None:
        self.color = color
        self.footer = footer

    def result_embed(self, query: str, description: str) -> discord.Embed:
        embed = discord.Embed(
            title=trim_text(query, TITLE_MAX_CHARS),
            description=description,
            color=self.color,
        )
        embed.set_footer(text=self.footer)
        return embed

    def result_controls(self, share_url: str, share_id: str) -> discord.ui.View:
        view = discord.ui.View(timeout=None)
        view.add_item(discord.ui.Button(style=discord.ButtonStyle.link, label="Open full answer", url=share_url))
        view.add_item(
            discord.ui.Button(
                style=discord.ButtonStyle.secondary,
                label="More",
                custom_id=build_custom_id(ButtonAction.OPEN_MORE, share_id),
            )
        )
        view.add_item(
            discord.ui.Button(
                style=discord.ButtonStyle.secondary,
                label="Sources",
                custom_id=build_custom_id(ButtonAction.SHOW_SOURCES, share_id),
            )
        )
        view.add_item(
            discord.ui.Button(
                style=discord.ButtonStyle.secondary,
                label="\N{THUMBS UP SIGN}",
                custom_id=build_custom_id(ButtonAction.FEEDBACK_UP, share_id),
            )
        )
        view.add_item(
            discord.ui.Button(
                style=discord.ButtonStyle.secondary,
                label="\N{THUMBS DOWN SIGN}",
                custom_id=build_custom_id(ButtonAction.FEEDBACK_DOWN, share_id),
            )
        )
        return view

    def render_result(self, query: str, description: str, share_url: str, share_id: str) -> RenderedMessage:
        return RenderedMessage(
            embed=self.result_embed(query, description),
            view=self.result_controls(share_url, share_id),
        )

    def render_more(self, cached: CachedResult) -> discord.Embed:
        embed = discord.Embed(
            title=trim_text(cached.query, TITLE_MAX_CHARS),
            description=trim_text(cached.answer, MORE_MAX_CHARS),
            color=self.color,
            url=cached.share_url,
        )
        embed.set_footer(text=self.footer)
        return embed

    def render_sources(self, cached: CachedResult) -> str:
        lines: list[str] = []
        sources = SearchSources.from_raw(cached.sources)
        transcripts = sources.transcripts[:MAX_SOURCES_PER_KIND]
        metadata = sources.metadata[:MAX_SOURCES_PER_KIND]

        if transcripts:
            lines.append("**Transcripts**")
            lines.extend(self._transcript_line(source) for source in transcripts)
        if metadata:
            if lines:
                lines.append("")
            lines.append("**Episodes**")
            lines.extend(self._metadata_line(source) for source in metadata)

        if not lines:
            return NO_SOURCES_MESSAGE
        return trim_text("\n".join(lines), MESSAGE_MAX_CHARS)

    def _transcript_line(self, source: TranscriptSource) -> str:
        title = source.episode_title
        if source.episode_number is not None:
            title = f"{title} (#{source.episode_number})"
        parts = [f"**{title}**"]
        if source.start_timestamp:
            span = source.start_timestamp
            if source.end_timestamp:
                span = f"{span}–{source.end_timestamp}"
            parts.append(span)
        if source.speakers:
            parts.append(source.speakers)
        header = " · ".join(parts)
        excerpt = trim_text(normalize_whitespace(source.text or ""), EXCERPT_MAX_CHARS)
        if not excerpt:
            return f"- {header}"
        return f"- {header}\n  > {excerpt}"

    def _metadata_line(self, source: MetadataSource) -> str:
        details = []
        if source.season is not None and source.episode is not None:
            details.append(f"S{source.season}E{source.episode}")
        if source.release_date:
            details.append(source.release_date)
        line = f"- **{source.film}**"
        if details:
            line = f"{line} ({', '.join(details)})"
        if source.reviewer:
            line = f"{line} · {source.reviewer}"
        if source.guest:
            line = f"{line} with {source.guest}"
        return line
