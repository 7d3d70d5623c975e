from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import discord

from hatchbot.actions import ActionToken, ButtonAction, parse_action_token
from hatchbot.models.cached_result import CachedResult
from hatchbot.schemas.feedback import FeedbackRow
from hatchbot.services.feedback_sink import SheetsFeedbackSink
from hatchbot.services.pipeline import AnswerPipeline, PipelineFailure
from hatchbot.services.renderer import (
    EXPIRED_MESSAGE,
    FEEDBACK_DOWN_ACK,
    FEEDBACK_UP_ACK,
    MessageRenderer,
)
from hatchbot.services.result_cache import ShareResultCache


logger = logging.getLogger(__name__)


def _command_query(data: dict[str, Any]) -> str | None:
    for option in data.get("options") or []:
        if option.get("name") == "query":
            value = option.get("value")
            return str(value) if value is not None else None
    return None


class InteractionDispatcher:
    """Routes slash commands and button presses for one bot process."""

    def __init__(
        self,
        cache: ShareResultCache,
        pipeline: AnswerPipeline,
        renderer: MessageRenderer,
        feedback_sink: SheetsFeedbackSink | None = None,
        command_name: str = "pdc",
    ) -> None:
        self.cache = cache
        self.pipeline = pipeline
        self.renderer = renderer
        self.feedback_sink = feedback_sink
        self.command_name = command_name

    async def dispatch(self, interaction: discord.Interaction) -> None:
        data = interaction.data or {}
        try:
            if interaction.type == discord.InteractionType.application_command:
                if data.get("name") != self.command_name:
                    return
                query = _command_query(data)
                if not query:
                    await self._reply_error(interaction, "Please provide a query.")
                    return
                await self.handle_command(interaction, query)
            elif interaction.type == discord.InteractionType.component:
                await self.handle_control(interaction, data.get("custom_id"))
        except Exception as exc:
            logger.exception("Discord interaction failed")
            await self._reply_error(interaction, str(exc) or "Unexpected error")

    async def handle_command(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer()

        outcome = await self.pipeline.run(query)
        if isinstance(outcome, PipelineFailure):
            await interaction.edit_original_response(content=outcome.message)
            return

        cached = outcome.cached
        message = self.renderer.render_result(query, outcome.description, cached.share_url, cached.share_id)
        await interaction.edit_original_response(embed=message.embed, view=message.view)

    async def handle_control(self, interaction: discord.Interaction, custom_id: str | None) -> None:
        token = parse_action_token(custom_id)
        if token is None:
            logger.info("Ignoring unrecognised control %r", custom_id)
            return
        if token.action is ButtonAction.DEPRECATED:
            logger.debug("Ignoring deprecated control %r", custom_id)
            return

        cached = self.cache.get(token.share_id)
        if cached is None:
            await interaction.response.send_message(EXPIRED_MESSAGE, ephemeral=True)
            return

        if token.action is ButtonAction.OPEN_MORE:
            await interaction.response.send_message(embed=self.renderer.render_more(cached), ephemeral=True)
        elif token.action is ButtonAction.SHOW_SOURCES:
            await interaction.response.send_message(self.renderer.render_sources(cached), ephemeral=True)
        elif token.is_feedback:
            await self._handle_feedback(interaction, token, cached)

    async def _handle_feedback(self, interaction: discord.Interaction, token: ActionToken, cached: CachedResult) -> None:
        positive = token.action is ButtonAction.FEEDBACK_UP
        await interaction.response.send_message(FEEDBACK_UP_ACK if positive else FEEDBACK_DOWN_ACK, ephemeral=True)

        if self.feedback_sink is None:
            logger.warning("DISCORD_FEEDBACK_SHEET_ID not set; feedback not stored.")
            return

        row = FeedbackRow(
            timestamp=datetime.now(timezone.utc).isoformat(),
            user_tag=str(interaction.user),
            user_id=str(interaction.user.id),
            query=cached.query,
            share_url=cached.share_url,
            summary=cached.summary,
            guild_id=str(interaction.guild_id) if interaction.guild_id else None,
            channel_id=str(interaction.channel_id) if interaction.channel_id else None,
            rating="up" if positive else "down",
        )
        try:
            await self.feedback_sink.append(row)
        except Exception:
            logger.exception("Failed to store feedback in sheet")

    async def _reply_error(self, interaction: discord.Interaction, message: str) -> None:
        try:
            if interaction.response.is_done():
                await interaction.edit_original_response(content=message, embed=None, view=None)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException:
            logger.exception("Could not deliver error reply")
