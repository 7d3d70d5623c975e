from __future__ import annotations

import asyncio
import contextlib
import logging

import discord

from hatchbot.config import Settings
from hatchbot.dispatcher import InteractionDispatcher
from hatchbot.services.feedback_sink import build_feedback_sink
from hatchbot.services.pipeline import AnswerPipeline
from hatchbot.services.renderer import MessageRenderer
from hatchbot.services.result_cache import ShareResultCache
from hatchbot.services.search_api import BackendClient, SearchClient, SharePublisher
from hatchbot.services.summarizer import Summarizer


logger = logging.getLogger(__name__)

PURGE_INTERVAL_SECONDS = 60


def build_dispatcher(settings: Settings) -> InteractionDispatcher:
    cache = ShareResultCache(ttl_seconds=settings.result_cache_ttl_seconds)
    backend = BackendClient(settings.search_base_url, timeout=settings.http_timeout_seconds)
    pipeline = AnswerPipeline(
        search_client=SearchClient(backend),
        share_publisher=SharePublisher(backend),
        summarizer=Summarizer(
            api_key=settings.anthropic_api_key,
            model=settings.summary_model,
            timeout=settings.summary_timeout_seconds,
        ),
        cache=cache,
        summary_max_chars=settings.summary_max_chars,
    )
    return InteractionDispatcher(
        cache=cache,
        pipeline=pipeline,
        renderer=MessageRenderer(footer=settings.app_name),
        feedback_sink=build_feedback_sink(settings),
        command_name=settings.command_name,
    )


class HatchBot(discord.Client):
    def __init__(self, settings: Settings, dispatcher: InteractionDispatcher) -> None:
        super().__init__(intents=discord.Intents(guilds=True))
        self.settings = settings
        self.dispatcher = dispatcher
        self._purge_task: asyncio.Task | None = None

    async def setup_hook(self) -> None:
        self._purge_task = asyncio.create_task(self._purge_expired_results())

    async def close(self) -> None:
        await self._stop_purge_task()
        await super().close()

    async def _stop_purge_task(self) -> None:
        if self._purge_task is None:
            return
        self._purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._purge_task
        self._purge_task = None

    async def on_ready(self) -> None:
        logger.info("Discord bot logged in as %s", self.user)
        logger.info("DISCORD_SEARCH_BASE_URL: %s", self.settings.search_base_url)
        if self.settings.feedback_sheet_id:
            logger.info("DISCORD_FEEDBACK_SHEET_ID: %s", self.settings.feedback_sheet_id)
        if self.settings.uses_localhost:
            logger.warning(
                "Bot is configured to use localhost. "
                "Set DISCORD_SEARCH_BASE_URL to your public transcript-app URL."
            )

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await self.dispatcher.dispatch(interaction)

    async def _purge_expired_results(self) -> None:
        while True:
            await asyncio.sleep(PURGE_INTERVAL_SECONDS)
            purged = self.dispatcher.cache.purge_expired()
            if purged:
                logger.debug("Purged %d expired results", purged)


def run_bot(settings: Settings) -> None:
    token = settings.require_token()
    bot = HatchBot(settings, build_dispatcher(settings))
    bot.run(token, log_handler=None)
