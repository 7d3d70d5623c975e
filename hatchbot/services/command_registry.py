from __future__ import annotations

import logging
from typing import Any

import httpx

from hatchbot.errors import UpstreamError


logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"
STRING_OPTION = 3
CHAT_INPUT_COMMAND = 1


def build_search_command(name: str = "pdc") -> dict[str, Any]:
    return {
        "name": name,
        "type": CHAT_INPUT_COMMAND,
        "description": "Search the Escape Hatch podcast transcripts",
        "options": [
            {
                "name": "query",
                "description": "What do you want to know?",
                "type": STRING_OPTION,
                "required": True,
            }
        ],
    }


class CommandRegistry:
    def __init__(
        self,
        token: str,
        app_id: str,
        api_base: str = DISCORD_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.app_id = app_id
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    def commands_url(self, guild_id: str | None = None) -> str:
        if guild_id:
            return f"{self.api_base}/applications/{self.app_id}/guilds/{guild_id}/commands"
        return f"{self.api_base}/applications/{self.app_id}/commands"

    async def register(self, commands: list[dict[str, Any]], guild_id: str | None = None) -> list[dict[str, Any]]:
        url = self.commands_url(guild_id)
        headers = {"Authorization": f"Bot {self.token}"}
        async with httpx.AsyncClient(timeout=15, transport=self._transport) as client:
            try:
                response = await client.put(url, json=commands, headers=headers)
            except httpx.HTTPError as exc:
                raise UpstreamError(f"Failed to register commands: {exc}") from exc
        if response.status_code >= 400:
            logger.error("Command registration rejected (%s): %s", response.status_code, response.text)
            raise UpstreamError(f"Failed to register commands: HTTP {response.status_code}")
        return response.json()
