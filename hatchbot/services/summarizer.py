from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Union

from anthropic import AsyncAnthropic
from jinja2 import Template

from hatchbot.services.text_utils import clip_for_prompt, normalize_whitespace, strip_lead_ins, trim_text


logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 900
MAX_ANSWER_CHARS = 12_000
DEFAULT_MODEL = "claude-3-haiku-20240307"

PROMPT_TEMPLATE = Template(
    """
Summarize the answer below for a Discord link preview.

Requirements:
- Focus on the key takeaway in 1-4 sentences.
- It's okay to be brief if the answer is clear.
- Do not repeat the question.
- Do not mention character limits, summaries, or instructions.
- Avoid markdown formatting.
- Plain text only.

Question: "{{ query }}"
Answer:
{{ answer }}
    """.strip()
)


@dataclass(frozen=True)
class Summary:
    text: str


@dataclass(frozen=True)
class Unavailable:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


SummaryResult = Union[Summary, Unavailable, Failed]


class Summarizer:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 20.0,
        client: Any | None = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        if client is None and api_key:
            client = AsyncAnthropic(api_key=api_key)
        self.client = client

    @property
    def available(self) -> bool:
        return self.client is not None

    def build_prompt(self, query: str, answer: str) -> str:
        return PROMPT_TEMPLATE.render(query=query, answer=clip_for_prompt(answer, MAX_ANSWER_CHARS))

    async def summarize(self, query: str, answer: str, max_chars: int = DEFAULT_MAX_CHARS) -> SummaryResult:
        if self.client is None:
            return Unavailable()

        try:
            message = await asyncio.wait_for(
                self.client.messages.create(
                    model=self.model,
                    max_tokens=256,
                    messages=[{"role": "user", "content": self.build_prompt(query, answer)}],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return Failed(f"summary timed out after {self.timeout:g}s")
        except Exception as exc:
            return Failed(str(exc) or exc.__class__.__name__)

        raw = self._first_text(message)
        if raw is None:
            return Failed("model returned no text block")
        return self.clean(raw, max_chars)

    def clean(self, raw: str, max_chars: int = DEFAULT_MAX_CHARS) -> SummaryResult:
        text = strip_lead_ins(normalize_whitespace(raw))
        if not text:
            return Failed("model returned an empty summary")
        return Summary(trim_text(text, max_chars))

    def _first_text(self, message: Any) -> str | None:
        for block in getattr(message, "content", None) or []:
            if getattr(block, "type", None) == "text":
                return block.text
        return None
