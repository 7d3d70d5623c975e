import asyncio
from types import SimpleNamespace

import pytest

from hatchbot.services.summarizer import MAX_ANSWER_CHARS, Failed, Summarizer, Summary, Unavailable


class FakeMessages:
    def __init__(self, text=None, error=None, delay=0.0, blocks=None):
        self.text = text
        self.error = error
        self.delay = delay
        self.blocks = blocks
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        if self.blocks is not None:
            return SimpleNamespace(content=self.blocks)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


def _summarizer(messages: FakeMessages, **kwargs) -> Summarizer:
    return Summarizer(client=SimpleNamespace(messages=messages), **kwargs)


@pytest.mark.asyncio
async def test_unconfigured_provider_is_unavailable():
    summarizer = Summarizer(api_key=None)
    assert not summarizer.available
    assert await summarizer.summarize("q", "answer") == Unavailable()


@pytest.mark.asyncio
async def test_summary_strips_lead_in_and_whitespace():
    messages = FakeMessages(text="Summary:\n  The hosts   hated the ending.\n")
    outcome = await _summarizer(messages).summarize("What happens?", "Long answer")

    assert outcome == Summary("The hosts hated the ending.")
    call = messages.calls[0]
    assert call["max_tokens"] == 256
    assert call["model"] == "claude-3-haiku-20240307"
    assert 'Question: "What happens?"' in call["messages"][0]["content"]


@pytest.mark.asyncio
async def test_here_is_a_summary_lead_in_is_never_returned():
    messages = FakeMessages(text="Here is a short summary: Summary: They loved it.")
    outcome = await _summarizer(messages).summarize("q", "a")

    assert isinstance(outcome, Summary)
    assert not outcome.text.lower().startswith(("summary", "here is a"))
    assert outcome.text == "They loved it."


@pytest.mark.asyncio
async def test_summary_is_trimmed_to_max_chars():
    messages = FakeMessages(text="word " * 100)
    outcome = await _summarizer(messages).summarize("q", "a", max_chars=50)

    assert isinstance(outcome, Summary)
    assert len(outcome.text) == 50
    assert outcome.text.endswith("...")


@pytest.mark.asyncio
async def test_provider_error_is_reported_as_failed():
    messages = FakeMessages(error=RuntimeError("rate limited"))
    outcome = await _summarizer(messages).summarize("q", "a")

    assert outcome == Failed("rate limited")


@pytest.mark.asyncio
async def test_timeout_is_reported_as_failed():
    messages = FakeMessages(text="late", delay=1.0)
    outcome = await _summarizer(messages, timeout=0.01).summarize("q", "a")

    assert isinstance(outcome, Failed)
    assert "timed out" in outcome.reason


@pytest.mark.asyncio
async def test_blank_or_missing_text_is_failed():
    assert isinstance(await _summarizer(FakeMessages(text="Summary:   ")).summarize("q", "a"), Failed)
    assert isinstance(await _summarizer(FakeMessages(blocks=[])).summarize("q", "a"), Failed)


def test_prompt_clips_long_answers():
    summarizer = Summarizer(api_key=None)
    prompt = summarizer.build_prompt("q", "x" * (MAX_ANSWER_CHARS + 500))

    assert "x" * MAX_ANSWER_CHARS + "…" in prompt
    assert "x" * (MAX_ANSWER_CHARS + 1) not in prompt
