from __future__ import annotations

import re


ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")
_LEAD_IN_PATTERNS = (
    re.compile(r"^here is (a|an|the)\s+[^.]*?summary[:\s-]*", re.IGNORECASE),
    re.compile(r"^here'?s (a|an|the)\s+[^.]*?summary[:\s-]*", re.IGNORECASE),
    re.compile(r"^the key takeaway is that\s+", re.IGNORECASE),
    re.compile(r"^summary\s*[:-]+\s*", re.IGNORECASE),
)


def trim_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    if max_chars <= len(ELLIPSIS):
        return ELLIPSIS[:max_chars]
    return f"{text[: max_chars - len(ELLIPSIS)]}{ELLIPSIS}"


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_lead_ins(text: str) -> str:
    # Lead-ins can stack ("Here is a summary: Summary: ..."); peel until stable.
    stripped = text.strip()
    while True:
        before = stripped
        for pattern in _LEAD_IN_PATTERNS:
            stripped = pattern.sub("", stripped, count=1).strip()
        if stripped == before:
            return stripped


def clip_for_prompt(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}…"
