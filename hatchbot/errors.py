from __future__ import annotations


class HatchBotError(Exception):
    pass


class ConfigError(HatchBotError):
    pass


class UpstreamError(HatchBotError):
    """A required backend call failed; the message is shown to the user as-is."""


class FeedbackConfigError(HatchBotError):
    pass
