from __future__ import annotations

import enum
from dataclasses import dataclass


class ButtonAction(enum.Enum):
    OPEN_MORE = "pdc_more"
    SHOW_SOURCES = "pdc_sources"
    FEEDBACK_UP = "pdc_up"
    FEEDBACK_DOWN = "pdc_down"
    DEPRECATED = "deprecated"


# Controls from earlier message layouts that may still be clicked on old replies.
DEPRECATED_PREFIXES = frozenset({"pdc_summary", "pdc_open"})

_PREFIX_TO_ACTION = {action.value: action for action in ButtonAction if action is not ButtonAction.DEPRECATED}


@dataclass(frozen=True)
class ActionToken:
    action: ButtonAction
    share_id: str

    @property
    def is_feedback(self) -> bool:
        return self.action in (ButtonAction.FEEDBACK_UP, ButtonAction.FEEDBACK_DOWN)


def build_custom_id(action: ButtonAction, share_id: str) -> str:
    if action is ButtonAction.DEPRECATED:
        raise ValueError("deprecated controls are never rendered")
    return f"{action.value}:{share_id}"


def parse_action_token(custom_id: str | None) -> ActionToken | None:
    if not custom_id or ":" not in custom_id:
        return None
    prefix, share_id = custom_id.split(":", 1)
    share_id = share_id.strip()
    if not share_id:
        return None
    if prefix in DEPRECATED_PREFIXES:
        return ActionToken(ButtonAction.DEPRECATED, share_id)
    action = _PREFIX_TO_ACTION.get(prefix)
    if action is None:
        return None
    return ActionToken(action, share_id)
