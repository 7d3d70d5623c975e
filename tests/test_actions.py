import pytest

from hatchbot.actions import ActionToken, ButtonAction, build_custom_id, parse_action_token


def test_parse_known_prefixes():
    assert parse_action_token("pdc_down:abc123") == ActionToken(ButtonAction.FEEDBACK_DOWN, "abc123")
    assert parse_action_token("pdc_up:abc123") == ActionToken(ButtonAction.FEEDBACK_UP, "abc123")
    assert parse_action_token("pdc_more:abc123") == ActionToken(ButtonAction.OPEN_MORE, "abc123")
    assert parse_action_token("pdc_sources:abc123") == ActionToken(ButtonAction.SHOW_SOURCES, "abc123")


def test_parse_deprecated_prefix():
    token = parse_action_token("pdc_summary:abc123")
    assert token is not None
    assert token.action is ButtonAction.DEPRECATED
    assert token.share_id == "abc123"


@pytest.mark.parametrize("custom_id", [None, "", "pdc_down", "pdc_down:", "mystery:abc123", "deprecated:abc123"])
def test_parse_rejects_malformed_tokens(custom_id):
    assert parse_action_token(custom_id) is None


def test_share_id_may_contain_colons():
    token = parse_action_token("pdc_up:share:with:colons")
    assert token.share_id == "share:with:colons"


def test_build_custom_id_round_trips_through_parser():
    custom_id = build_custom_id(ButtonAction.SHOW_SOURCES, "abc123")
    assert custom_id == "pdc_sources:abc123"
    assert parse_action_token(custom_id).action is ButtonAction.SHOW_SOURCES


def test_feedback_flag():
    assert parse_action_token("pdc_up:x").is_feedback
    assert not parse_action_token("pdc_more:x").is_feedback


def test_deprecated_controls_cannot_be_built():
    with pytest.raises(ValueError):
        build_custom_id(ButtonAction.DEPRECATED, "abc123")
