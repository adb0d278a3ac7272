"""
Tests for Slack payload models and Block Kit views.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app.integrations.slack.blocks import (
    ACTION_REGISTER_IMPROVED,
    CONTENT_BLOCK_ID,
    CONTENT_INPUT_ID,
    CUSTOM_REGISTER_CALLBACK,
    SECTION_TEXT_LIMIT,
    build_edit_modal,
    build_review_blocks,
)
from app.integrations.slack.models import (
    ActionClick,
    MentionEvent,
    ModalSubmission,
    ThreadMessageEvent,
)
from app.models.registration import PendingRegistration, ReviewPrompt, ReviewResult
from app.models.team import SectionKind
from tests.fakes import sample_team


class TestMentionEvent:
    """Test suite for app_mention payloads."""

    def test_top_level_mention_replies_in_own_thread(self):
        event = MentionEvent.from_event(
            {"type": "app_mention", "text": "<@U0BOT> 안녕", "user": "U1", "channel": "C1", "ts": "10.0"}
        )

        assert event.thread_ts is None
        assert event.reply_thread_ts == "10.0"
        assert event.user_id == "U1"

    def test_mention_inside_thread(self):
        event = MentionEvent.from_event(
            {"text": "hi", "channel": "C1", "ts": "12.0", "thread_ts": "10.0"}
        )

        assert event.reply_thread_ts == "10.0"


class TestThreadMessageEvent:
    """Test suite for message payloads."""

    def test_top_level_message_is_not_a_thread_reply(self):
        assert ThreadMessageEvent.from_event({"text": "hi", "channel": "C1", "ts": "1.0"}) is None

    def test_thread_reply(self):
        event = ThreadMessageEvent.from_event(
            {"text": "hi", "channel": "C1", "ts": "2.0", "thread_ts": "1.0", "user": "U1"}
        )

        assert event.thread_ts == "1.0"
        assert event.is_relevant("U0BOT")

    def test_relevance_filters(self):
        base = {"channel": "C1", "ts": "2.0", "thread_ts": "1.0"}

        assert not ThreadMessageEvent.from_event({**base, "text": "x", "bot_id": "B1"}).is_relevant(None)
        assert not ThreadMessageEvent.from_event(
            {**base, "text": "x", "subtype": "channel_join"}
        ).is_relevant(None)
        assert ThreadMessageEvent.from_event(
            {**base, "text": "x", "subtype": "file_share"}
        ).is_relevant(None)
        assert not ThreadMessageEvent.from_event({**base, "text": "<@U0BOT> x"}).is_relevant("U0BOT")


class TestActionClick:
    """Test suite for block_actions payloads."""

    def test_from_body(self):
        body = {
            "type": "block_actions",
            "user": {"id": "U1"},
            "channel": {"id": "C1"},
            "trigger_id": "T1",
            "actions": [{"action_id": "register_original", "value": "review_1"}],
        }

        click = ActionClick.from_body(body)

        assert (click.action_id, click.pending_id, click.user_id, click.channel_id, click.trigger_id) == (
            "register_original",
            "review_1",
            "U1",
            "C1",
            "T1",
        )

    def test_channel_from_container(self):
        body = {
            "user": {"id": "U1"},
            "container": {"channel_id": "C2"},
            "actions": [{"action_id": "register_cancel"}],
        }

        click = ActionClick.from_body(body)

        assert click.channel_id == "C2"
        assert click.pending_id is None


def _prompt(critique="검토 결과", improved=None, kind=SectionKind.LEARNING):
    return ReviewPrompt(
        action_id="review_1",
        team_key="마케팅",
        kind=kind,
        review=ReviewResult(critique=critique, improved=improved),
    )


class TestBlocks:
    """Test suite for the review prompt and edit modal."""

    def test_review_blocks_with_improvement(self):
        blocks = build_review_blocks(_prompt(improved="개선"), sample_team())

        assert blocks[0]["text"]["text"] == "📢 *마케팅팀* - 💡 학습 등록 검토"
        buttons = blocks[-1]["elements"]
        assert len(buttons) == 4
        assert all(button["value"] == "review_1" for button in buttons)
        assert buttons[1]["action_id"] == ACTION_REGISTER_IMPROVED

    def test_review_blocks_without_improvement(self):
        blocks = build_review_blocks(_prompt(), sample_team())

        action_ids = [button["action_id"] for button in blocks[-1]["elements"]]
        assert ACTION_REGISTER_IMPROVED not in action_ids
        assert len(action_ids) == 3

    def test_long_critique_is_truncated(self):
        blocks = build_review_blocks(_prompt(critique="가" * 5000), sample_team())

        text = blocks[2]["text"]["text"]
        assert len(text) == SECTION_TEXT_LIMIT
        assert text.endswith("...")

    def test_edit_modal(self):
        pending = PendingRegistration(
            action_id="review_1",
            team_key="마케팅",
            kind=SectionKind.STANDARD,
            original="원본",
            user_id="U1",
            channel_id="C1",
            thread_ts="1.0",
        )

        view = build_edit_modal(pending)

        assert view["callback_id"] == CUSTOM_REGISTER_CALLBACK
        assert view["private_metadata"] == "review_1"
        assert view["blocks"][0]["block_id"] == CONTENT_BLOCK_ID
        assert view["blocks"][0]["element"]["action_id"] == CONTENT_INPUT_ID
        assert view["blocks"][0]["element"]["initial_value"] == "원본"


def test_modal_submission_from_view():
    view = {
        "callback_id": CUSTOM_REGISTER_CALLBACK,
        "private_metadata": "review_1",
        "state": {"values": {CONTENT_BLOCK_ID: {CONTENT_INPUT_ID: {"value": "  수정본 "}}}},
    }

    submission = ModalSubmission.from_view(view, CONTENT_BLOCK_ID, CONTENT_INPUT_ID, user_id="U1")

    assert submission.pending_id == "review_1"
    assert submission.content == "수정본"
    assert submission.user_id == "U1"


def test_modal_submission_without_value():
    submission = ModalSubmission.from_view({"private_metadata": "review_1"}, CONTENT_BLOCK_ID, CONTENT_INPUT_ID)

    assert submission.content == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
