"""
Tests for the Slack mention parser.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app.integrations.slack.parser import (
    parse_command,
    parse_settings_command,
    strip_mentions,
)
from app.models.team import CommandType, SettingsAction
from app.services.team_directory import TeamDirectory


@pytest.fixture
def directory():
    return TeamDirectory()


class TestParseCommand:
    """Test suite for mention parsing."""

    def test_learning_registration(self, directory):
        """Test the team-학습 form with a body."""
        result = parse_command("<@U0BOT123> 마케팅-학습 CTR 높은 방법", directory)

        assert result.team_key == "마케팅"
        assert result.type == CommandType.LEARNING
        assert result.body == "CTR 높은 방법"

    def test_standard_registration_with_alias(self, directory):
        """Test that aliases resolve for registration commands."""
        result = parse_command("mk-기준 식약처 준수", directory)

        assert result.team_key == "마케팅"
        assert result.type == CommandType.STANDARD
        assert result.body == "식약처 준수"

    def test_list_commands(self, directory):
        """Test list commands produce an empty body even with trailing text."""
        learning = parse_command("마케팅-학습목록", directory)
        standard = parse_command("dev-기준목록 아무거나", directory)

        assert (learning.team_key, learning.type, learning.body) == (
            "마케팅",
            CommandType.LEARNING_LIST,
            "",
        )
        assert (standard.team_key, standard.type, standard.body) == (
            "개발",
            CommandType.STANDARD_LIST,
            "",
        )

    def test_team_question(self, directory):
        """Test a bare team name followed by a question."""
        result = parse_command("<@U0BOT123> 마케팅 광고 기획해줘", directory)

        assert result.team_key == "마케팅"
        assert result.type == CommandType.QUESTION
        assert result.body == "광고 기획해줘"

    def test_alias_question(self, directory):
        result = parse_command("mk 광고 기획해줘", directory)

        assert result.team_key == "마케팅"
        assert result.body == "광고 기획해줘"

    def test_no_team_question(self, directory):
        """Test that text without a team token goes to the root context."""
        result = parse_command("<@U0BOT123> 매출 분석해줘", directory)

        assert result.team_key is None
        assert result.type == CommandType.QUESTION
        assert result.body == "매출 분석해줘"

    def test_unknown_team_registration_falls_back_to_question(self, directory):
        """Test that an unresolved team keeps the whole text as the question body."""
        result = parse_command("영업-학습 고객 응대 팁", directory)

        assert result.team_key is None
        assert result.type == CommandType.QUESTION
        assert result.body == "영업-학습 고객 응대 팁"

    def test_team_resolution_is_case_sensitive(self, directory):
        result = parse_command("MK 광고", directory)

        assert result.team_key is None
        assert result.body == "MK 광고"

    def test_empty_text(self, directory):
        """Test that a bare mention is an empty root question."""
        for text in ["", "   ", "<@U0BOT123>", "<@U0BOT123>  "]:
            result = parse_command(text, directory)
            assert result.team_key is None
            assert result.type == CommandType.QUESTION
            assert result.body == ""

    def test_registration_without_body(self, directory):
        result = parse_command("마케팅-학습", directory)

        assert result.type == CommandType.LEARNING
        assert result.body == ""

    def test_newline_after_first_token(self, directory):
        result = parse_command("마케팅-학습\n첫째 줄\n둘째 줄", directory)

        assert result.type == CommandType.LEARNING
        assert result.body == "첫째 줄\n둘째 줄"

    def test_section_kind(self, directory):
        assert parse_command("마케팅-학습 x", directory).section_kind.value == "learning"
        assert parse_command("마케팅-기준목록", directory).section_kind.value == "standard"
        assert parse_command("마케팅 x", directory).section_kind is None


class TestParseSettingsCommand:
    """Test suite for channel setting commands."""

    def test_set(self, directory):
        command = parse_settings_command("<@U0BOT123> 설정 마케팅", directory)

        assert command.action == SettingsAction.SET
        assert command.team_name == "마케팅"

    def test_set_with_alias(self, directory):
        command = parse_settings_command("설정 mk", directory)

        assert command.action == SettingsAction.SET
        assert command.team_name == "mk"

    def test_clear(self, directory):
        assert parse_settings_command("설정해제", directory).action == SettingsAction.CLEAR
        assert parse_settings_command("설정 해제", directory).action == SettingsAction.CLEAR

    def test_show(self, directory):
        assert parse_settings_command("<@U0BOT123> 설정", directory).action == SettingsAction.SHOW

    def test_not_a_settings_command(self, directory):
        assert parse_settings_command("마케팅 설정 알려줘", directory) is None
        assert parse_settings_command("설정 바꾸는 법 알려줘", directory) is None
        assert parse_settings_command("", directory) is None

    def test_non_team_word_is_a_question(self, directory):
        """Test that "설정 <word>" only sets a team when the word resolves."""
        assert parse_settings_command("<@U0BOT123> 설정 알려줘", directory) is None
        assert parse_settings_command("설정 영업", directory) is None

        result = parse_command("<@U0BOT123> 설정 알려줘", directory)
        assert result.team_key is None
        assert result.type == CommandType.QUESTION
        assert result.body == "설정 알려줘"


def test_strip_mentions():
    assert strip_mentions("<@U123> 안녕 <@W456ABC>") == "안녕"
    assert strip_mentions(None) == ""
