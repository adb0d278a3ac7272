"""
Slack Mention Parser

Splits a raw mention into team, intent and body.

Examples:
    "마케팅 광고 기획해줘"        -> team=마케팅, question, "광고 기획해줘"
    "mk 광고 기획해줘"           -> team=마케팅, question, "광고 기획해줘"
    "마케팅-학습 CTR 높은 방법"   -> team=마케팅, learning, "CTR 높은 방법"
    "마케팅-기준 식약처 준수"     -> team=마케팅, standard, "식약처 준수"
    "마케팅-학습목록"             -> team=마케팅, learning-list, ""
    "매출 분석해줘"              -> team=None, question, "매출 분석해줘"
"""

import re
from typing import Optional, Tuple

from app.models.team import CommandType, ParsedCommand, SettingsAction, SettingsCommand
from app.services.team_directory import TeamDirectory

MENTION_PATTERN = re.compile(r"<@[A-Z0-9]+>")
LIST_PATTERN = re.compile(r"^(.+)-(학습목록|기준목록)$")
REGISTER_PATTERN = re.compile(r"^(.+)-(학습|기준)$")

SETTINGS_KEYWORD = "설정"
SETTINGS_CLEAR_KEYWORD = "설정해제"


def strip_mentions(text: str) -> str:
    """Remove <@U123> mention tags and surrounding whitespace."""
    return MENTION_PATTERN.sub("", text or "").strip()


def _split_first_token(cleaned: str) -> Tuple[str, str]:
    parts = cleaned.split(None, 1)
    first = parts[0]
    rest = parts[1].strip() if len(parts) > 1 else ""
    return first, rest


def parse_command(text: str, directory: TeamDirectory) -> ParsedCommand:
    """
    Parse mention text into a ParsedCommand.

    Never raises: anything that is not a recognised team command becomes a
    question for the root context with the full cleaned text as body.
    """
    cleaned = strip_mentions(text)
    if not cleaned:
        return ParsedCommand()

    first, rest = _split_first_token(cleaned)

    list_match = LIST_PATTERN.match(first)
    if list_match:
        team_key = directory.resolve(list_match.group(1))
        if team_key:
            command_type = (
                CommandType.LEARNING_LIST
                if list_match.group(2) == "학습목록"
                else CommandType.STANDARD_LIST
            )
            return ParsedCommand(team_key=team_key, type=command_type, body="")

    register_match = REGISTER_PATTERN.match(first)
    if register_match:
        team_key = directory.resolve(register_match.group(1))
        if team_key:
            command_type = (
                CommandType.LEARNING
                if register_match.group(2) == "학습"
                else CommandType.STANDARD
            )
            return ParsedCommand(team_key=team_key, type=command_type, body=rest)

    team_key = directory.resolve(first)
    if team_key:
        return ParsedCommand(team_key=team_key, type=CommandType.QUESTION, body=rest)

    return ParsedCommand(team_key=None, type=CommandType.QUESTION, body=cleaned)


def parse_settings_command(text: str, directory: TeamDirectory) -> Optional[SettingsCommand]:
    """
    Recognise channel setting commands.

    "설정 마케팅" -> SET, "설정해제" / "설정 해제" -> CLEAR, "설정" -> SHOW.
    Returns None for anything else, including "설정 <word>" where the word
    is not a team, so such text goes through parse_command as a question.
    """
    cleaned = strip_mentions(text)
    if not cleaned:
        return None

    first, rest = _split_first_token(cleaned)

    if first == SETTINGS_CLEAR_KEYWORD and not rest:
        return SettingsCommand(action=SettingsAction.CLEAR)

    if first != SETTINGS_KEYWORD:
        return None

    if not rest:
        return SettingsCommand(action=SettingsAction.SHOW)
    if rest == "해제":
        return SettingsCommand(action=SettingsAction.CLEAR)
    if not directory.resolve(rest):
        # "설정 알려줘" is a question, not a command
        return None
    return SettingsCommand(action=SettingsAction.SET, team_name=rest)
