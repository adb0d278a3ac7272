"""
Team and Command Models

Static team descriptors and the value produced by the command parser.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommandType(str, Enum):
    """Intent carried by a parsed mention."""

    QUESTION = "question"
    LEARNING = "learning"
    STANDARD = "standard"
    LEARNING_LIST = "learning-list"
    STANDARD_LIST = "standard-list"


class SectionKind(str, Enum):
    """Knowledge document sections that accept registered items."""

    LEARNING = "learning"
    STANDARD = "standard"

    @property
    def label(self) -> str:
        return "💡 학습" if self is SectionKind.LEARNING else "⛔ 기준"

    @property
    def short_label(self) -> str:
        return "학습" if self is SectionKind.LEARNING else "기준"


class TeamDescriptor(BaseModel):
    """A team context. Defined at startup, never mutated."""

    model_config = ConfigDict(frozen=True)

    key: str  # Canonical key, e.g. "마케팅"
    name: str  # Display name, e.g. "마케팅팀"
    folder: str
    document_path: str  # Relative to the knowledge root
    emoji: str

    @property
    def label(self) -> str:
        return f"{self.emoji} {self.name}"


class ParsedCommand(BaseModel):
    """Result of parsing a mention. team_key None means the root (CEO) context."""

    team_key: Optional[str] = None
    type: CommandType = CommandType.QUESTION
    body: str = ""

    @property
    def section_kind(self) -> Optional[SectionKind]:
        """Section targeted by registration and list intents."""
        if self.type in (CommandType.LEARNING, CommandType.LEARNING_LIST):
            return SectionKind.LEARNING
        if self.type in (CommandType.STANDARD, CommandType.STANDARD_LIST):
            return SectionKind.STANDARD
        return None

    @property
    def is_registration(self) -> bool:
        return self.type in (CommandType.LEARNING, CommandType.STANDARD)

    @property
    def is_listing(self) -> bool:
        return self.type in (CommandType.LEARNING_LIST, CommandType.STANDARD_LIST)


class SettingsAction(str, Enum):
    """Channel setting commands."""

    SET = "set"
    CLEAR = "clear"
    SHOW = "show"


class SettingsCommand(BaseModel):
    """A parsed channel setting command (`설정 <team>`, `설정해제`, `설정`)."""

    action: SettingsAction
    team_name: Optional[str] = None  # Raw argument, resolved by the caller
