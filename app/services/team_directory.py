"""
Team Directory

Read-only lookup of team descriptors, short aliases, and channel-name hints.
Constructed once at startup and injected into everything that routes by team.
"""

import logging
from typing import Dict, List, Mapping, Optional

from app.models.team import TeamDescriptor

logger = logging.getLogger(__name__)


class UnknownTeamError(KeyError):
    """Raised when a team key is not in the directory."""

    pass


def _team(key: str, name: str, folder: str, emoji: str) -> TeamDescriptor:
    return TeamDescriptor(
        key=key,
        name=name,
        folder=folder,
        document_path=f"{folder}/CLAUDE.md",
        emoji=emoji,
    )


DEFAULT_TEAMS: List[TeamDescriptor] = [
    _team("마케팅", "마케팅팀", "marketing", "📢"),
    _team("콘텐츠", "콘텐츠팀", "content", "✍️"),
    _team("디자인", "디자인팀", "design", "🎨"),
    _team("개발", "개발팀", "development", "💻"),
    _team("이커머스", "이커머스팀", "ecommerce", "🛒"),
    _team("재무", "재무/경영지원팀", "finance-ops", "💰"),
    _team("전략", "전략기획실", "strategic-hq", "📋"),
    _team("에이전트컨설팅", "에이전트 컨설팅팀", "agent-consulting", "🤖"),
]

# Short alias -> canonical key
DEFAULT_ALIASES: Dict[str, str] = {
    "마케": "마케팅",
    "콘텐": "콘텐츠",
    "디자": "디자인",
    "이커": "이커머스",
    "컨설": "에이전트컨설팅",
    "mk": "마케팅",
    "ct": "콘텐츠",
    "ds": "디자인",
    "dev": "개발",
    "ec": "이커머스",
    "fn": "재무",
    "st": "전략",
    "ac": "에이전트컨설팅",
}

# Channel name (or prefix before "-"/"_") -> canonical key. Order is the tie-break.
DEFAULT_CHANNEL_HINTS: Dict[str, str] = {
    "ct": "콘텐츠",
    "mk": "마케팅",
    "ds": "디자인",
    "dev": "개발",
    "ec": "이커머스",
    "fn": "재무",
    "st": "전략",
    "ac": "에이전트컨설팅",
    "content": "콘텐츠",
    "marketing": "마케팅",
    "design": "디자인",
    "development": "개발",
    "ecommerce": "이커머스",
    "finance": "재무",
    "strategic": "전략",
    "consulting": "에이전트컨설팅",
}

ROOT_LABEL = "🏢 CEO"


class TeamDirectory:
    """Static mapping of team keys, aliases and channel-name hints."""

    def __init__(
        self,
        teams: Optional[List[TeamDescriptor]] = None,
        aliases: Optional[Mapping[str, str]] = None,
        channel_hints: Optional[Mapping[str, str]] = None,
    ):
        teams = DEFAULT_TEAMS if teams is None else teams
        self._teams: Dict[str, TeamDescriptor] = {team.key: team for team in teams}
        self._aliases: Dict[str, str] = dict(
            DEFAULT_ALIASES if aliases is None else aliases
        )
        self._channel_hints: Dict[str, str] = dict(
            DEFAULT_CHANNEL_HINTS if channel_hints is None else channel_hints
        )

        for source, mapping in (("alias", self._aliases), ("channel hint", self._channel_hints)):
            for name, key in mapping.items():
                if key not in self._teams:
                    raise UnknownTeamError(f"{source} '{name}' points to unknown team '{key}'")

    @property
    def teams(self) -> List[TeamDescriptor]:
        return list(self._teams.values())

    def __contains__(self, key: object) -> bool:
        return key in self._teams

    def get(self, key: str) -> TeamDescriptor:
        try:
            return self._teams[key]
        except KeyError:
            raise UnknownTeamError(key) from None

    def resolve(self, name: str) -> Optional[str]:
        """Exact, case-sensitive match on canonical keys first, then aliases."""
        normalized = name.strip()
        if normalized in self._teams:
            return normalized
        return self._aliases.get(normalized)

    def aliases_for(self, key: str) -> List[str]:
        return [alias for alias, target in self._aliases.items() if target == key]

    def resolve_channel(self, channel_name: str) -> Optional[str]:
        """
        Infer a team from a channel name.

        Exact match wins; otherwise the first hint for which the name starts
        with "<hint>-" or "<hint>_".
        """
        name = channel_name.lower()
        if name in self._channel_hints:
            return self._channel_hints[name]
        for prefix, key in self._channel_hints.items():
            if name.startswith(prefix + "-") or name.startswith(prefix + "_"):
                return key
        return None

    def label(self, key: Optional[str]) -> str:
        """Reply prefix for a team, or the root label when key is None."""
        if key is None:
            return ROOT_LABEL
        return self.get(key).label

    def usage_names(self) -> str:
        """Comma separated canonical keys, for guidance messages."""
        return ", ".join(self._teams)
