"""
Tests for the team directory.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app.services.team_directory import ROOT_LABEL, TeamDirectory, UnknownTeamError
from tests.fakes import sample_team


@pytest.fixture
def directory():
    return TeamDirectory()


def test_resolve_key_and_alias(directory):
    assert directory.resolve("마케팅") == "마케팅"
    assert directory.resolve("mk") == "마케팅"
    assert directory.resolve("마케") == "마케팅"
    assert directory.resolve(" dev ") == "개발"


def test_resolve_unknown_and_case(directory):
    assert directory.resolve("영업") is None
    assert directory.resolve("MK") is None
    assert directory.resolve("") is None


def test_get(directory):
    team = directory.get("마케팅")

    assert team.name == "마케팅팀"
    assert team.document_path == "marketing/CLAUDE.md"
    assert team.label == "📢 마케팅팀"

    with pytest.raises(UnknownTeamError):
        directory.get("mk")


def test_resolve_channel(directory):
    """Test exact names, prefixes and the tie-break order."""
    assert directory.resolve_channel("marketing") == "마케팅"
    assert directory.resolve_channel("MK-campaigns") == "마케팅"
    assert directory.resolve_channel("dev_backend") == "개발"
    assert directory.resolve_channel("ct-blog") == "콘텐츠"
    assert directory.resolve_channel("general") is None
    assert directory.resolve_channel("mkt") is None


def test_labels(directory):
    assert directory.label(None) == ROOT_LABEL
    assert directory.label("개발") == "💻 개발팀"


def test_aliases_for(directory):
    assert set(directory.aliases_for("마케팅")) == {"마케", "mk"}
    assert directory.aliases_for("재무") == ["fn"]


def test_contains(directory):
    assert "마케팅" in directory
    assert "mk" not in directory


def test_custom_directory():
    directory = TeamDirectory(teams=[sample_team()], aliases={"m": "마케팅"}, channel_hints={})

    assert [team.key for team in directory.teams] == ["마케팅"]
    assert directory.resolve("m") == "마케팅"
    assert directory.resolve_channel("marketing") is None


def test_alias_to_unknown_team_rejected():
    with pytest.raises(UnknownTeamError):
        TeamDirectory(teams=[sample_team()], aliases={"d": "개발"}, channel_hints={})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
