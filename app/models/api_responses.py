"""
API Response Models

Pydantic models for the admin HTTP endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.team import SectionKind


class TeamSummary(BaseModel):
    """One entry of the team directory."""

    key: str = Field(..., description="Canonical team key")
    name: str = Field(..., description="Display name")
    emoji: str = Field(..., description="Team glyph")
    document_path: str = Field(..., description="Document path relative to the knowledge root")
    aliases: List[str] = Field(default_factory=list, description="Short aliases")


class KnowledgeItemsResponse(BaseModel):
    """Registered items of one section of a team document."""

    team: str = Field(..., description="Canonical team key")
    kind: SectionKind = Field(..., description="learning or standard")
    items: List[str] = Field(default_factory=list, description="Bullet texts in document order")
    total: int = Field(0, description="Number of items")


class ChannelTeamRequest(BaseModel):
    """Body of a channel team update."""

    team: str = Field(..., description="Team key or alias")


class ChannelTeamResponse(BaseModel):
    """Persisted team setting of a channel."""

    channel_id: str = Field(..., description="Slack channel ID")
    team: Optional[str] = Field(None, description="Team key, or null when unset")
