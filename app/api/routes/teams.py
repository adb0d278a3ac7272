"""
Team Knowledge API Routes

Read access to the team directory and the registered learning/standard items.
"""

from fastapi import APIRouter, HTTPException, Request
from typing import List
import logging

from app.models.api_responses import KnowledgeItemsResponse, TeamSummary
from app.models.team import SectionKind
from app.services.document_store import DocumentNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[TeamSummary])
async def list_teams(request: Request):
    """List every team with its aliases."""
    directory = request.app.state.services.directory
    return [
        TeamSummary(
            key=team.key,
            name=team.name,
            emoji=team.emoji,
            document_path=team.document_path,
            aliases=directory.aliases_for(team.key),
        )
        for team in directory.teams
    ]


@router.get("/{team}/items/{kind}", response_model=KnowledgeItemsResponse)
async def list_items(team: str, kind: SectionKind, request: Request):
    """
    List registered items of a team's learning or standard section.

    Examples:
    - GET /api/teams/마케팅/items/learning
    - GET /api/teams/mk/items/standard
    """
    services = request.app.state.services
    team_key = services.directory.resolve(team)
    if not team_key:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team}")

    try:
        items = await services.documents.list_items(team_key, kind)
    except DocumentNotFoundError as e:
        logger.error(f"Listing {kind.value} for {team_key} failed: {e}")
        raise HTTPException(status_code=404, detail=str(e))

    return KnowledgeItemsResponse(team=team_key, kind=kind, items=items, total=len(items))
