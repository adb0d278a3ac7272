"""
Channel Settings API Routes

Manage the persisted channel -> team setting used by the context resolver.
"""

from fastapi import APIRouter, HTTPException, Request
import logging

from app.models.api_responses import ChannelTeamRequest, ChannelTeamResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{channel_id}/team", response_model=ChannelTeamResponse)
async def get_channel_team(channel_id: str, request: Request):
    history = request.app.state.services.history
    team = await history.get_channel_team_setting(channel_id)
    return ChannelTeamResponse(channel_id=channel_id, team=team)


@router.put("/{channel_id}/team", response_model=ChannelTeamResponse)
async def set_channel_team(channel_id: str, payload: ChannelTeamRequest, request: Request):
    """Set the channel's team. Accepts a canonical key or an alias."""
    services = request.app.state.services
    team_key = services.directory.resolve(payload.team)
    if not team_key:
        raise HTTPException(status_code=400, detail=f"Unknown team: {payload.team}")

    await services.history.set_channel_team(channel_id, team_key)
    return ChannelTeamResponse(channel_id=channel_id, team=team_key)


@router.delete("/{channel_id}/team", response_model=ChannelTeamResponse)
async def clear_channel_team(channel_id: str, request: Request):
    history = request.app.state.services.history
    await history.clear_channel_team(channel_id)
    return ChannelTeamResponse(channel_id=channel_id, team=None)
