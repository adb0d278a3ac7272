"""
Context Resolver

Decides which team context applies to an inbound message when the mention
itself names no team. First hit wins:

1. Team already recorded for the thread (conversational continuity)
2. Team persisted for the channel via the settings command
3. Team inferred from the channel's name
"""

import logging
from typing import Awaitable, Callable, Optional

from app.services.history_store import HistoryStore
from app.services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)

ChannelNameLookup = Callable[[str], Awaitable[Optional[str]]]


class ContextResolver:
    """Layered team resolution. None means the root (CEO) context."""

    def __init__(
        self,
        directory: TeamDirectory,
        history: HistoryStore,
        channel_name_lookup: ChannelNameLookup,
    ):
        self.directory = directory
        self.history = history
        self.channel_name_lookup = channel_name_lookup

    async def resolve(
        self,
        channel_id: str,
        thread_ts: Optional[str] = None,
        explicit_team: Optional[str] = None,
    ) -> Optional[str]:
        """
        Resolve the active team for a message.

        Args:
            channel_id: Channel the message was posted in
            thread_ts: Thread root, only when the message is inside an existing thread
            explicit_team: Team parsed from the message itself, if any

        Returns:
            Team key, or None for the root context
        """
        if explicit_team:
            return explicit_team

        if thread_ts:
            thread_team = await self.history.get_thread_team(channel_id, thread_ts)
            if thread_team:
                if thread_team in self.directory:
                    logger.info(f"Team for {channel_id}:{thread_ts} -> thread: {thread_team}")
                    return thread_team
                logger.warning(f"Ignoring thread team {channel_id}:{thread_ts} -> unknown team {thread_team}")

        return await self.resolve_channel(channel_id)

    async def resolve_channel(self, channel_id: str) -> Optional[str]:
        """Channel-level steps only: persisted setting, then channel name."""
        setting = await self.history.get_channel_team_setting(channel_id)
        if setting:
            if setting in self.directory:
                logger.info(f"Team for {channel_id} -> channel setting: {setting}")
                return setting
            logger.warning(f"Ignoring channel setting {channel_id} -> unknown team {setting}")

        name = await self.channel_name_lookup(channel_id)
        if not name:
            logger.info(f"Team for {channel_id} -> channel name unavailable")
            return None

        team = self.directory.resolve_channel(name)
        logger.info(f"Team for {channel_id} -> channel #{name}: {team}")
        return team
