"""
Slack API Client

Responsibilities:
- chat.postMessage / chat.update / chat.postEphemeral for replies
- views.open for the edit-before-register modal
- conversations.info for channel names (cached per process)
"""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from app.config import get_settings
from typing import List, Optional, Dict, Any
import asyncio
import logging

logger = logging.getLogger(__name__)


class SlackClient:
    """Thin async wrapper over the blocking slack_sdk WebClient."""

    def __init__(self, client: Optional[WebClient] = None):
        settings = get_settings()
        self.client = client or WebClient(token=settings.slack_bot_token)
        self._channel_names: Dict[str, str] = {}

    async def post_message(
        self,
        channel_id: str,
        text: str,
        thread_ts: Optional[str] = None,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[str]:
        """
        Post a message, optionally into a thread.

        Returns:
            The ts of the posted message, or None if Slack did not return one
        """
        params: Dict[str, Any] = {"channel": channel_id, "text": text}
        if thread_ts:
            params["thread_ts"] = thread_ts
        if blocks:
            params["blocks"] = blocks

        try:
            result = await asyncio.to_thread(self.client.chat_postMessage, **params)
            return result.get("ts")
        except SlackApiError as e:
            logger.error(f"Slack API error posting to {channel_id}: {e.response['error']}")
            raise

    async def update_message(self, channel_id: str, ts: str, text: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.chat_update, channel=channel_id, ts=ts, text=text
            )
        except SlackApiError as e:
            logger.error(f"Slack API error updating {ts}: {e.response['error']}")
            raise

    async def post_ephemeral(self, channel_id: str, user_id: str, text: str) -> None:
        """Post a message visible only to user_id."""
        try:
            await asyncio.to_thread(
                self.client.chat_postEphemeral,
                channel=channel_id,
                user=user_id,
                text=text,
            )
        except SlackApiError as e:
            logger.error(f"Slack API error posting ephemeral: {e.response['error']}")
            raise

    async def open_modal(self, trigger_id: str, view: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self.client.views_open, trigger_id=trigger_id, view=view)
        except SlackApiError as e:
            logger.error(f"Slack API error opening modal: {e.response['error']}")
            raise

    async def get_channel_name(self, channel_id: str) -> Optional[str]:
        """
        Look up a channel's name. Successful lookups are cached; failures
        return None and are retried next time.
        """
        if channel_id in self._channel_names:
            return self._channel_names[channel_id]

        try:
            result = await asyncio.to_thread(
                self.client.conversations_info, channel=channel_id
            )
        except SlackApiError as e:
            logger.warning(f"Channel lookup failed for {channel_id}: {e.response['error']}")
            return None

        name = (result.get("channel") or {}).get("name")
        logger.info(f"Channel lookup {channel_id} -> {name}")
        if name:
            self._channel_names[channel_id] = name
        return name
