"""
Conversation Service

Answers questions in a team context: loads the team document as system
prompt, replays the thread history, streams the answer into a loading
message, and delivers the final text split under Slack's length limit.
"""

import logging
from typing import Optional

from app.ai_core.llm import ChatBackend, GenerationError
from app.integrations.slack.client import SlackClient
from app.models.thread import ConversationMessage, ConversationRole
from app.services.document_store import KnowledgeDocumentStore
from app.services.history_store import HistoryStore
from app.services.team_directory import TeamDirectory
from app.utils.helpers import (
    PREVIEW_MAX_LENGTH,
    SLACK_MAX_LENGTH,
    StreamThrottle,
    split_for_slack,
    truncate_for_slack,
)

logger = logging.getLogger(__name__)


class ConversationService:
    """Question answering with streamed preview and chunked delivery."""

    def __init__(
        self,
        directory: TeamDirectory,
        documents: KnowledgeDocumentStore,
        history: HistoryStore,
        backend: ChatBackend,
        slack: SlackClient,
        max_tokens: int = 4096,
        update_interval: float = 1.5,
        max_length: int = SLACK_MAX_LENGTH,
        preview_length: int = PREVIEW_MAX_LENGTH,
    ):
        self.directory = directory
        self.documents = documents
        self.history = history
        self.backend = backend
        self.slack = slack
        self.max_tokens = max_tokens
        self.update_interval = update_interval
        self.max_length = max_length
        self.preview_length = preview_length

    async def answer(
        self,
        channel_id: str,
        thread_ts: str,
        team_key: Optional[str],
        question: str,
    ) -> Optional[str]:
        """
        Generate and deliver an answer in a thread.

        Returns:
            The answer text, or None if generation failed (the user is told in the thread)

        Raises:
            DocumentNotFoundError: If the team document cannot be read
        """
        label = self.directory.label(team_key)
        system_prompt = await self.documents.read_document(team_key)
        previous = await self.history.get_history(channel_id, thread_ts)

        await self.history.save_turn(channel_id, thread_ts, team_key, ConversationRole.USER, question)

        loading_ts = await self.slack.post_message(
            channel_id, f"{label} 응답 생성 중... :hourglass_flowing_sand:", thread_ts=thread_ts
        )

        throttle = StreamThrottle(self.update_interval)

        async def show_preview(accumulated: str) -> None:
            if not loading_ts or not throttle.ready():
                return
            preview = truncate_for_slack(accumulated, self.preview_length)
            try:
                await self.slack.update_message(channel_id, loading_ts, f"{label}\n\n{preview}")
            except Exception as e:
                logger.debug(f"Preview update failed: {e}")

        messages = previous + [ConversationMessage(role=ConversationRole.USER, content=question)]
        try:
            response = await self.backend.stream(
                system_prompt, messages, show_preview, max_tokens=self.max_tokens
            )
        except GenerationError as e:
            await self.deliver(channel_id, thread_ts, f"❌ 오류가 발생했습니다: {e}", loading_ts)
            return None

        await self.history.save_turn(
            channel_id, thread_ts, team_key, ConversationRole.ASSISTANT, response
        )
        await self.deliver(channel_id, thread_ts, f"{label}\n\n{response}", loading_ts)
        logger.info(f"Answered in {channel_id}:{thread_ts} as {team_key or 'root'} ({len(response)} chars)")
        return response

    async def deliver(
        self,
        channel_id: str,
        thread_ts: str,
        text: str,
        placeholder_ts: Optional[str] = None,
    ) -> None:
        """Send text as one or more thread messages; the first replaces the placeholder."""
        chunks = split_for_slack(text, self.max_length)
        if not chunks:
            return

        first, rest = chunks[0], chunks[1:]
        if placeholder_ts:
            await self.slack.update_message(channel_id, placeholder_ts, first)
        else:
            await self.slack.post_message(channel_id, first, thread_ts=thread_ts)

        for chunk in rest:
            await self.slack.post_message(channel_id, chunk, thread_ts=thread_ts)
