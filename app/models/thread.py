"""
Conversation Thread Model

Turns and per-thread records persisted by the history store.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict


class ConversationRole(str, Enum):
    """Author of a turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """Role/content pair handed to the generation backend."""

    role: ConversationRole
    content: str


class Turn(BaseModel):
    """A stored turn. Immutable once appended."""

    role: ConversationRole
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> ConversationMessage:
        return ConversationMessage(role=self.role, content=self.content)


class ThreadRecord(BaseModel):
    """History of one Slack thread, keyed by (channel, thread root ts)."""

    team: Optional[str] = None  # First writer wins
    messages: List[Turn] = []

    def assign_team(self, team: Optional[str]) -> None:
        if team and not self.team:
            self.team = team

    def append(self, turn: Turn, max_turns: int) -> None:
        """Append a turn and evict the oldest ones beyond max_turns."""
        self.messages.append(turn)
        if len(self.messages) > max_turns:
            self.messages = self.messages[-max_turns:]


def thread_key(channel_id: str, thread_ts: str) -> str:
    """Key of a thread record in the persisted table."""
    return f"{channel_id}:{thread_ts}"


ThreadTable = Dict[str, ThreadRecord]
