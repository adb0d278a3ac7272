"""
Slack Event Models

Inbound Slack payloads converted into explicit variants, one per event kind.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel


class MentionEvent(BaseModel):
    """An app_mention event."""

    kind: Literal["mention"] = "mention"
    text: str = ""
    user_id: Optional[str] = None
    channel_id: str
    ts: str
    thread_ts: Optional[str] = None  # Set when the mention is inside a thread
    files: List[Dict[str, Any]] = []

    @property
    def reply_thread_ts(self) -> str:
        """Thread to reply into; a top-level mention starts its own thread."""
        return self.thread_ts or self.ts

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "MentionEvent":
        return cls(
            text=event.get("text") or "",
            user_id=event.get("user"),
            channel_id=event["channel"],
            ts=event["ts"],
            thread_ts=event.get("thread_ts"),
            files=event.get("files") or [],
        )


class ThreadMessageEvent(BaseModel):
    """A plain message event posted inside a thread."""

    kind: Literal["thread_message"] = "thread_message"
    text: str = ""
    user_id: Optional[str] = None
    channel_id: str
    ts: str
    thread_ts: str
    bot_id: Optional[str] = None
    subtype: Optional[str] = None

    def is_relevant(self, bot_user_id: Optional[str]) -> bool:
        """Skip bot messages, edits/joins, and messages that mention the bot."""
        if self.bot_id:
            return False
        if self.subtype and self.subtype != "file_share":
            return False
        if bot_user_id and f"<@{bot_user_id}>" in self.text:
            return False
        return True

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> Optional["ThreadMessageEvent"]:
        """Returns None for messages that are not thread replies."""
        if not event.get("thread_ts") or not event.get("channel"):
            return None
        return cls(
            text=event.get("text") or "",
            user_id=event.get("user"),
            channel_id=event["channel"],
            ts=event.get("ts", ""),
            thread_ts=event["thread_ts"],
            bot_id=event.get("bot_id"),
            subtype=event.get("subtype"),
        )


class ActionClick(BaseModel):
    """A button click on the review prompt."""

    kind: Literal["action"] = "action"
    action_id: str  # Slack action_id, e.g. "register_original"
    pending_id: Optional[str] = None  # Button value: the pending registration id
    user_id: Optional[str] = None
    channel_id: Optional[str] = None
    trigger_id: Optional[str] = None

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "ActionClick":
        action = (body.get("actions") or [{}])[0]
        channel = body.get("channel") or {}
        container = body.get("container") or {}
        user = body.get("user")
        return cls(
            action_id=action.get("action_id", ""),
            pending_id=action.get("value"),
            user_id=user.get("id") if isinstance(user, dict) else user,
            channel_id=channel.get("id") or container.get("channel_id"),
            trigger_id=body.get("trigger_id"),
        )


class ModalSubmission(BaseModel):
    """Submission of the edit-before-register modal."""

    kind: Literal["modal_submit"] = "modal_submit"
    callback_id: str
    pending_id: str
    content: str = ""
    user_id: Optional[str] = None

    @classmethod
    def from_view(
        cls,
        view: Dict[str, Any],
        block_id: str,
        input_action_id: str,
        user_id: Optional[str] = None,
    ) -> "ModalSubmission":
        values = (view.get("state") or {}).get("values") or {}
        value = (values.get(block_id) or {}).get(input_action_id) or {}
        return cls(
            callback_id=view.get("callback_id", ""),
            pending_id=view.get("private_metadata", ""),
            content=(value.get("value") or "").strip(),
            user_id=user_id,
        )
