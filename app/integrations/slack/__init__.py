# Slack integration module
from app.integrations.slack.client import SlackClient
from app.integrations.slack.models import (
    ActionClick,
    MentionEvent,
    ModalSubmission,
    ThreadMessageEvent,
)

__all__ = [
    "SlackClient",
    "ActionClick",
    "MentionEvent",
    "ModalSubmission",
    "ThreadMessageEvent",
]
