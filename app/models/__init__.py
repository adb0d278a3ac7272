# Shared data models
from app.models.team import (
    CommandType,
    ParsedCommand,
    SectionKind,
    SettingsAction,
    SettingsCommand,
    TeamDescriptor,
)
from app.models.thread import (
    ConversationMessage,
    ConversationRole,
    ThreadRecord,
    Turn,
)
from app.models.registration import (
    PendingRegistration,
    RegistrationChoice,
    RegistrationOutcome,
    RegistrationState,
    RegistrationStatus,
    ReviewPrompt,
    ReviewResult,
)

__all__ = [
    "CommandType",
    "ParsedCommand",
    "SectionKind",
    "SettingsAction",
    "SettingsCommand",
    "TeamDescriptor",
    "ConversationMessage",
    "ConversationRole",
    "ThreadRecord",
    "Turn",
    "PendingRegistration",
    "RegistrationChoice",
    "RegistrationOutcome",
    "RegistrationState",
    "RegistrationStatus",
    "ReviewPrompt",
    "ReviewResult",
]
