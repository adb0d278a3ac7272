"""
Knowledge Registration Models

Data carried through the review -> choice -> registration workflow.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.team import SectionKind


class RegistrationState(str, Enum):
    """Lifecycle of a registration request."""

    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    AWAITING_USER_CHOICE = "awaiting_user_choice"
    REGISTERED = "registered"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class RegistrationChoice(str, Enum):
    """Terminal actions a user can pick on the review prompt."""

    ORIGINAL = "original"
    IMPROVED = "improved"
    EDITED = "edited"
    CANCEL = "cancel"


class RegistrationStatus(str, Enum):
    """Outcome of resolving a pending registration."""

    REGISTERED = "registered"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    NO_IMPROVEMENT = "no_improvement"
    EMPTY_CONTENT = "empty_content"


class ReviewResult(BaseModel):
    """Critique returned by the reviewer, plus the extracted rewrite if any."""

    critique: str
    improved: Optional[str] = None


class PendingRegistration(BaseModel):
    """A reviewed submission waiting for the user's choice."""

    action_id: str
    team_key: str
    kind: SectionKind
    original: str
    improved: Optional[str] = None
    user_id: str
    channel_id: str
    thread_ts: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def edit_seed(self) -> str:
        """Initial value of the edit modal."""
        return self.improved or self.original


class ReviewPrompt(BaseModel):
    """What the chat layer needs to render the review choices."""

    action_id: str
    team_key: str
    kind: SectionKind
    review: ReviewResult

    @property
    def has_improvement(self) -> bool:
        return self.review.improved is not None


class RegistrationOutcome(BaseModel):
    """Result of a terminal action on a pending registration."""

    status: RegistrationStatus
    choice: RegistrationChoice
    pending: Optional[PendingRegistration] = None
    content: Optional[str] = None  # Text written to the document
    error: Optional[str] = None

    @property
    def consumed(self) -> bool:
        """True when the pending entry was removed by this action."""
        return self.status in (
            RegistrationStatus.REGISTERED,
            RegistrationStatus.FAILED,
            RegistrationStatus.CANCELLED,
        )
