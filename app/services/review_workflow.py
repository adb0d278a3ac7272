"""
Registration Review Workflow

Submitted -> UnderReview -> AwaitingUserChoice -> Registered | Cancelled | Expired

A reviewed submission is parked in the PendingRegistrationStore under a fresh
action id. The first terminal action (original / improved / edited / cancel)
removes it before doing any I/O, so any later action with the same id finds
nothing and reports the registration as expired.
"""

import logging
import time
from collections import OrderedDict
from typing import Callable, Optional

from app.ai_core.review import KnowledgeReviewer
from app.models.registration import (
    PendingRegistration,
    RegistrationChoice,
    RegistrationOutcome,
    RegistrationState,
    RegistrationStatus,
    ReviewPrompt,
)
from app.models.team import SectionKind
from app.services.document_store import KnowledgeDocumentStore, normalize_item

logger = logging.getLogger(__name__)


def new_action_id() -> str:
    """Timestamp based id; a collision only overwrites an older pending entry."""
    return f"review_{time.time_ns()}"


class PendingRegistrationStore:
    """In-memory pending registrations, bounded by TTL and capacity."""

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, tuple[float, PendingRegistration]]" = OrderedDict()

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._entries)

    def __contains__(self, action_id: object) -> bool:
        return self.get(action_id) is not None  # type: ignore[arg-type]

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [
            action_id
            for action_id, (created, _) in self._entries.items()
            if now - created >= self.ttl_seconds
        ]
        for action_id in expired:
            del self._entries[action_id]
        if expired:
            logger.info(f"Evicted {len(expired)} expired pending registrations")

    def put(self, pending: PendingRegistration) -> None:
        self._evict_expired()
        self._entries.pop(pending.action_id, None)
        self._entries[pending.action_id] = (self._clock(), pending)
        while len(self._entries) > self.max_entries:
            dropped, _ = self._entries.popitem(last=False)
            logger.warning(f"Pending registration capacity reached, dropped {dropped}")

    def get(self, action_id: str) -> Optional[PendingRegistration]:
        """Look without consuming."""
        self._evict_expired()
        entry = self._entries.get(action_id)
        return entry[1] if entry else None

    def pop(self, action_id: str) -> Optional[PendingRegistration]:
        """Consume an entry. Returns None if it is missing or expired."""
        self._evict_expired()
        entry = self._entries.pop(action_id, None)
        return entry[1] if entry else None


class RegistrationReviewWorkflow:
    """Drives a registration from submission to its terminal state."""

    def __init__(
        self,
        documents: KnowledgeDocumentStore,
        reviewer: KnowledgeReviewer,
        pending: PendingRegistrationStore,
        id_factory: Callable[[], str] = new_action_id,
    ):
        self.documents = documents
        self.reviewer = reviewer
        self.pending = pending
        self.id_factory = id_factory

    async def submit(
        self,
        team_key: str,
        kind: SectionKind,
        content: str,
        user_id: str,
        channel_id: str,
        thread_ts: str,
    ) -> ReviewPrompt:
        """
        Review a submission and park it awaiting the user's choice.

        Raises:
            DocumentNotFoundError: If the team document cannot be read
            ReviewError: If the review call fails
        """
        logger.info(f"Registration {RegistrationState.SUBMITTED.value}: {team_key} {kind.value} by {user_id}")
        document = await self.documents.read_document(team_key)

        logger.info(f"Registration {RegistrationState.UNDER_REVIEW.value}: {team_key} {kind.value}")
        review = await self.reviewer.review(document, kind, content)

        action_id = self.id_factory()
        self.pending.put(
            PendingRegistration(
                action_id=action_id,
                team_key=team_key,
                kind=kind,
                original=content,
                improved=review.improved,
                user_id=user_id,
                channel_id=channel_id,
                thread_ts=thread_ts,
            )
        )
        logger.info(f"Registration {RegistrationState.AWAITING_USER_CHOICE.value}: {action_id}")

        return ReviewPrompt(action_id=action_id, team_key=team_key, kind=kind, review=review)

    def begin_edit(self, action_id: str) -> Optional[PendingRegistration]:
        """Pending entry to pre-fill the edit form with; it stays pending."""
        return self.pending.get(action_id)

    async def resolve(
        self,
        action_id: str,
        choice: RegistrationChoice,
        edited_text: Optional[str] = None,
    ) -> RegistrationOutcome:
        """Apply a terminal action. Never raises for a missing or expired entry."""
        current = self.pending.get(action_id)
        if current is None:
            logger.info(f"Registration {RegistrationState.EXPIRED.value}: {action_id} ({choice.value})")
            return RegistrationOutcome(status=RegistrationStatus.EXPIRED, choice=choice)

        if choice is RegistrationChoice.CANCEL:
            self.pending.pop(action_id)
            logger.info(f"Registration {RegistrationState.CANCELLED.value}: {action_id}")
            return RegistrationOutcome(
                status=RegistrationStatus.CANCELLED, choice=choice, pending=current
            )

        if choice is RegistrationChoice.ORIGINAL:
            content = current.original
        elif choice is RegistrationChoice.IMPROVED:
            if not current.improved:
                return RegistrationOutcome(
                    status=RegistrationStatus.NO_IMPROVEMENT, choice=choice, pending=current
                )
            content = current.improved
        else:
            content = normalize_item(edited_text or "")
            if not content:
                return RegistrationOutcome(
                    status=RegistrationStatus.EMPTY_CONTENT, choice=choice, pending=current
                )

        # Consume before any await so a concurrent second action sees nothing
        pending = self.pending.pop(action_id)
        if pending is None:
            return RegistrationOutcome(status=RegistrationStatus.EXPIRED, choice=choice)

        try:
            await self.documents.append_item(pending.team_key, pending.kind, content)
        except Exception as e:
            logger.error(f"Registration {action_id} failed: {e}", exc_info=True)
            return RegistrationOutcome(
                status=RegistrationStatus.FAILED,
                choice=choice,
                pending=pending,
                content=content,
                error=str(e),
            )

        logger.info(f"Registration {RegistrationState.REGISTERED.value}: {action_id} ({choice.value})")
        return RegistrationOutcome(
            status=RegistrationStatus.REGISTERED,
            choice=choice,
            pending=pending,
            content=content,
        )
