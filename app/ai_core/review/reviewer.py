"""
Knowledge Registration Reviewer

Asks the LLM to critique a learning/standard submission against the team's
current document, and pulls a suggested rewrite out of the critique.
"""

import logging
import re
from typing import Optional, Protocol

from app.ai_core.llm import ChatBackend
from app.ai_core.prompts.review import REVIEW_SYSTEM_PREFIX, create_review_prompt
from app.models.registration import ReviewResult
from app.models.team import SectionKind
from app.models.thread import ConversationMessage, ConversationRole

logger = logging.getLogger(__name__)


class ReviewError(Exception):
    """Raised when the review call to the LLM fails."""

    pass


class ImprovementExtractor(Protocol):
    """Finds the suggested rewrite in a critique, if there is one."""

    def extract(self, critique: str) -> Optional[str]: ...


class MarkerImprovementExtractor:
    """Takes the rest of the first line that starts with the "개선안:" marker."""

    pattern = re.compile(r"개선안:\s*(.+?)(?:\n|$)")

    def extract(self, critique: str) -> Optional[str]:
        match = self.pattern.search(critique)
        if not match:
            return None
        improved = match.group(1).strip()
        return improved or None


class KnowledgeReviewer:
    """Runs the review prompt and packages the result."""

    def __init__(
        self,
        backend: ChatBackend,
        extractor: Optional[ImprovementExtractor] = None,
        max_tokens: int = 2048,
    ):
        self.backend = backend
        self.extractor = extractor or MarkerImprovementExtractor()
        self.max_tokens = max_tokens

    async def review(self, document: str, kind: SectionKind, content: str) -> ReviewResult:
        """
        Review a submission.

        Args:
            document: Current knowledge document of the team
            kind: learning or standard
            content: Submitted text

        Returns:
            ReviewResult with the critique and the improved text, if any

        Raises:
            ReviewError: If the LLM call fails
        """
        prompt = create_review_prompt(kind, content)
        try:
            critique = await self.backend.complete(
                document,
                [ConversationMessage(role=ConversationRole.USER, content=prompt)],
                max_tokens=self.max_tokens,
                system_prefix=REVIEW_SYSTEM_PREFIX,
            )
        except Exception as e:
            raise ReviewError(f"Review failed: {e}") from e

        improved = self.extractor.extract(critique)
        if improved == content.strip():
            improved = None

        logger.info(f"Reviewed {kind.value} submission ({len(content)} chars), improvement: {improved is not None}")
        return ReviewResult(critique=critique, improved=improved)
