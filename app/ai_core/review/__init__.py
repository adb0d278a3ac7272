"""Registration review: LLM critique and improvement extraction."""

from app.ai_core.review.reviewer import (
    ImprovementExtractor,
    KnowledgeReviewer,
    MarkerImprovementExtractor,
    ReviewError,
)

__all__ = [
    "ImprovementExtractor",
    "KnowledgeReviewer",
    "MarkerImprovementExtractor",
    "ReviewError",
]
