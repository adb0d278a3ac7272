"""Prompts package."""

from app.ai_core.prompts.review import (
    REVIEW_SYSTEM_PREFIX,
    create_review_prompt,
)

__all__ = [
    "REVIEW_SYSTEM_PREFIX",
    "create_review_prompt",
]
