"""
AI Core Module - LLM access for answers and registration reviews.

Key responsibilities:
- Generation backend (single completion and streamed completion)
- Review of learning/standard submissions
- Extraction of the suggested rewrite from a review
"""
