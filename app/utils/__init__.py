"""
Utility package exports
"""

from app.utils.helpers import split_for_slack, truncate_for_slack, StreamThrottle

__all__ = ["split_for_slack", "truncate_for_slack", "StreamThrottle"]
