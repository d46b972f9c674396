"""Formatting utilities for display and prompt building."""

from typing import Optional


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def bucket_label(value: Optional[str], default: str = "Unassigned") -> str:
    """Label used to group records whose grouping field may be empty."""
    if value is None or not value.strip():
        return default
    return value.strip()
