"""Input validation utilities."""

import os
import re
from typing import Optional


def validate_password_strength(password: str) -> tuple[bool, list[str]]:
    """
    Validate password strength.

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if len(password) > 128:
        errors.append("Password must be less than 128 characters")

    if not re.search(r'[A-Za-z]', password):
        errors.append("Password must contain at least one letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one digit")

    return len(errors) == 0, errors


def sanitize_filename(filename: Optional[str], default: str = "audio.webm") -> str:
    """
    Reduce an uploaded filename to a safe basename.

    Args:
        filename: Client-supplied filename (may be None or contain paths)
        default: Name used when nothing usable remains

    Returns:
        Sanitized filename
    """
    if not filename:
        return default

    name = os.path.basename(filename.replace("\\", "/"))
    name = re.sub(r'[^A-Za-z0-9._-]', '_', name).strip('._')
    return name[:255] or default


def is_audio_content_type(content_type: Optional[str]) -> bool:
    """Accept audio/* and the generic binary type browsers use for recorder blobs."""
    if not content_type:
        return True
    base = content_type.split(";", 1)[0].strip().lower()
    return base.startswith("audio/") or base == "application/octet-stream"
