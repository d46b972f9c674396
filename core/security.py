"""
Security utilities.

Provides password hashing, signed access tokens and audit logging for
HR review actions.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

import bcrypt
import jwt

from core.config import settings

logger = logging.getLogger("security.audit")


# ==================== Passwords ==================== #

def hash_password(password: str) -> str:
    """Hash a password with bcrypt and a per-password salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ==================== Tokens ==================== #

@dataclass
class JWTPayload:
    """Decoded access token claims."""

    user_id: str
    session_id: str
    role: str
    issued_at: datetime
    expires_at: datetime


def generate_session_id() -> str:
    """Generate an opaque identifier for a login session."""
    return uuid.uuid4().hex


def create_access_token(
    user_id: str,
    session_id: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token bound to a login session.

    Args:
        user_id: Subject of the token
        session_id: Session the token belongs to; revoking it revokes the token
        role: User role, informational only (the database is authoritative)
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "sid": session_id,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_jwt_token(token: str) -> JWTPayload:
    """
    Verify signature and expiry of an access token.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Token is malformed, tampered with or missing claims
    """
    decoded = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "sid", "exp", "iat"]},
    )
    return JWTPayload(
        user_id=decoded["sub"],
        session_id=decoded["sid"],
        role=decoded.get("role", "candidate"),
        issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
    )


# ==================== Audit ==================== #

class AuditAction(str, Enum):
    """Audit log action types."""
    VIEW = "VIEW"
    LIST = "LIST"
    UPDATE = "UPDATE"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    INTERVIEW = "INTERVIEW"
    EVALUATION = "EVALUATION"


def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[str] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an audit event for HR review tracking.

    This creates a structured log entry suitable for SIEM ingestion.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id else None,
        "user_id": user_id,
        "details": details,
    }
    logger.info(json.dumps(event))
