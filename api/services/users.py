"""User account and session service functions."""

from datetime import timedelta
from typing import List, Optional
import logging

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import AuthenticationError, ConflictError, ValidationError
from core.security import (
    create_access_token,
    generate_session_id,
    hash_password,
    verify_jwt_token,
    verify_password,
)
from core.utils.datetime import ensure_utc, now
from core.utils.validators import validate_password_strength
from database.models.users import User, UserRole, UserSession

logger = logging.getLogger(__name__)


DEMO_ACCOUNTS = (
    ("demo_candidate", UserRole.CANDIDATE, "Demo Candidate"),
    ("demo_hr", UserRole.HR, "Demo HR Reviewer"),
)


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def register_user(
    db: AsyncSession,
    username: str,
    password: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    role: UserRole = UserRole.CANDIDATE,
) -> User:
    """
    Create an account with a bcrypt-hashed password.

    Raises:
        ValidationError: Password too weak
        ConflictError: Username already taken
    """
    is_valid, errors = validate_password_strength(password)
    if not is_valid:
        raise ValidationError("Requirements not met for the chosen password", errors)

    if await get_user_by_username(db, username):
        raise ConflictError("Username already exists", {"username": username})

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        full_name=full_name,
        role=role,
    )
    db.add(user)
    await db.commit()

    logger.info(f"User registered: {user.id} ({role.value})")
    return user


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    """
    Check a username/password pair.

    Raises:
        AuthenticationError: Unknown user or wrong password (indistinguishable)
    """
    user = await get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for username {username!r}")
        raise AuthenticationError("Invalid username or password")
    return user


async def create_session(db: AsyncSession, user: User) -> str:
    """Open a login session and return its signed access token."""
    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    session = UserSession(
        id=generate_session_id(),
        user_id=user.id,
        expires_at=now() + lifetime,
    )
    db.add(session)
    await db.commit()

    return create_access_token(user.id, session.id, user.role.value, expires_delta=lifetime)


async def resolve_token(db: AsyncSession, token: str) -> tuple[User, UserSession]:
    """
    Validate an access token against its signature and backing session.

    Raises:
        AuthenticationError: Token invalid, expired, or its session revoked
    """
    try:
        payload = verify_jwt_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Expired access token")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid access token")

    result = await db.execute(
        select(UserSession).where(
            UserSession.id == payload.session_id,
            UserSession.user_id == payload.user_id,
        )
    )
    session = result.scalars().first()
    if session is None or session.revoked_at is not None:
        raise AuthenticationError("Session is no longer valid")
    if ensure_utc(session.expires_at) <= now():
        raise AuthenticationError("Session has expired")

    user = await db.get(User, payload.user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    return user, session


async def revoke_session(db: AsyncSession, session: UserSession) -> None:
    """Mark a session revoked so its token stops working."""
    session.revoked_at = now()
    await db.commit()
    logger.info(f"Session revoked for user {session.user_id}")


async def init_demo_accounts(db: AsyncSession) -> List[str]:
    """
    Create the demo candidate and HR accounts when missing.

    Returns:
        Usernames created by this call
    """
    created = []
    for username, role, full_name in DEMO_ACCOUNTS:
        if await get_user_by_username(db, username):
            continue
        await register_user(
            db,
            username=username,
            password=settings.demo_password,
            full_name=full_name,
            role=role,
        )
        created.append(username)
    return created
