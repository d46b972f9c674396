"""FastAPI dependencies for dependency injection."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from agents.base import create_genai_client
from agents.interviewer.agent import EvaluationClient
from api.services.users import resolve_token
from core.config import settings
from core.exceptions import AuthenticationError
from database.engine import get_db
from database.models.users import User, UserSession


# auto_error=False so anonymous requests reach endpoints that allow them
security = HTTPBearer(auto_error=False)


@lru_cache
def get_evaluation_client() -> EvaluationClient:
    """
    Process-wide evaluation client.

    Tests override this dependency with a client wrapping a fake provider.
    """
    return EvaluationClient(
        client=create_genai_client(settings.google_api_key),
        model=settings.gemini_model,
        max_questions=settings.max_questions,
    )


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> tuple[User, UserSession]:
    """Require a valid bearer token; returns the user and its login session."""
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return await resolve_token(db, credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Get current user if authenticated, otherwise return None.
    Useful for endpoints that work both authenticated and unauthenticated.

    A token that is present but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    user, _ = await resolve_token(db, credentials.credentials)
    return user
