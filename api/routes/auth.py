"""
Authentication endpoints.

Provides:
- Username/password registration and login
- Current user lookup
- Logout (revokes the session behind the token)
- Demo account bootstrap
"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_session
from api.schemas.auth import (
    AuthResponse,
    InitDemoResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
)
from api.schemas.common import MessageResponse
from api.services import users as user_service
from core.config import settings
from core.exceptions import PermissionDeniedError
from database.engine import get_db
from database.models.users import User, UserRole, UserSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    Create an account and log it in.

    - **username**: unique, 3-100 characters
    - **password**: at least 8 characters with a letter and a digit
    - **role**: candidate (default) or hr
    """
    user = await user_service.register_user(
        db,
        username=request.username,
        password=request.password,
        email=request.email,
        full_name=request.full_name,
        role=UserRole(request.role),
    )
    token = await user_service.create_session(db, user)
    return AuthResponse(user=user, token=token)


@router.post("/login", response_model=AuthResponse, summary="Log in")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Exchange username and password for a bearer token."""
    user = await user_service.authenticate_user(db, request.username, request.password)
    token = await user_service.create_session(db, user)
    logger.info(f"User logged in: {user.id}")
    return AuthResponse(user=user, token=token)


@router.get("/me", response_model=MeResponse, summary="Current user")
async def me(
    current: tuple[User, UserSession] = Depends(get_current_session),
) -> MeResponse:
    """Return the authenticated user."""
    return MeResponse(user=current[0])


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    current: tuple[User, UserSession] = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Revoke the session behind the presented token."""
    _, session = current
    await user_service.revoke_session(db, session)
    return MessageResponse(message="Logged out successfully")


@router.post("/init-demo", response_model=InitDemoResponse, summary="Create demo accounts")
async def init_demo(db: AsyncSession = Depends(get_db)) -> InitDemoResponse:
    """Create demo_candidate and demo_hr when missing. Disabled in production."""
    if settings.app_env == "production":
        raise PermissionDeniedError("Demo accounts are disabled in production")

    created = await user_service.init_demo_accounts(db)
    return InitDemoResponse(message="Demo accounts ready", created=created)
