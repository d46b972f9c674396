"""
Users Module

Accounts and login sessions. Passwords are stored as bcrypt hashes and
access tokens reference a session row so logout can revoke them.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    func,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
import uuid


# ==================== User Role ===================== #
class UserRole(str, PyEnum):
    CANDIDATE = "candidate"  # takes interviews
    HR = "hr"  # reviews interviews and records recommendations
    ADMIN = "admin"  # full access


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Platform account for candidates and HR reviewers.
    """

    __tablename__: str = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.CANDIDATE,
    )
    email: Mapped[str | None] = mapped_column(String(255))
    full_name: Mapped[str | None] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )


class UserSession(Base):
    """
    Login session backing an access token.

    A token is only honoured while its session exists, is not revoked and
    has not expired.
    """

    __tablename__: str = "user_sessions"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="sessions")

    __table_args__ = (Index("idx_user_sessions_user", "user_id"),)
