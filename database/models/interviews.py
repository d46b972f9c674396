"""
Interviews Module

One row per candidate attempt. Questions, responses and the final
evaluation are nested structures kept in JSON columns; the `version`
column guards the read-modify-write of those lists against concurrent
submissions.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    Integer,
    Float,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any
import uuid


# ==================== Enums ===================== #
class InterviewStatus(str, PyEnum):
    """Lifecycle of an interview. COMPLETED and ABANDONED are terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class HRRecommendation(str, PyEnum):
    """Reviewer decision recorded against an interview."""

    HIRE = "hire"
    REJECT = "reject"
    REVIEW = "review"
    PENDING = "pending"


def _new_id() -> str:
    return str(uuid.uuid4())


# ==================== Interview ===================== #
class Interview(Base):
    """
    A candidate's end-to-end interview attempt.

    Each entry of `questions` is a dict with id/question/category/difficulty
    (plus expectedAnswer/keywords/source when known). Each entry of
    `responses` holds the answer together with its score, feedback and
    evaluation details; entries are only ever appended fully scored.
    """

    __tablename__: str = "interviews"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Candidate details supplied at start
    candidate_name: Mapped[str | None] = mapped_column(String(200))
    candidate_email: Mapped[str | None] = mapped_column(String(255))
    position: Mapped[str | None] = mapped_column(String(200))
    department: Mapped[str | None] = mapped_column(String(200))

    status: Mapped[InterviewStatus] = mapped_column(
        SQLEnum(InterviewStatus, native_enum=False, length=20),
        nullable=False,
        default=InterviewStatus.IN_PROGRESS,
    )
    current_question_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    duration: Mapped[int | None] = mapped_column(Integer)  # seconds

    introduction: Mapped[str | None] = mapped_column(Text)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    responses: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    evaluation: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    # HR review
    hr_recommendation: Mapped[str | None] = mapped_column(String(20))
    hr_notes: Mapped[str | None] = mapped_column(Text)
    hr_user_id: Mapped[str | None] = mapped_column(String(36))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_interviews_status_started", "status", "started_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in (InterviewStatus.COMPLETED, InterviewStatus.ABANDONED)
