"""
Evaluation History Module

Every scored answer is recorded here together with its consistency
metrics. Rows are append-only apart from the human score, which a
reviewer may add later. Calibration baselines cache per
(category, difficulty) statistics derived from this history.
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
    Index,
    UniqueConstraint,
)
from database.engine import Base
from core.utils.datetime import now
from datetime import datetime
from typing import Any
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class EvaluationHistory(Base):
    """One AI evaluation of one answer."""

    __tablename__: str = "evaluation_history"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    evaluation_id: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, default=_new_id
    )
    interview_id: Mapped[str | None] = mapped_column(
        ForeignKey("interviews.id", ondelete="SET NULL"), nullable=True
    )
    # Adaptive questions never reach the bank, so this is not a foreign key
    question_id: Mapped[str | None] = mapped_column(String(64))
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    ai_score: Mapped[float] = mapped_column(Float, nullable=False)
    human_score: Mapped[float | None] = mapped_column(Float)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    consistency_metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    calibration_version: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_eval_history_bucket", "category", "difficulty", "created_at"),
        Index("idx_eval_history_interview", "interview_id"),
    )


class CalibrationBaseline(Base):
    """Cached statistics for one (category, difficulty) bucket."""

    __tablename__: str = "calibration_baselines"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    average_ai_score: Mapped[float] = mapped_column(Float, nullable=False)
    average_human_score: Mapped[float | None] = mapped_column(Float)
    score_variance: Mapped[float] = mapped_column(Float, nullable=False)
    sample_size: Mapped[int] = mapped_column(Integer, nullable=False)
    confidence_level: Mapped[float] = mapped_column(Float, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    __table_args__ = (
        UniqueConstraint("category", "difficulty", name="uq_calibration_bucket"),
    )
