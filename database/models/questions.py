"""
Question Bank Module

Static Excel questions tagged by category and difficulty. The bank is
seeded once and read during interviews as a fallback source when
adaptive generation is unavailable.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    Integer,
    DateTime,
    func,
    Text,
    JSON,
    Index,
)
from database.engine import Base
from core.utils.datetime import now
from datetime import datetime
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class QuestionBankEntry(Base):
    """A reusable interview question."""

    __tablename__: str = "question_bank"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    expected_answer: Mapped[str | None] = mapped_column(Text)
    keywords: Mapped[list[str] | None] = mapped_column(JSON)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_question_bank_category_difficulty", "category", "difficulty"),
    )

    def as_question(self) -> dict:
        """Shape stored in an interview's question list."""
        return {
            "id": self.id,
            "question": self.question,
            "category": self.category,
            "difficulty": self.difficulty,
            "expectedAnswer": self.expected_answer,
            "keywords": self.keywords or [],
            "source": "bank",
        }
