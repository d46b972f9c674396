"""Question bank API schemas."""

from typing import Optional

from api.schemas.common import CamelModel, UTCDateTime


class QuestionBankResponse(CamelModel):
    id: str
    question: str
    category: str
    difficulty: str
    expected_answer: Optional[str] = None
    keywords: Optional[list[str]] = None
    max_score: int
    is_active: bool
    created_at: UTCDateTime


class SeedQuestionsResponse(CamelModel):
    message: str
    questions: list[QuestionBankResponse]
