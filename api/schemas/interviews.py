"""Interview API schemas."""

from typing import Any, Optional
from pydantic import EmailStr, Field, field_validator

from api.schemas.common import CamelModel, UTCDateTime
from database.models.interviews import InterviewStatus


class StartInterviewRequest(CamelModel):
    """Optional candidate details supplied when an interview starts."""

    candidate_name: Optional[str] = Field(None, max_length=200, description="Candidate's full name")
    candidate_email: Optional[EmailStr] = Field(None, description="Candidate's email")
    position: Optional[str] = Field(None, max_length=200, description="Position applied for")
    department: Optional[str] = Field(None, max_length=200, description="Department or team")

    @field_validator("candidate_name", "position", "department", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank values become None."""
        if isinstance(v, str):
            return v.strip() or None
        return v


class IntroductionRequest(CamelModel):
    """Candidate self-introduction."""

    introduction: str = Field("", max_length=5000, description="Free-text self-introduction")


class AnswerRequest(CamelModel):
    """Answer to one interview question."""

    question_id: Optional[str] = Field(None, description="Identifier of the question answered")
    answer: Optional[str] = Field(None, max_length=20000, description="Answer text (typed or transcribed)")
    is_voice_answer: bool = Field(default=False, description="Whether the answer was spoken")
    current_question: Optional[dict[str, Any]] = Field(
        None, description="Client's copy of the question, used when it is not stored yet"
    )


class InterviewResponse(CamelModel):
    """Full interview record."""

    id: str
    user_id: Optional[str] = None
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    status: InterviewStatus
    current_question_index: int
    total_score: float
    started_at: UTCDateTime
    completed_at: Optional[UTCDateTime] = None
    duration: Optional[int] = Field(None, description="Seconds from start to completion")
    introduction: Optional[str] = None
    questions: list[dict[str, Any]] = Field(default_factory=list)
    responses: list[dict[str, Any]] = Field(default_factory=list)
    evaluation: Optional[dict[str, Any]] = None
    hr_recommendation: Optional[str] = None
    hr_notes: Optional[str] = None
    hr_user_id: Optional[str] = None
    reviewed_at: Optional[UTCDateTime] = None
    version: int


class IntroductionMessage(CamelModel):
    greeting: str
    introduction_request: str


class StartInterviewResponse(CamelModel):
    id: str
    interview: InterviewResponse
    introduction: IntroductionMessage


class FirstQuestionResponse(CamelModel):
    first_question: dict[str, Any] = Field(description="id, question, category and difficulty")


class Progress(CamelModel):
    current: int
    total: int
    percentage: int


class AnswerResultResponse(CamelModel):
    """Result of submitting an answer."""

    interview: InterviewResponse
    response: dict[str, Any]
    evaluation: dict[str, Any] = Field(description="score, feedback, details and detailedMetrics")
    metrics: dict[str, float] = Field(description="Consistency metrics for this evaluation")
    next_question: Optional[dict[str, Any]] = None
    is_completed: bool
    progress: Progress


class CompleteInterviewResponse(CamelModel):
    interview: InterviewResponse
    evaluation: dict[str, Any]


class TranscriptionResponse(CamelModel):
    text: str = Field(description="Transcript, empty when no speech was detected")
