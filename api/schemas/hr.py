"""HR review API schemas."""

from typing import Optional
from pydantic import Field

from api.schemas.common import CamelModel, UTCDateTime
from api.schemas.analytics import EvaluationHistoryResponse
from api.schemas.interviews import InterviewResponse
from database.models.interviews import HRRecommendation


class CandidateSummary(CamelModel):
    """Row in the HR candidate table."""

    id: str
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    status: str
    total_score: float
    overall_score: Optional[float] = None
    questions_answered: int
    started_at: UTCDateTime
    completed_at: Optional[UTCDateTime] = None
    duration: Optional[int] = None
    hr_recommendation: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[UTCDateTime] = None


class BreakdownEntry(CamelModel):
    candidates: int
    average_score: float
    hire_rate: float = Field(description="Hires divided by completed interviews in the bucket (0-1)")


class HRMetricsResponse(CamelModel):
    total_candidates: int
    completed_interviews: int
    pending_reviews: int
    average_score: float
    average_duration: int = Field(description="Seconds")
    department_breakdown: dict[str, BreakdownEntry]
    position_breakdown: dict[str, BreakdownEntry]


class InterviewDetailResponse(CamelModel):
    interview: InterviewResponse
    evaluations: list[EvaluationHistoryResponse]


class RecommendationRequest(CamelModel):
    """HR decision on an interview."""

    recommendation: HRRecommendation
    notes: Optional[str] = Field(None, max_length=5000)
    hr_user_id: Optional[str] = Field(None, max_length=36, description="Reviewer; defaults to the caller")


class RecommendationResponse(CamelModel):
    message: str
    interview: InterviewResponse
