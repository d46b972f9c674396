"""Analytics API schemas."""

from typing import Optional
from pydantic import Field

from api.schemas.common import CamelModel, UTCDateTime


class EvaluationHistoryResponse(CamelModel):
    """One recorded AI evaluation."""

    evaluation_id: str
    interview_id: Optional[str] = None
    question_id: Optional[str] = None
    answer: str
    ai_score: float
    human_score: Optional[float] = None
    category: str
    difficulty: str
    consistency_metrics: dict[str, float]
    calibration_version: str
    created_at: UTCDateTime


class EvaluationHistoryPage(CamelModel):
    history: list[EvaluationHistoryResponse]
    total: int
    offset: int
    limit: int


class BucketMetrics(CamelModel):
    average_score: float
    consistency: float
    sample_size: int


class SystemLoad(CamelModel):
    average_response_time: float = Field(description="Mean request latency in milliseconds")
    error_rate: float = Field(description="Share of requests answered with 5xx (0-1)")
    peak_concurrency: int


class SystemMetricsResponse(CamelModel):
    total_evaluations: int
    average_consistency_score: float
    calibration_accuracy: Optional[float] = Field(
        None, description="100 - 10 x mean |ai - human|; null until a human score exists"
    )
    category_breakdown: dict[str, BucketMetrics]
    difficulty_breakdown: dict[str, BucketMetrics]
    system_load: SystemLoad
    calibration_version: str


class HumanScoreRequest(CamelModel):
    human_score: float = Field(..., ge=0, le=10, description="Reviewer score (0-10)")


class CalibrationBaselineResponse(CamelModel):
    category: str
    difficulty: str
    average_ai_score: float
    average_human_score: Optional[float] = None
    score_variance: float
    sample_size: int
    confidence_level: float
    last_updated: UTCDateTime


class CalibrationResponse(CamelModel):
    baseline: Optional[CalibrationBaselineResponse] = None
