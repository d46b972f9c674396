"""HR review endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_optional_user
from api.schemas.hr import (
    CandidateSummary,
    HRMetricsResponse,
    InterviewDetailResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from api.schemas.common import ErrorResponse
from api.services import hr as hr_service
from database.engine import get_db
from database.models.users import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hr", tags=["hr"], responses={404: {"model": ErrorResponse}})


@router.get("/metrics", response_model=HRMetricsResponse, summary="HR dashboard metrics")
async def get_hr_metrics(db: AsyncSession = Depends(get_db)) -> HRMetricsResponse:
    """Counts, averages and department/position breakdowns across all interviews."""
    metrics = await hr_service.get_hr_metrics(db)
    return HRMetricsResponse.model_validate(metrics)


@router.get("/candidates", response_model=list[CandidateSummary], summary="List candidates")
async def list_candidates(
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
) -> list[CandidateSummary]:
    """Summary row for every interview, newest first."""
    rows = await hr_service.list_candidates(db, reviewer_id=user.id if user else None)
    return [CandidateSummary.model_validate(row) for row in rows]


@router.get(
    "/interview/{interview_id}",
    response_model=InterviewDetailResponse,
    summary="Interview detail for review",
)
async def get_interview_detail(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
) -> InterviewDetailResponse:
    """The interview with its per-answer evaluation history."""
    detail = await hr_service.get_interview_detail(
        db, interview_id, reviewer_id=user.id if user else None
    )
    return InterviewDetailResponse.model_validate(detail)


@router.post(
    "/interview/{interview_id}/recommendation",
    response_model=RecommendationResponse,
    summary="Record a hiring recommendation",
)
async def record_recommendation(
    interview_id: str,
    request: RecommendationRequest,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
) -> RecommendationResponse:
    """
    Record an HR decision.

    - **recommendation**: hire, reject, review or pending
    - **notes**: optional reviewer notes
    - **hrUserId**: reviewer; defaults to the authenticated caller
    """
    reviewer = request.hr_user_id or (user.id if user else None)
    interview = await hr_service.record_recommendation(
        db,
        interview_id,
        request.recommendation,
        notes=request.notes,
        hr_user_id=reviewer,
    )
    return RecommendationResponse(message="Recommendation saved successfully", interview=interview)
