"""Evaluation analytics endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.analytics import (
    CalibrationResponse,
    EvaluationHistoryPage,
    EvaluationHistoryResponse,
    HumanScoreRequest,
    SystemMetricsResponse,
)
from api.services import analytics as analytics_service
from api.services import consistency as consistency_service
from database.engine import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/metrics", response_model=SystemMetricsResponse, summary="System-wide evaluation metrics")
async def get_system_metrics(
    category: Optional[str] = Query(None, description="Only this category"),
    difficulty: Optional[str] = Query(None, description="Only this difficulty"),
    db: AsyncSession = Depends(get_db),
) -> SystemMetricsResponse:
    """Consistency, calibration accuracy, per-bucket breakdowns and request load."""
    metrics = await analytics_service.get_system_metrics(db, category=category, difficulty=difficulty)
    return SystemMetricsResponse.model_validate(metrics)


@router.get(
    "/evaluation-history",
    response_model=EvaluationHistoryPage,
    summary="Paginated evaluation history",
)
async def get_evaluation_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> EvaluationHistoryPage:
    """Recorded evaluations, newest first."""
    page = await analytics_service.get_evaluation_history(
        db, limit=limit, offset=offset, category=category, difficulty=difficulty
    )
    return EvaluationHistoryPage.model_validate(page)


@router.post(
    "/evaluation-history/{evaluation_id}/human-score",
    response_model=EvaluationHistoryResponse,
    summary="Attach a human score",
)
async def set_human_score(
    evaluation_id: str,
    request: HumanScoreRequest,
    db: AsyncSession = Depends(get_db),
) -> EvaluationHistoryResponse:
    """Record a reviewer's score for calibration. The AI score is unchanged."""
    record = await consistency_service.set_human_score(db, evaluation_id, request.human_score)
    return EvaluationHistoryResponse.model_validate(record)


@router.get("/calibration", response_model=CalibrationResponse, summary="Calibration baseline")
async def get_calibration(
    category: str = Query(..., min_length=1),
    difficulty: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
) -> CalibrationResponse:
    """Baseline statistics for a bucket; ``baseline`` is null when it has no history."""
    baseline = await consistency_service.get_calibration_baseline(db, category, difficulty)
    return CalibrationResponse(baseline=baseline)
