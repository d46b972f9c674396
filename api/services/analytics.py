"""System analytics service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from agents.common.utils import mean
from core.config import settings
from core.middleware.logging import RequestStats, request_stats
from database.models.evaluations import EvaluationHistory

logger = logging.getLogger(__name__)


def _consistency(record: EvaluationHistory) -> Optional[float]:
    metrics = record.consistency_metrics if isinstance(record.consistency_metrics, dict) else {}
    value = metrics.get("evaluationConsistency")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def _bucket_stats(records: List[EvaluationHistory]) -> Dict[str, float]:
    consistency = [c for c in (_consistency(r) for r in records) if c is not None]
    return {
        "averageScore": round(mean([r.ai_score for r in records]), 1),
        "consistency": round(mean(consistency), 1),
        "sampleSize": len(records),
    }


def _group(records: List[EvaluationHistory], key: str) -> Dict[str, Dict[str, float]]:
    groups: Dict[str, List[EvaluationHistory]] = {}
    for record in records:
        groups.setdefault(getattr(record, key), []).append(record)
    return {name: _bucket_stats(members) for name, members in groups.items()}


def calibration_accuracy(records: List[EvaluationHistory]) -> Optional[float]:
    """100 - 10 * mean |ai - human| over reviewed rows, clamped to [0, 100]."""
    diffs = [abs(r.ai_score - r.human_score) for r in records if r.human_score is not None]
    if not diffs:
        return None
    return round(max(0.0, min(100.0, 100.0 - 10.0 * mean(diffs))), 1)


async def get_system_metrics(
    db: AsyncSession,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    stats: RequestStats = request_stats,
) -> Dict[str, Any]:
    """
    Aggregate evaluation quality and request load.

    Args:
        db: Database session
        category: Only consider evaluations in this category
        difficulty: Only consider evaluations at this difficulty
        stats: In-process request counters

    Returns:
        SystemMetrics dict
    """
    query = select(EvaluationHistory)
    if category:
        query = query.where(EvaluationHistory.category == category)
    if difficulty:
        query = query.where(EvaluationHistory.difficulty == difficulty)

    result = await db.execute(query)
    records = list(result.scalars().all())
    consistency = [c for c in (_consistency(r) for r in records) if c is not None]

    return {
        "totalEvaluations": len(records),
        "averageConsistencyScore": round(mean(consistency), 1),
        "calibrationAccuracy": calibration_accuracy(records),
        "categoryBreakdown": _group(records, "category"),
        "difficultyBreakdown": _group(records, "difficulty"),
        "systemLoad": stats.snapshot(),
        "calibrationVersion": settings.calibration_version,
    }


async def get_evaluation_history(
    db: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> Dict[str, Any]:
    """Page through the evaluation history, newest first."""
    query = select(EvaluationHistory)
    if category:
        query = query.where(EvaluationHistory.category == category)
    if difficulty:
        query = query.where(EvaluationHistory.difficulty == difficulty)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(EvaluationHistory.created_at.desc(), EvaluationHistory.id.desc())
    result = await db.execute(query.limit(limit).offset(offset))

    return {
        "history": list(result.scalars().all()),
        "total": total,
        "offset": offset,
        "limit": limit,
    }
