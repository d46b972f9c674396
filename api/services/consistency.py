"""
Consistency estimator and calibration service functions.

Produces four heuristic 0-10 metrics per scored answer from historical
score distributions. The metrics are informational: they are stored and
shown on dashboards but never feed back into scoring or question choice.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agents.common.utils import mean, variance
from core.config import settings
from core.exceptions import NotFoundError
from database.models.evaluations import CalibrationBaseline, EvaluationHistory

logger = logging.getLogger(__name__)


HISTORY_WINDOW = 50

# Expected score band per difficulty tier (inclusive)
DIFFICULTY_BANDS: Dict[str, tuple[float, float]] = {
    "beginner": (7.0, 9.0),
    "intermediate": (5.0, 8.0),
    "advanced": (3.0, 7.0),
}


# ==================== Pure metric functions ==================== #

def evaluation_consistency(bucket_scores: List[float]) -> float:
    """10 - 2 * variance of the bucket, floored at 0; 7.0 with fewer than two samples."""
    if len(bucket_scores) < 2:
        return 7.0
    return max(0.0, 10.0 - 2.0 * variance(bucket_scores))


def difficulty_calibration(score: float, difficulty: str, sample_size: int) -> float:
    """
    How well a score sits in the band expected for its difficulty.

    Inside the band: 8 plus a sample-size bonus of up to 2. Outside: 8
    minus twice the distance to the nearer bound, floored at 1.
    """
    low, high = DIFFICULTY_BANDS.get(difficulty, DIFFICULTY_BANDS["intermediate"])
    if low <= score <= high:
        return min(10.0, 8.0 + min(2.0, sample_size / 25))
    distance = low - score if score < low else score - high
    return max(1.0, 8.0 - 2.0 * distance)


def category_alignment(score: float, category_scores: List[float]) -> float:
    """9 - |score - category average|, clamped to [1, 10]."""
    average = mean(category_scores) if category_scores else score
    return max(1.0, min(10.0, 9.0 - abs(score - average)))


def confidence_level(feedback: str, answer: str, details: Optional[Dict[str, Any]]) -> float:
    """Starts at 7 and grows with richer feedback, longer answers and populated details."""
    level = 7.0
    if len(feedback or "") > 50:
        level += 0.5
    if len(answer or "") > 100:
        level += 0.5
    populated = [v for v in (details or {}).values() if v is not None]
    level += 0.3 * len(populated)
    return min(10.0, level)


# ==================== Database-backed operations ==================== #

async def _recent_scores(
    db: AsyncSession,
    category: str,
    difficulty: Optional[str] = None,
    limit: int = HISTORY_WINDOW,
) -> List[float]:
    query = select(EvaluationHistory.ai_score).where(EvaluationHistory.category == category)
    if difficulty is not None:
        query = query.where(EvaluationHistory.difficulty == difficulty)
    query = query.order_by(EvaluationHistory.created_at.desc(), EvaluationHistory.id.desc()).limit(limit)

    result = await db.execute(query)
    return [float(s) for s in result.scalars().all()]


async def calculate_consistency_metrics(
    db: AsyncSession,
    *,
    category: str,
    difficulty: str,
    score: float,
    answer: str,
    feedback: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, float]:
    """
    Compute the four consistency metrics for a freshly scored answer.

    History is read before the answer itself is recorded, so the current
    score is compared against prior evaluations only.

    Returns:
        Dict with evaluationConsistency, difficultyCalibration,
        categoryAlignment and confidenceLevel, each rounded to 1 dp
    """
    bucket_scores = await _recent_scores(db, category, difficulty)
    category_scores = await _recent_scores(db, category)

    return {
        "evaluationConsistency": round(evaluation_consistency(bucket_scores), 1),
        "difficultyCalibration": round(difficulty_calibration(score, difficulty, len(bucket_scores)), 1),
        "categoryAlignment": round(category_alignment(score, category_scores), 1),
        "confidenceLevel": round(confidence_level(feedback, answer, details), 1),
    }


async def record_evaluation(
    db: AsyncSession,
    *,
    interview_id: Optional[str],
    question_id: Optional[str],
    answer: str,
    ai_score: float,
    category: str,
    difficulty: str,
    metrics: Dict[str, float],
) -> EvaluationHistory:
    """Append one evaluation to the history and refresh its bucket's baseline."""
    record = EvaluationHistory(
        interview_id=interview_id,
        question_id=question_id,
        answer=answer,
        ai_score=ai_score,
        category=category,
        difficulty=difficulty,
        consistency_metrics=metrics,
        calibration_version=settings.calibration_version,
    )
    db.add(record)
    await db.commit()

    await get_calibration_baseline(db, category, difficulty)
    return record


async def get_calibration_baseline(
    db: AsyncSession,
    category: str,
    difficulty: str,
) -> Optional[CalibrationBaseline]:
    """
    Recompute and cache the baseline for one (category, difficulty) bucket.

    Returns:
        The upserted baseline, or None when the bucket has no history
    """
    result = await db.execute(
        select(EvaluationHistory.ai_score, EvaluationHistory.human_score).where(
            EvaluationHistory.category == category,
            EvaluationHistory.difficulty == difficulty,
        )
    )
    rows = result.all()
    if not rows:
        return None

    ai_scores = [float(r.ai_score) for r in rows]
    human_scores = [float(r.human_score) for r in rows if r.human_score is not None]
    sample_size = len(ai_scores)

    existing = await db.execute(
        select(CalibrationBaseline).where(
            CalibrationBaseline.category == category,
            CalibrationBaseline.difficulty == difficulty,
        )
    )
    baseline = existing.scalars().first()
    if baseline is None:
        baseline = CalibrationBaseline(category=category, difficulty=difficulty)
        db.add(baseline)

    baseline.average_ai_score = round(mean(ai_scores), 2)
    baseline.average_human_score = round(mean(human_scores), 2) if human_scores else None
    baseline.score_variance = round(variance(ai_scores), 3)
    baseline.sample_size = sample_size
    baseline.confidence_level = float(min(100, 2 * sample_size))

    await db.commit()
    return baseline


async def set_human_score(
    db: AsyncSession,
    evaluation_id: str,
    human_score: float,
) -> EvaluationHistory:
    """
    Attach a reviewer's score to a recorded evaluation.

    The AI score is left untouched.

    Raises:
        NotFoundError: No evaluation with that identifier
    """
    result = await db.execute(
        select(EvaluationHistory).where(EvaluationHistory.evaluation_id == evaluation_id)
    )
    record = result.scalars().first()
    if record is None:
        raise NotFoundError("Evaluation not found", {"evaluationId": evaluation_id})

    record.human_score = human_score
    await db.commit()
    logger.info(f"Human score {human_score} recorded for evaluation {evaluation_id}")

    await get_calibration_baseline(db, record.category, record.difficulty)
    return record
