"""HR review service functions."""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agents.common.utils import mean
from api.services.interviews import commit_interview, get_interview
from core.security import AuditAction, ResourceType, log_audit_event
from core.utils.datetime import now
from core.utils.formatting import bucket_label
from database.models.evaluations import EvaluationHistory
from database.models.interviews import HRRecommendation, Interview, InterviewStatus

logger = logging.getLogger(__name__)


def _overall_score(interview: Interview) -> Optional[float]:
    evaluation = interview.evaluation if isinstance(interview.evaluation, dict) else {}
    score = evaluation.get("overallScore")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return float(score)
    return None


def candidate_summary(interview: Interview) -> Dict[str, Any]:
    """Row shown in the HR candidate table."""
    return {
        "id": interview.id,
        "candidateName": interview.candidate_name,
        "candidateEmail": interview.candidate_email,
        "position": interview.position,
        "department": interview.department,
        "status": interview.status.value,
        "totalScore": interview.total_score,
        "overallScore": _overall_score(interview),
        "questionsAnswered": len(interview.responses or []),
        "startedAt": interview.started_at,
        "completedAt": interview.completed_at,
        "duration": interview.duration,
        "hrRecommendation": interview.hr_recommendation,
        "reviewedBy": interview.hr_user_id,
        "reviewedAt": interview.reviewed_at,
    }


async def list_candidates(db: AsyncSession, reviewer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """All interviews, newest first, as summary rows."""
    result = await db.execute(select(Interview).order_by(Interview.started_at.desc()))
    interviews = result.scalars().all()

    log_audit_event(
        AuditAction.LIST,
        ResourceType.INTERVIEW,
        user_id=reviewer_id,
        details={"count": len(interviews)},
    )
    return [candidate_summary(i) for i in interviews]


async def get_interview_detail(
    db: AsyncSession,
    interview_id: str,
    reviewer_id: Optional[str] = None,
) -> Dict[str, Any]:
    """One interview plus its evaluation history rows, oldest first."""
    interview = await get_interview(db, interview_id)

    result = await db.execute(
        select(EvaluationHistory)
        .where(EvaluationHistory.interview_id == interview_id)
        .order_by(EvaluationHistory.created_at, EvaluationHistory.id)
    )
    evaluations = list(result.scalars().all())

    log_audit_event(AuditAction.VIEW, ResourceType.INTERVIEW, interview_id, user_id=reviewer_id)
    return {"interview": interview, "evaluations": evaluations}


async def record_recommendation(
    db: AsyncSession,
    interview_id: str,
    recommendation: HRRecommendation,
    notes: Optional[str] = None,
    hr_user_id: Optional[str] = None,
) -> Interview:
    """
    Record an HR decision on an interview.

    The interview does not have to be completed.
    """
    interview = await get_interview(db, interview_id)

    interview.hr_recommendation = recommendation.value
    interview.hr_notes = notes
    interview.hr_user_id = hr_user_id
    interview.reviewed_at = now()
    await commit_interview(db, interview)

    log_audit_event(
        AuditAction.UPDATE,
        ResourceType.INTERVIEW,
        interview_id,
        user_id=hr_user_id,
        details={"recommendation": recommendation.value},
    )
    return interview


def _breakdown(interviews: List[Interview], key: str) -> Dict[str, Dict[str, float]]:
    groups: Dict[str, List[Interview]] = {}
    for interview in interviews:
        groups.setdefault(bucket_label(getattr(interview, key)), []).append(interview)

    breakdown = {}
    for label, members in groups.items():
        completed = [i for i in members if i.status == InterviewStatus.COMPLETED]
        scores = [s for s in (_overall_score(i) for i in completed) if s is not None]
        hires = sum(1 for i in completed if i.hr_recommendation == HRRecommendation.HIRE.value)
        breakdown[label] = {
            "candidates": len(members),
            "averageScore": round(mean(scores), 1),
            "hireRate": round(hires / len(completed), 2) if completed else 0.0,
        }
    return breakdown


async def get_hr_metrics(db: AsyncSession) -> Dict[str, Any]:
    """Aggregate dashboard metrics over every interview."""
    result = await db.execute(select(Interview))
    interviews = list(result.scalars().all())

    completed = [i for i in interviews if i.status == InterviewStatus.COMPLETED]
    scores = [s for s in (_overall_score(i) for i in completed) if s is not None]
    durations = [i.duration for i in completed if i.duration is not None]
    pending = [
        i for i in completed
        if i.hr_recommendation in (None, HRRecommendation.PENDING.value)
    ]

    return {
        "totalCandidates": len(interviews),
        "completedInterviews": len(completed),
        "pendingReviews": len(pending),
        "averageScore": round(mean(scores), 1),
        "averageDuration": round(mean(durations)),
        "departmentBreakdown": _breakdown(interviews, "department"),
        "positionBreakdown": _breakdown(interviews, "position"),
    }
