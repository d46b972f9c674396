"""
Interview service functions.

Owns the lifecycle of a single interview: start, self-introduction,
answer submission and completion. Every provider call goes through the
EvaluationClient, which recovers from failures locally; only bad input,
missing records and state violations surface as errors here.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from agents.interviewer.agent import EvaluationClient
from agents.interviewer.tools import (
    CORRECT_ANSWER_THRESHOLD,
    WEAK_CATEGORY_THRESHOLD,
    build_adaptive_context,
    category_averages,
    prior_answer_context,
    response_scores,
)
from agents.common.utils import mean
from api.services.consistency import calculate_consistency_metrics, record_evaluation
from api.services.questions import random_question
from core.config import settings
from core.exceptions import (
    ConcurrentUpdateError,
    InterviewStateError,
    NotFoundError,
    ValidationError,
)
from core.utils.datetime import now, seconds_between
from database.models.interviews import Interview, InterviewStatus

logger = logging.getLogger(__name__)


# ==================== Helpers ==================== #

async def commit_interview(db: AsyncSession, interview: Interview) -> None:
    """Commit, translating a failed version check into ConcurrentUpdateError."""
    # rollback expires the instance; reading it afterwards would need a lazy load
    interview_id = interview.id
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"Concurrent update detected on interview {interview_id}")
        raise ConcurrentUpdateError(
            "Interview was modified by another request, reload and retry",
            {"interviewId": interview_id},
        )


def _progress(answered: int, total: int) -> Dict[str, int]:
    percentage = round(answered / total * 100) if total else 0
    return {"current": answered, "total": total, "percentage": min(100, percentage)}


def _question_fallback(db: AsyncSession, difficulty: Optional[str], asked: List[Dict[str, Any]]):
    asked_ids = [q.get("id") for q in asked if isinstance(q, dict)]

    async def lookup(covered: List[str]) -> Optional[Dict[str, Any]]:
        return await random_question(
            db, exclude_categories=covered, difficulty=difficulty, exclude_ids=asked_ids
        )
    return lookup


def _find_question(
    interview: Interview,
    question_id: str,
    snapshot: Optional[Dict[str, Any]],
) -> tuple[Optional[Dict[str, Any]], bool]:
    """Return (question, from_snapshot); the snapshot only counts when its id matches."""
    for question in interview.questions or []:
        if isinstance(question, dict) and question.get("id") == question_id:
            return question, False

    if (
        isinstance(snapshot, dict)
        and snapshot.get("id") == question_id
        and isinstance(snapshot.get("question"), str)
        and snapshot["question"].strip()
    ):
        return {
            "id": question_id,
            "question": snapshot["question"].strip(),
            "category": snapshot.get("category") or "general",
            "difficulty": snapshot.get("difficulty") or "intermediate",
            "source": "client",
        }, True

    return None, False


def _require_in_progress(interview: Interview) -> None:
    if interview.is_terminal:
        raise InterviewStateError(
            f"Interview is {interview.status.value}",
            {"interviewId": interview.id, "status": interview.status.value},
        )


# ==================== Operations ==================== #

async def get_interview(db: AsyncSession, interview_id: str) -> Interview:
    """
    Fetch an interview by identifier.

    Raises:
        NotFoundError: No interview with that identifier
    """
    result = await db.execute(select(Interview).where(Interview.id == interview_id))
    interview = result.scalars().first()
    if interview is None:
        raise NotFoundError("Interview not found", {"interviewId": interview_id})
    return interview


async def start_interview(
    db: AsyncSession,
    client: EvaluationClient,
    *,
    user_id: Optional[str] = None,
    candidate_name: Optional[str] = None,
    candidate_email: Optional[str] = None,
    position: Optional[str] = None,
    department: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create an interview and generate its opening message.

    Returns:
        Dict with id, interview and introduction {greeting, introductionRequest}
    """
    interview = Interview(
        user_id=user_id,
        candidate_name=candidate_name,
        candidate_email=candidate_email,
        position=position,
        department=department,
        status=InterviewStatus.IN_PROGRESS,
        current_question_index=0,
        total_score=0.0,
        questions=[],
        responses=[],
    )
    db.add(interview)
    await db.commit()
    logger.info(f"Interview {interview.id} started")

    introduction = await client.generate_introduction(candidate_name)
    return {"id": interview.id, "interview": interview, "introduction": introduction}


async def submit_introduction(
    db: AsyncSession,
    client: EvaluationClient,
    interview_id: str,
    introduction: str,
) -> Dict[str, Any]:
    """
    Store the candidate's self-introduction and produce the first question.

    A second call returns the already generated first question without
    contacting the provider again.

    Returns:
        The first question dict
    """
    text = (introduction or "").strip()
    if not text:
        raise ValidationError("Introduction text is required")

    interview = await get_interview(db, interview_id)
    _require_in_progress(interview)

    if interview.questions:
        return interview.questions[0]

    context = build_adaptive_context([], [], introduction=text, max_questions=settings.max_questions)
    question = await client.generate_next_question(
        context, fallback=_question_fallback(db, context["target_difficulty"], [])
    )

    interview.introduction = text
    interview.questions = [question]
    await commit_interview(db, interview)

    logger.info(f"Interview {interview.id}: first question generated ({question.get('source')})")
    return question


async def submit_answer(
    db: AsyncSession,
    client: EvaluationClient,
    interview_id: str,
    *,
    question_id: Optional[str],
    answer: Optional[str],
    is_voice_answer: bool = False,
    current_question: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Score an answer, record it and generate the next question.

    The running ``total_score`` is the sum of all response scores. The
    interview stays in progress after the last question; completion is a
    separate call.

    Raises:
        ValidationError: Empty answer, missing or unknown question
        NotFoundError: Unknown interview
        InterviewStateError: Interview finished or question cap reached
        ConcurrentUpdateError: Another submission won the race
    """
    answer_text = (answer or "").strip()
    if not answer_text:
        raise ValidationError("Answer is required")
    if not question_id:
        raise ValidationError("Question ID is required")

    interview = await get_interview(db, interview_id)
    _require_in_progress(interview)

    responses = list(interview.responses or [])
    questions = list(interview.questions or [])
    if len(responses) >= settings.max_questions:
        raise InterviewStateError(
            "All questions have been answered, complete the interview",
            {"interviewId": interview.id, "answered": len(responses)},
        )

    question, from_snapshot = _find_question(interview, question_id, current_question)
    if question is None:
        raise ValidationError("Question not found in this interview", {"questionId": question_id})
    if from_snapshot:
        questions.append(question)

    category = question.get("category") or "general"
    difficulty = question.get("difficulty") or "intermediate"

    evaluation = await client.evaluate_answer(
        question["question"],
        answer_text,
        category,
        difficulty,
        prior_answers=prior_answer_context(responses),
    )
    metrics = await calculate_consistency_metrics(
        db,
        category=category,
        difficulty=difficulty,
        score=evaluation["score"],
        answer=answer_text,
        feedback=evaluation["feedback"],
        details=evaluation["details"],
    )

    response = {
        "questionId": question_id,
        "answer": answer_text,
        "isVoiceAnswer": bool(is_voice_answer),
        "timestamp": now().isoformat(),
        "score": evaluation["score"],
        "feedback": evaluation["feedback"],
        "evaluation": evaluation["details"],
        "detailedMetrics": evaluation["detailedMetrics"],
        "consistencyMetrics": metrics,
        "category": category,
        "difficulty": difficulty,
    }
    responses.append(response)

    is_completed = len(responses) >= settings.max_questions
    next_question = None
    if not is_completed:
        context = build_adaptive_context(
            questions, responses, introduction=interview.introduction, max_questions=settings.max_questions
        )
        next_question = await client.generate_next_question(
            context, fallback=_question_fallback(db, context["target_difficulty"], questions)
        )
        questions.append(next_question)

    interview.responses = responses
    interview.questions = questions
    interview.current_question_index = len(responses)
    interview.total_score = round(sum(response_scores(responses)), 1)
    await commit_interview(db, interview)

    # The answer is committed; a failed history write only costs one history row.
    # Detach first so a rollback leaves the returned interview loaded.
    db.expunge(interview)
    try:
        await record_evaluation(
            db,
            interview_id=interview.id,
            question_id=question_id,
            answer=answer_text,
            ai_score=evaluation["score"],
            category=category,
            difficulty=difficulty,
            metrics=metrics,
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Interview {interview.id}: evaluation history write failed")

    return {
        "interview": interview,
        "response": response,
        "evaluation": {
            "score": evaluation["score"],
            "feedback": evaluation["feedback"],
            "details": evaluation["details"],
            "detailedMetrics": evaluation["detailedMetrics"],
        },
        "metrics": metrics,
        "nextQuestion": next_question,
        "isCompleted": is_completed,
        "progress": _progress(len(responses), settings.max_questions),
    }


def _recommendations(category_scores: Dict[str, float]) -> List[str]:
    items = [
        f"Strengthen {category.replace('_', ' ')} skills with hands-on practice"
        for category, average in category_scores.items()
        if average < WEAK_CATEGORY_THRESHOLD
    ]
    items.append("Keep building Excel fluency on real-world datasets")
    return items


async def complete_interview(
    db: AsyncSession,
    client: EvaluationClient,
    interview_id: str,
) -> Dict[str, Any]:
    """
    Finalize an interview and build its evaluation.

    Not idempotent: completing again recomputes and overwrites the
    evaluation, completion time and duration.

    Raises:
        NotFoundError: Unknown interview
        InterviewStateError: Interview was abandoned
    """
    interview = await get_interview(db, interview_id)
    if interview.status == InterviewStatus.ABANDONED:
        raise InterviewStateError(
            "Abandoned interviews cannot be completed", {"interviewId": interview.id}
        )

    responses = [r for r in (interview.responses or []) if isinstance(r, dict)]
    scores = response_scores(responses)
    category_scores = category_averages(responses)

    feedback = await client.generate_closing_feedback(responses)

    total_score = round(sum(scores), 1)
    evaluation = {
        "overallScore": round(mean(scores), 1),
        "totalScore": total_score,
        "totalQuestions": len(responses),
        "correctAnswers": sum(1 for s in scores if s >= CORRECT_ANSWER_THRESHOLD),
        "categoryScores": category_scores,
        "strengths": feedback["strengths"],
        "improvements": feedback["improvements"],
        "recommendations": _recommendations(category_scores),
        "overallFeedback": feedback["overallFeedback"],
    }

    completed_at = now()
    interview.evaluation = evaluation
    interview.total_score = total_score
    interview.status = InterviewStatus.COMPLETED
    interview.completed_at = completed_at
    interview.duration = seconds_between(interview.started_at, completed_at)
    await commit_interview(db, interview)

    logger.info(
        f"Interview {interview.id} completed: {len(responses)} answers, "
        f"overall {evaluation['overallScore']}"
    )
    return {"interview": interview, "evaluation": evaluation}
