"""Interview lifecycle endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agents.interviewer.agent import EvaluationClient
from api.dependencies import get_evaluation_client, get_optional_user
from api.schemas.interviews import (
    AnswerRequest,
    AnswerResultResponse,
    CompleteInterviewResponse,
    FirstQuestionResponse,
    IntroductionRequest,
    InterviewResponse,
    StartInterviewRequest,
    StartInterviewResponse,
)
from api.schemas.common import ErrorResponse
from api.services import interviews as interview_service
from database.engine import get_db
from database.models.users import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/interviews",
    tags=["interviews"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@router.post(
    "/start",
    response_model=StartInterviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Start an interview",
)
async def start_interview(
    request: Optional[StartInterviewRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    client: EvaluationClient = Depends(get_evaluation_client),
    user: Optional[User] = Depends(get_optional_user),
) -> StartInterviewResponse:
    """
    Create a new interview and return its opening message.

    - **candidateName**, **candidateEmail**, **position**, **department**: optional details
    """
    request = request or StartInterviewRequest()
    result = await interview_service.start_interview(
        db,
        client,
        user_id=user.id if user else None,
        candidate_name=request.candidate_name,
        candidate_email=request.candidate_email,
        position=request.position,
        department=request.department,
    )
    return StartInterviewResponse.model_validate(result)


@router.get(
    "/{interview_id}",
    response_model=InterviewResponse,
    summary="Get interview",
)
async def get_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
) -> InterviewResponse:
    """Get a specific interview."""
    interview = await interview_service.get_interview(db, interview_id)
    return InterviewResponse.model_validate(interview)


@router.post(
    "/{interview_id}/introduction",
    response_model=FirstQuestionResponse,
    summary="Submit self-introduction",
)
async def submit_introduction(
    interview_id: str,
    request: IntroductionRequest,
    db: AsyncSession = Depends(get_db),
    client: EvaluationClient = Depends(get_evaluation_client),
) -> FirstQuestionResponse:
    """Store the candidate's introduction and return the first question."""
    question = await interview_service.submit_introduction(
        db, client, interview_id, request.introduction
    )
    return FirstQuestionResponse(first_question=question)


@router.post(
    "/{interview_id}/answer",
    response_model=AnswerResultResponse,
    summary="Submit an answer",
)
async def submit_answer(
    interview_id: str,
    request: AnswerRequest,
    db: AsyncSession = Depends(get_db),
    client: EvaluationClient = Depends(get_evaluation_client),
) -> AnswerResultResponse:
    """
    Score an answer and get the next question.

    - **questionId**: question being answered
    - **answer**: answer text, must not be empty
    - **isVoiceAnswer**: whether the answer was transcribed from audio
    - **currentQuestion**: client's copy of the question
    """
    result = await interview_service.submit_answer(
        db,
        client,
        interview_id,
        question_id=request.question_id,
        answer=request.answer,
        is_voice_answer=request.is_voice_answer,
        current_question=request.current_question,
    )
    return AnswerResultResponse.model_validate(result)


@router.post(
    "/{interview_id}/complete",
    response_model=CompleteInterviewResponse,
    summary="Complete an interview",
)
async def complete_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
    client: EvaluationClient = Depends(get_evaluation_client),
) -> CompleteInterviewResponse:
    """Finalize the interview and compute its evaluation. Calling again recomputes it."""
    result = await interview_service.complete_interview(db, client, interview_id)
    return CompleteInterviewResponse.model_validate(result)
