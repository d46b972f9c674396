"""Question bank endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.questions import QuestionBankResponse, SeedQuestionsResponse
from api.services import questions as question_service
from database.engine import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("", response_model=list[QuestionBankResponse], summary="List bank questions")
async def list_questions(
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[QuestionBankResponse]:
    """Active questions, optionally filtered by category and difficulty."""
    questions = await question_service.list_questions(db, category=category, difficulty=difficulty)
    return [QuestionBankResponse.model_validate(q) for q in questions]


@router.post("/seed", response_model=SeedQuestionsResponse, summary="Seed the question bank")
async def seed_questions(db: AsyncSession = Depends(get_db)) -> SeedQuestionsResponse:
    """Insert the sample Excel questions that are missing and return them."""
    created = await question_service.seed_questions(db)
    return SeedQuestionsResponse(
        message="Question bank seeded successfully",
        questions=[QuestionBankResponse.model_validate(q) for q in created],
    )
