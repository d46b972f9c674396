"""Question bank service functions."""

import logging
import random
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.questions import QuestionBankEntry

logger = logging.getLogger(__name__)


SAMPLE_QUESTIONS: List[Dict[str, Any]] = [
    {
        "question": "What is the VLOOKUP function and how do you use it?",
        "category": "vlookup",
        "difficulty": "intermediate",
        "expected_answer": "VLOOKUP searches for a value in the first column of a range and returns a value in the same row from another column.",
        "keywords": ["vlookup", "lookup", "search", "table", "vertical"],
        "max_score": 10,
    },
    {
        "question": "How do you create a pivot table in Excel and what are its main benefits?",
        "category": "pivot_tables",
        "difficulty": "intermediate",
        "expected_answer": "Select the data range, Insert > PivotTable, choose a location and drag fields into rows, columns and values to summarize data quickly.",
        "keywords": ["pivot", "table", "insert", "summarize", "analysis"],
        "max_score": 10,
    },
    {
        "question": "What is the difference between SUMIF and SUMIFS functions?",
        "category": "formulas",
        "difficulty": "beginner",
        "expected_answer": "SUMIF sums based on one criterion, SUMIFS sums based on multiple criteria.",
        "keywords": ["sumif", "sumifs", "criteria", "conditional", "sum"],
        "max_score": 8,
    },
    {
        "question": "How do you freeze panes in Excel and why would you use it?",
        "category": "navigation",
        "difficulty": "beginner",
        "expected_answer": "View > Freeze Panes keeps header rows or columns visible while scrolling through large datasets.",
        "keywords": ["freeze", "panes", "view", "scroll", "headers"],
        "max_score": 6,
    },
    {
        "question": "Explain what a VBA macro is and provide a simple example of when you might use one.",
        "category": "macros",
        "difficulty": "advanced",
        "expected_answer": "A macro is a recorded or written sequence of actions in VBA used to automate repetitive tasks, e.g. Developer > Record Macro.",
        "keywords": ["macro", "record", "automate", "developer", "vba"],
        "max_score": 12,
    },
    {
        "question": "What is conditional formatting and how do you apply it?",
        "category": "formatting",
        "difficulty": "beginner",
        "expected_answer": "Conditional formatting changes cell appearance based on values or rules, via Home > Conditional Formatting.",
        "keywords": ["conditional", "formatting", "appearance", "rules", "highlight"],
        "max_score": 8,
    },
    {
        "question": "How would you use INDEX and MATCH functions together as an alternative to VLOOKUP?",
        "category": "formulas",
        "difficulty": "advanced",
        "expected_answer": "MATCH finds the position of a value, INDEX returns the value at that position; together they look up in any direction.",
        "keywords": ["index", "match", "lookup", "flexible", "position"],
        "max_score": 12,
    },
    {
        "question": "What are Excel charts and how do you create them?",
        "category": "charts",
        "difficulty": "beginner",
        "expected_answer": "Charts visualize data. Select the data range, Insert > Chart, choose a chart type and customize it.",
        "keywords": ["chart", "visualize", "insert", "data", "graph"],
        "max_score": 8,
    },
    {
        "question": "How do you protect an Excel worksheet?",
        "category": "security",
        "difficulty": "intermediate",
        "expected_answer": "Review > Protect Sheet, set a password and choose which actions remain allowed.",
        "keywords": ["protect", "sheet", "password", "security", "permissions"],
        "max_score": 10,
    },
    {
        "question": "What is data validation in Excel and how would you set up a dropdown list?",
        "category": "data_validation",
        "difficulty": "intermediate",
        "expected_answer": "Data validation restricts cell input; Data > Data Validation > List with a source range creates a dropdown.",
        "keywords": ["validation", "dropdown", "list", "restrict", "input"],
        "max_score": 10,
    },
    {
        "question": "What is the difference between relative and absolute cell references?",
        "category": "formulas",
        "difficulty": "intermediate",
        "expected_answer": "Relative references (A1) shift when copied, absolute references ($A$1) stay fixed.",
        "keywords": ["relative", "absolute", "references", "dollar", "fixed"],
        "max_score": 10,
    },
]


async def count_questions(db: AsyncSession) -> int:
    """Number of questions in the bank."""
    result = await db.execute(select(func.count()).select_from(QuestionBankEntry))
    return result.scalar() or 0


async def list_questions(
    db: AsyncSession,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    active_only: bool = True,
) -> List[QuestionBankEntry]:
    """List bank questions with optional filters."""
    query = select(QuestionBankEntry)
    if category:
        query = query.where(QuestionBankEntry.category == category)
    if difficulty:
        query = query.where(QuestionBankEntry.difficulty == difficulty)
    if active_only:
        query = query.where(QuestionBankEntry.is_active.is_(True))

    result = await db.execute(query.order_by(QuestionBankEntry.created_at))
    return list(result.scalars().all())


async def random_question(
    db: AsyncSession,
    exclude_categories: Optional[List[str]] = None,
    difficulty: Optional[str] = None,
    exclude_ids: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Pick a random active question, preferring categories not yet covered.

    Questions already asked are never picked again.

    Args:
        db: Database session
        exclude_categories: Categories already asked in this interview
        difficulty: Preferred difficulty tier, relaxed when nothing matches
        exclude_ids: Identifiers of questions already in this interview

    Returns:
        Question dict in interview shape, or None when no unasked question is left
    """
    asked = set(exclude_ids or [])
    candidates = [q for q in await list_questions(db) if q.id not in asked]
    if not candidates:
        return None

    excluded = set(exclude_categories or [])
    pools = [
        [q for q in candidates if q.category not in excluded and q.difficulty == difficulty],
        [q for q in candidates if q.category not in excluded],
        candidates,
    ]
    for pool in pools:
        if pool:
            return random.choice(pool).as_question()
    return None


async def seed_questions(db: AsyncSession) -> List[QuestionBankEntry]:
    """
    Insert the sample questions that are not already in the bank.

    Returns:
        The questions inserted by this call (empty when all were present)
    """
    result = await db.execute(select(QuestionBankEntry.question))
    existing = set(result.scalars().all())

    created = []
    for sample in SAMPLE_QUESTIONS:
        if sample["question"] in existing:
            continue
        entry = QuestionBankEntry(**sample)
        db.add(entry)
        created.append(entry)

    await db.commit()
    logger.info(f"Seeded {len(created)} questions into the question bank")
    return created
