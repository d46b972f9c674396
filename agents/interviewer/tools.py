"""
Pure helpers for the interviewer agent.

Everything "adaptive" about question selection is computed here from the
interview history and handed to the model as prompt context. Nothing is
persisted between calls.
"""

import os
from typing import Any, Dict, List, Optional

from agents.common.utils import mean
from core.utils.formatting import truncate_text

# Single fallback score for every evaluation failure path
NEUTRAL_SCORE = 5.0

CORRECT_ANSWER_THRESHOLD = 7.0
WEAK_CATEGORY_THRESHOLD = 6.0
STRONG_CATEGORY_THRESHOLD = 7.5
PRIOR_ANSWER_CHARS = 200
PRIOR_ANSWER_COUNT = 2

EXCEL_CATEGORIES: tuple[str, ...] = (
    "formulas",
    "vlookup",
    "pivot_tables",
    "data_validation",
    "macros",
    "charts",
    "formatting",
    "navigation",
    "security",
    "data_analysis",
)

DIFFICULTIES: tuple[str, ...] = ("beginner", "intermediate", "advanced")

AUDIO_MIME_TYPES: Dict[str, str] = {
    ".webm": "audio/webm",
    ".mp4": "audio/mp4",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
}

FALLBACK_QUESTION: Dict[str, str] = {
    "question": (
        "How would you use the SUM function to total a range of cells, "
        "and how would you make it ignore blank or text values?"
    ),
    "category": "formulas",
    "difficulty": "beginner",
}


def infer_audio_mime_type(filename: Optional[str]) -> str:
    """Map an upload's extension to a MIME type; unknown extensions are treated as webm."""
    ext = os.path.splitext(filename or "")[1].lower()
    return AUDIO_MIME_TYPES.get(ext, "audio/webm")


def response_scores(responses: List[Dict[str, Any]]) -> List[float]:
    """Numeric scores of the recorded responses, skipping malformed entries."""
    scores = []
    for response in responses:
        score = response.get("score") if isinstance(response, dict) else None
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            scores.append(float(score))
    return scores


def select_difficulty(scores: List[float]) -> str:
    """
    Difficulty tier for the next question based on the running mean.

    No answers yet starts at beginner; a mean of 7.5 or more moves to
    advanced, 5 or more to intermediate.
    """
    if not scores:
        return "beginner"
    average = mean(scores)
    if average >= STRONG_CATEGORY_THRESHOLD:
        return "advanced"
    if average >= 5.0:
        return "intermediate"
    return "beginner"


def category_averages(responses: List[Dict[str, Any]]) -> Dict[str, float]:
    """
    Mean score per category, rounded to one decimal.

    Args:
        responses: Recorded interview responses

    Returns:
        Mapping of category to average score, in first-seen order
    """
    buckets: Dict[str, List[float]] = {}
    for response in responses:
        if not isinstance(response, dict):
            continue
        score = response.get("score")
        if not isinstance(score, (int, float)) or isinstance(score, bool):
            continue
        category = response.get("category") or "general"
        buckets.setdefault(category, []).append(float(score))
    return {category: round(mean(scores), 1) for category, scores in buckets.items()}


def covered_categories(questions: List[Dict[str, Any]]) -> List[str]:
    """Categories already asked, in order, without duplicates."""
    seen: List[str] = []
    for question in questions:
        category = question.get("category") if isinstance(question, dict) else None
        if category and category not in seen:
            seen.append(category)
    return seen


def uncovered_categories(questions: List[Dict[str, Any]]) -> List[str]:
    covered = set(covered_categories(questions))
    return [c for c in EXCEL_CATEGORIES if c not in covered]


def prior_answer_context(responses: List[Dict[str, Any]]) -> List[str]:
    """The last two answers, truncated, for evaluation context."""
    recent = [r for r in responses if isinstance(r, dict)][-PRIOR_ANSWER_COUNT:]
    return [truncate_text(str(r.get("answer", "")), PRIOR_ANSWER_CHARS) for r in recent]


def build_adaptive_context(
    questions: List[Dict[str, Any]],
    responses: List[Dict[str, Any]],
    introduction: Optional[str] = None,
    max_questions: int = 10,
) -> Dict[str, Any]:
    """
    Derive the prompt context for the next adaptive question.

    Args:
        questions: Questions asked so far
        responses: Responses recorded so far
        introduction: Candidate self-introduction, if any
        max_questions: Interview length

    Returns:
        Context dict consumed by the question-generation prompt
    """
    scores = response_scores(responses)
    averages = category_averages(responses)

    return {
        "question_number": len(responses) + 1,
        "total_questions": max_questions,
        "average_score": round(mean(scores), 1) if scores else None,
        "target_difficulty": select_difficulty(scores),
        "covered_categories": covered_categories(questions),
        "uncovered_categories": uncovered_categories(questions),
        "weak_categories": [c for c, avg in averages.items() if avg < WEAK_CATEGORY_THRESHOLD],
        "strong_categories": [c for c, avg in averages.items() if avg > STRONG_CATEGORY_THRESHOLD],
        "recent_questions": [
            truncate_text(str(q.get("question", "")), PRIOR_ANSWER_CHARS)
            for q in questions[-3:]
            if isinstance(q, dict)
        ],
        "candidate_introduction": truncate_text(introduction, 500) if introduction else None,
    }


def normalize_question(
    raw: Dict[str, Any],
    context: Dict[str, Any],
) -> Optional[Dict[str, str]]:
    """
    Validate a generated question against the known categories and tiers.

    Unknown categories become the first uncovered category and unknown
    difficulties become the target tier. Returns None when there is no
    usable question text.
    """
    text = raw.get("question")
    if not isinstance(text, str) or not text.strip():
        return None

    category = str(raw.get("category", "")).strip().lower()
    if category not in EXCEL_CATEGORIES:
        uncovered = context.get("uncovered_categories") or list(EXCEL_CATEGORIES)
        category = uncovered[0]

    difficulty = str(raw.get("difficulty", "")).strip().lower()
    if difficulty not in DIFFICULTIES:
        difficulty = context.get("target_difficulty") or "beginner"

    return {"question": text.strip(), "category": category, "difficulty": difficulty}

