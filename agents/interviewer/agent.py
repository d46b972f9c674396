"""Interviewer agent: the single boundary to the LLM provider."""

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from google.genai import types

from agents.base import BaseAgent
from agents.common.prompts import JSON_OUTPUT
from agents.common.utils import clamp_score, format_agent_context, mean, string_list
from agents.interviewer.prompts import (
    CLOSING_FEEDBACK_PROMPT,
    EVALUATE_ANSWER_PROMPT,
    EVALUATOR_SYSTEM_PROMPT,
    INTERVIEWER_SYSTEM_PROMPT,
    INTRODUCTION_PROMPT,
    NEXT_QUESTION_PROMPT,
    TRANSCRIPTION_PROMPT,
)
from agents.interviewer.tools import (
    CORRECT_ANSWER_THRESHOLD,
    EXCEL_CATEGORIES,
    FALLBACK_QUESTION,
    NEUTRAL_SCORE,
    infer_audio_mime_type,
    normalize_question,
    response_scores,
)
from core.utils.formatting import truncate_text

logger = logging.getLogger(__name__)

QuestionFallback = Callable[[List[str]], Awaitable[Optional[Dict[str, Any]]]]

DEFAULT_INTRODUCTION = {
    "greeting": (
        "Welcome to your Excel skills interview! I'll ask you a series of "
        "questions that adapt to your answers, and you can respond by typing "
        "or by voice."
    ),
    "introductionRequest": (
        "To get started, please introduce yourself and tell me about your "
        "experience with Excel."
    ),
}

DETAIL_FIELDS = ("correctness", "clarity", "completeness")
METRIC_FIELDS = (
    "technicalAccuracy",
    "practicalApplication",
    "communicationClarity",
    "problemSolvingApproach",
)


def neutral_evaluation() -> Dict[str, Any]:
    """Evaluation substituted whenever scoring fails."""
    return {
        "score": NEUTRAL_SCORE,
        "feedback": (
            "Your answer was recorded, but it could not be evaluated in detail "
            "right now. It has been given a neutral score."
        ),
        "details": {field: NEUTRAL_SCORE for field in DETAIL_FIELDS},
        "detailedMetrics": {field: NEUTRAL_SCORE for field in METRIC_FIELDS},
    }


def fallback_closing_feedback(responses: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Templated closing feedback built from local statistics.

    A mean of 7 or more gets the optimistic template, anything lower the
    cautionary one.
    """
    scores = response_scores(responses)
    average = mean(scores)
    count = len(scores)

    if scores and average >= CORRECT_ANSWER_THRESHOLD:
        return {
            "strengths": [
                "Consistently solid answers across the interview",
                "Good practical command of Excel features",
                f"Completed {count} questions with an average score of {average:.1f}/10",
            ],
            "improvements": [
                "Explore more advanced features such as Power Query and dynamic arrays",
                "Keep explanations concise while covering edge cases",
            ],
            "overallFeedback": (
                f"Strong performance with an average of {average:.1f}/10 over {count} "
                "questions. You show a dependable working knowledge of Excel."
            ),
        }

    return {
        "strengths": [
            "Completed the interview",
            "Engaged with every question asked",
        ],
        "improvements": [
            "Review core formulas and lookup functions",
            "Practice explaining each step of your approach",
            "Work through hands-on exercises with real datasets",
        ],
        "overallFeedback": (
            f"You averaged {average:.1f}/10 over {count} questions. Focused practice "
            "on the fundamentals will make a noticeable difference."
        ),
    }


class EvaluationClient(BaseAgent):
    """
    Wraps the provider calls the interview flow needs.

    Every public method recovers from provider failures locally and returns
    a substitute value, so an outage degrades quality but never interrupts
    an interview. There are no retries.
    """

    def __init__(self, client: Any, model: str = "gemini-2.0-flash", max_questions: int = 10):
        super().__init__(
            name="interviewer",
            instructions=INTERVIEWER_SYSTEM_PROMPT,
            client=client,
            model=model,
        )
        self.max_questions = max_questions

    async def generate_introduction(self, candidate_name: Optional[str] = None) -> Dict[str, str]:
        """Opening greeting plus the request for a self-introduction."""
        prompt = INTRODUCTION_PROMPT.format(
            candidate_clause=f" with {candidate_name}" if candidate_name else "",
            total_questions=self.max_questions,
            json_output=JSON_OUTPUT,
        )
        try:
            result = await self.run_json(prompt, temperature=0.7, max_output_tokens=300)
        except Exception as e:
            logger.warning(f"generate_introduction failed, using default greeting: {e}")
            return dict(DEFAULT_INTRODUCTION)

        greeting = result.get("greeting")
        request = result.get("introductionRequest")
        return {
            "greeting": greeting.strip() if isinstance(greeting, str) and greeting.strip()
            else DEFAULT_INTRODUCTION["greeting"],
            "introductionRequest": request.strip() if isinstance(request, str) and request.strip()
            else DEFAULT_INTRODUCTION["introductionRequest"],
        }

    async def transcribe(self, audio: bytes, filename: Optional[str]) -> str:
        """
        Transcribe a recorded answer.

        Returns:
            The transcript, or an empty string when the provider fails
            (surfaced upstream as "no speech detected")
        """
        mime_type = infer_audio_mime_type(filename)
        try:
            text = await self.run(
                TRANSCRIPTION_PROMPT,
                parts=[types.Part.from_bytes(data=audio, mime_type=mime_type)],
                temperature=0.0,
                max_output_tokens=2000,
            )
        except Exception as e:
            logger.warning(f"transcribe failed for {mime_type} upload: {e}")
            return ""
        return text.strip()

    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        category: str,
        difficulty: str,
        prior_answers: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Score one answer.

        Args:
            question: Question text
            answer: Candidate answer
            category: Question category
            difficulty: Question difficulty tier
            prior_answers: Recent earlier answers, already truncated

        Returns:
            Dict with score, feedback, details and detailedMetrics; every
            number is clamped to [0, 10]
        """
        prior_context = ""
        if prior_answers:
            joined = "\n".join(f"- {a}" for a in prior_answers)
            prior_context = f"\nCandidate's previous answers, for context only:\n{joined}\n"

        prompt = EVALUATE_ANSWER_PROMPT.format(
            question=question,
            category=category,
            difficulty=difficulty,
            answer=answer,
            prior_context=prior_context,
        )
        try:
            result = await self.run_json(
                prompt,
                instructions=EVALUATOR_SYSTEM_PROMPT,
                temperature=0.3,
                max_output_tokens=600,
            )
        except Exception as e:
            logger.warning(f"evaluate_answer failed, using neutral score: {e}")
            return neutral_evaluation()

        details = result.get("details") if isinstance(result.get("details"), dict) else {}
        metrics = (
            result.get("detailedMetrics")
            if isinstance(result.get("detailedMetrics"), dict)
            else {}
        )
        feedback = result.get("feedback")

        return {
            "score": clamp_score(result.get("score"), NEUTRAL_SCORE),
            "feedback": feedback.strip() if isinstance(feedback, str) and feedback.strip()
            else "Answer evaluated.",
            "details": {f: clamp_score(details.get(f), NEUTRAL_SCORE) for f in DETAIL_FIELDS},
            "detailedMetrics": {f: clamp_score(metrics.get(f), NEUTRAL_SCORE) for f in METRIC_FIELDS},
        }

    async def generate_next_question(
        self,
        context: Dict[str, Any],
        fallback: Optional[QuestionFallback] = None,
    ) -> Dict[str, Any]:
        """
        Generate the next adaptive question.

        Args:
            context: Output of ``build_adaptive_context``
            fallback: Async lookup returning a stored question for the given
                covered categories, tried when generation fails

        Returns:
            Question dict with id, question, category, difficulty and source
        """
        prompt = NEXT_QUESTION_PROMPT.format(
            question_number=context.get("question_number", 1),
            total_questions=context.get("total_questions", self.max_questions),
            context=format_agent_context(context),
            target_difficulty=context.get("target_difficulty", "beginner"),
            categories=", ".join(EXCEL_CATEGORIES),
            json_output=JSON_OUTPUT,
        )
        try:
            result = await self.run_json(prompt, temperature=0.7, max_output_tokens=400)
            question = normalize_question(result, context)
            if question is None:
                raise ValueError("generated question has no text")
            return {"id": str(uuid.uuid4()), **question, "source": "generated"}
        except Exception as e:
            logger.warning(f"generate_next_question failed, using fallback question: {e}")

        if fallback is not None:
            stored = await fallback(list(context.get("covered_categories") or []))
            if stored:
                return stored

        return {"id": str(uuid.uuid4()), **FALLBACK_QUESTION, "source": "fallback"}

    async def generate_closing_feedback(self, responses: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Strengths, improvements and a summary for a finished interview."""
        summary = "\n".join(
            f"Q{i + 1} [{r.get('category', 'general')}]: score {r.get('score')}/10 - "
            f"{truncate_text(str(r.get('answer', '')), 100)}"
            for i, r in enumerate(responses)
        )
        prompt = CLOSING_FEEDBACK_PROMPT.format(summary=summary, json_output=JSON_OUTPUT)

        try:
            result = await self.run_json(
                prompt,
                instructions=EVALUATOR_SYSTEM_PROMPT,
                temperature=0.5,
                max_output_tokens=800,
            )
        except Exception as e:
            logger.warning(f"generate_closing_feedback failed, using templated feedback: {e}")
            return fallback_closing_feedback(responses)

        templated = fallback_closing_feedback(responses)
        overall = result.get("overallFeedback")
        return {
            "strengths": string_list(result.get("strengths"), templated["strengths"]),
            "improvements": string_list(result.get("improvements"), templated["improvements"]),
            "overallFeedback": overall.strip() if isinstance(overall, str) and overall.strip()
            else templated["overallFeedback"],
        }
