"""Test doubles and request helpers shared by the test modules."""

import json
from types import SimpleNamespace
from typing import Any, Callable, Optional
from unittest.mock import AsyncMock

from httpx import AsyncClient

from agents.interviewer.tools import EXCEL_CATEGORIES


class FakeProvider:
    """
    Stand-in for ``genai.Client`` that answers by request type.

    The operation is recognised from the prompt text. Operations listed in
    ``failing`` raise, everything else returns canned JSON.
    """

    def __init__(self):
        self.score: Any = 8
        self.details: Any = {"correctness": 8, "clarity": 8, "completeness": 8}
        self.transcript = "I would use VLOOKUP with an exact match"
        self.failing: set[str] = set()
        self.overrides: dict[str, Callable[[], str]] = {}
        self.calls: list[str] = []
        self._question_count = 0
        self.aio = SimpleNamespace(
            models=SimpleNamespace(generate_content=AsyncMock(side_effect=self._generate))
        )

    @staticmethod
    def operation(prompt: str) -> str:
        if prompt.startswith("Transcribe"):
            return "transcribe"
        if prompt.startswith("Write the opening"):
            return "introduction"
        if prompt.startswith("Evaluate this answer"):
            return "evaluate"
        if prompt.startswith("Generate question"):
            return "next_question"
        if prompt.startswith("Based on the interview responses"):
            return "closing_feedback"
        return "unknown"

    async def _generate(self, model: str, contents: list, config: Any) -> SimpleNamespace:
        op = self.operation(contents[-1])
        self.calls.append(op)
        if op in self.failing:
            raise RuntimeError(f"provider unavailable for {op}")
        if op in self.overrides:
            return SimpleNamespace(text=self.overrides[op]())
        return SimpleNamespace(text=self._default(op))

    def _default(self, op: str) -> str:
        if op == "transcribe":
            return self.transcript
        if op == "introduction":
            return json.dumps({
                "greeting": "Hello and welcome to your Excel interview.",
                "introductionRequest": "Please introduce yourself.",
            })
        if op == "evaluate":
            return json.dumps({
                "score": self.score,
                "feedback": "Clear and correct explanation of the approach with a good example.",
                "details": self.details,
                "detailedMetrics": {
                    "technicalAccuracy": 8,
                    "practicalApplication": 7,
                    "communicationClarity": 9,
                    "problemSolvingApproach": 8,
                },
            })
        if op == "next_question":
            category = EXCEL_CATEGORIES[self._question_count % len(EXCEL_CATEGORIES)]
            self._question_count += 1
            return json.dumps({
                "question": f"Generated question {self._question_count} about {category}?",
                "category": category,
                "difficulty": "intermediate",
            })
        if op == "closing_feedback":
            return json.dumps({
                "strengths": ["Strong formulas", "Clear explanations", "Good structure"],
                "improvements": ["Practice macros", "Explore Power Query"],
                "overallFeedback": "Solid Excel skills overall.",
            })
        return "{}"

    def count(self, op: str) -> int:
        return self.calls.count(op)


def auth_headers(token: Optional[str]) -> dict:
    return {"Authorization": f"Bearer {token}"} if token else {}


async def start_and_introduce(http: AsyncClient, **body) -> tuple[str, dict]:
    """Start an interview and submit an introduction; returns (id, first question)."""
    started = await http.post("/api/interviews/start", json=body or None)
    assert started.status_code == 200, started.text
    interview_id = started.json()["id"]

    intro = await http.post(
        f"/api/interviews/{interview_id}/introduction",
        json={"introduction": "Jane, 3 years Excel experience"},
    )
    assert intro.status_code == 200, intro.text
    return interview_id, intro.json()["firstQuestion"]


async def answer(http: AsyncClient, interview_id: str, question: dict, text: str = "Use SUMIFS with two criteria ranges"):
    return await http.post(
        f"/api/interviews/{interview_id}/answer",
        json={"questionId": question["id"], "answer": text, "isVoiceAnswer": False},
    )
