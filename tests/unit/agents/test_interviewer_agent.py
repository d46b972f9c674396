"""
Tests for the interviewer agent and its helpers.

Tests:
- Score clamping for every numeric field
- Catch-and-substitute fallbacks for each provider call
- Question normalisation and fallback order
- Adaptive context derivation
"""

import json

import pytest

from agents.common.utils import clamp_score, parse_json_response
from agents.interviewer.agent import DEFAULT_INTRODUCTION, fallback_closing_feedback
from agents.interviewer.tools import (
    DIFFICULTIES,
    EXCEL_CATEGORIES,
    FALLBACK_QUESTION,
    NEUTRAL_SCORE,
    build_adaptive_context,
    category_averages,
    infer_audio_mime_type,
    normalize_question,
    prior_answer_context,
    select_difficulty,
)


# ==================== Helpers ==================== #

class TestClampScore:
    """Test coercion of model-supplied scores."""

    @pytest.mark.parametrize("raw,expected", [
        (7, 7.0),
        (7.5, 7.5),
        ("6", 6.0),
        (15, 10.0),
        (-3, 0.0),
        (None, NEUTRAL_SCORE),
        ("excellent", NEUTRAL_SCORE),
        (True, NEUTRAL_SCORE),
        (float("nan"), NEUTRAL_SCORE),
    ])
    def test_clamp(self, raw, expected):
        """Numbers are clamped to [0, 10]; junk becomes the default."""
        assert clamp_score(raw, NEUTRAL_SCORE) == expected


class TestParseJsonResponse:
    """Test JSON extraction from model output."""

    def test_plain_json(self):
        assert parse_json_response('{"score": 3}') == {"score": 3}

    def test_code_block(self):
        text = 'Here you go:\n```json\n{"score": 4}\n```'
        assert parse_json_response(text) == {"score": 4}

    def test_invalid(self):
        assert parse_json_response("not json") is None
        assert parse_json_response("") is None


class TestSelectDifficulty:
    """Test difficulty tier selection from the running mean."""

    @pytest.mark.parametrize("scores,expected", [
        ([], "beginner"),
        ([8, 7.5], "advanced"),
        ([7.5], "advanced"),
        ([6, 5], "intermediate"),
        ([5], "intermediate"),
        ([4.9], "beginner"),
        ([2, 3], "beginner"),
    ])
    def test_tiers(self, scores, expected):
        assert select_difficulty(scores) == expected


class TestInferAudioMimeType:
    """Test MIME type inference for uploads."""

    @pytest.mark.parametrize("filename,expected", [
        ("answer.webm", "audio/webm"),
        ("answer.MP4", "audio/mp4"),
        ("answer.m4a", "audio/mp4"),
        ("answer.wav", "audio/wav"),
        ("answer.ogg", "audio/webm"),
        ("", "audio/webm"),
        (None, "audio/webm"),
    ])
    def test_mime(self, filename, expected):
        assert infer_audio_mime_type(filename) == expected


class TestAdaptiveContext:
    """Test the prompt context derived from interview history."""

    def test_empty_history(self):
        """A fresh interview targets beginner and has every category uncovered."""
        context = build_adaptive_context([], [], introduction="Jane, 3 years Excel experience")

        assert context["question_number"] == 1
        assert context["average_score"] is None
        assert context["target_difficulty"] == "beginner"
        assert context["covered_categories"] == []
        assert context["uncovered_categories"] == list(EXCEL_CATEGORIES)
        assert context["candidate_introduction"] == "Jane, 3 years Excel experience"

    def test_weak_and_strong_categories(self):
        questions = [
            {"id": "q1", "question": "a", "category": "formulas"},
            {"id": "q2", "question": "b", "category": "macros"},
        ]
        responses = [
            {"answer": "x", "score": 9, "category": "formulas"},
            {"answer": "y", "score": 3, "category": "macros"},
        ]

        context = build_adaptive_context(questions, responses)

        assert context["question_number"] == 3
        assert context["average_score"] == 6.0
        assert context["target_difficulty"] == "intermediate"
        assert context["covered_categories"] == ["formulas", "macros"]
        assert "formulas" not in context["uncovered_categories"]
        assert context["weak_categories"] == ["macros"]
        assert context["strong_categories"] == ["formulas"]

    def test_prior_answers_are_last_two_truncated(self):
        responses = [{"answer": "first"}, {"answer": "second"}, {"answer": "x" * 500}]

        prior = prior_answer_context(responses)

        assert len(prior) == 2
        assert prior[0] == "second"
        assert len(prior[1]) == 200

    def test_category_averages_skip_malformed(self):
        responses = [
            {"score": 8, "category": "charts"},
            {"score": 6, "category": "charts"},
            {"score": "bad", "category": "charts"},
            "garbage",
        ]
        assert category_averages(responses) == {"charts": 7.0}


class TestNormalizeQuestion:
    """Test validation of generated questions."""

    def test_valid(self):
        result = normalize_question(
            {"question": " What is XLOOKUP? ", "category": "VLOOKUP", "difficulty": "Advanced"},
            {"uncovered_categories": ["charts"], "target_difficulty": "beginner"},
        )
        assert result == {"question": "What is XLOOKUP?", "category": "vlookup", "difficulty": "advanced"}

    def test_unknown_category_and_difficulty(self):
        """Unknown values fall back to the first uncovered category and the target tier."""
        result = normalize_question(
            {"question": "Explain Power Pivot", "category": "power_bi", "difficulty": "expert"},
            {"uncovered_categories": ["charts", "macros"], "target_difficulty": "intermediate"},
        )
        assert result["category"] == "charts"
        assert result["difficulty"] == "intermediate"

    @pytest.mark.parametrize("raw", [{}, {"question": ""}, {"question": "   "}, {"question": 42}])
    def test_missing_text(self, raw):
        assert normalize_question(raw, {}) is None


# ==================== Evaluation client ==================== #

class TestEvaluateAnswer:
    """Test answer scoring."""

    @pytest.mark.asyncio
    async def test_scores_answer(self, evaluation_client, fake_provider):
        result = await evaluation_client.evaluate_answer(
            "What is VLOOKUP?", "It looks up values", "vlookup", "beginner", ["earlier answer"]
        )

        assert result["score"] == 8.0
        assert result["details"] == {"correctness": 8.0, "clarity": 8.0, "completeness": 8.0}
        assert set(result["detailedMetrics"]) == {
            "technicalAccuracy",
            "practicalApplication",
            "communicationClarity",
            "problemSolvingApproach",
        }
        assert fake_provider.count("evaluate") == 1

    @pytest.mark.asyncio
    async def test_out_of_range_values_are_clamped(self, evaluation_client, fake_provider):
        """Whatever the model returns, every number ends up in [0, 10]."""
        fake_provider.score = 42
        fake_provider.details = {"correctness": -5, "clarity": 11, "completeness": "7"}

        result = await evaluation_client.evaluate_answer("Q", "A", "formulas", "beginner")

        assert result["score"] == 10.0
        assert result["details"] == {"correctness": 0.0, "clarity": 10.0, "completeness": 7.0}
        for value in result["detailedMetrics"].values():
            assert 0 <= value <= 10

    @pytest.mark.asyncio
    async def test_provider_failure_returns_neutral_score(self, evaluation_client, fake_provider):
        fake_provider.failing.add("evaluate")

        result = await evaluation_client.evaluate_answer("Q", "A", "formulas", "beginner")

        assert result["score"] == NEUTRAL_SCORE
        assert all(v == NEUTRAL_SCORE for v in result["details"].values())
        assert all(v == NEUTRAL_SCORE for v in result["detailedMetrics"].values())
        assert result["feedback"]

    @pytest.mark.asyncio
    async def test_non_json_response_returns_neutral_score(self, evaluation_client, fake_provider):
        fake_provider.overrides["evaluate"] = lambda: "I think this answer is great"

        result = await evaluation_client.evaluate_answer("Q", "A", "formulas", "beginner")

        assert result["score"] == NEUTRAL_SCORE

    @pytest.mark.asyncio
    async def test_missing_provider_client(self):
        """Without an API key every call degrades to its fallback."""
        from agents.interviewer.agent import EvaluationClient

        client = EvaluationClient(client=None)
        result = await client.evaluate_answer("Q", "A", "formulas", "beginner")

        assert result["score"] == NEUTRAL_SCORE


class TestTranscribe:
    """Test audio transcription."""

    @pytest.mark.asyncio
    async def test_transcribes(self, evaluation_client, fake_provider):
        text = await evaluation_client.transcribe(b"\x00\x01", "answer.wav")

        assert text == fake_provider.transcript
        _, kwargs = fake_provider.aio.models.generate_content.call_args
        part = kwargs["contents"][0]
        assert part.inline_data.mime_type == "audio/wav"

    @pytest.mark.asyncio
    async def test_failure_returns_empty_string(self, evaluation_client, fake_provider):
        """A provider failure means 'no speech detected', not an exception."""
        fake_provider.failing.add("transcribe")

        assert await evaluation_client.transcribe(b"\x00\x01", "answer.webm") == ""


class TestGenerateIntroduction:
    """Test the interview opening."""

    @pytest.mark.asyncio
    async def test_generated(self, evaluation_client):
        intro = await evaluation_client.generate_introduction("Jane")

        assert intro["greeting"] == "Hello and welcome to your Excel interview."
        assert intro["introductionRequest"] == "Please introduce yourself."

    @pytest.mark.asyncio
    async def test_failure_uses_canned_greeting(self, evaluation_client, fake_provider):
        fake_provider.failing.add("introduction")

        assert await evaluation_client.generate_introduction() == DEFAULT_INTRODUCTION


class TestGenerateNextQuestion:
    """Test adaptive question generation and its fallback chain."""

    @pytest.mark.asyncio
    async def test_generated_question(self, evaluation_client):
        context = build_adaptive_context([], [])

        question = await evaluation_client.generate_next_question(context)

        assert question["id"]
        assert question["question"]
        assert question["category"] in EXCEL_CATEGORIES
        assert question["difficulty"] in DIFFICULTIES
        assert question["source"] == "generated"

    @pytest.mark.asyncio
    async def test_failure_uses_repository_fallback(self, evaluation_client, fake_provider):
        fake_provider.failing.add("next_question")
        seen = {}

        async def lookup(covered):
            seen["covered"] = covered
            return {"id": "bank-1", "question": "Bank question", "category": "charts",
                    "difficulty": "beginner", "source": "bank"}

        context = build_adaptive_context([{"id": "q1", "question": "x", "category": "formulas"}], [])
        question = await evaluation_client.generate_next_question(context, fallback=lookup)

        assert question["id"] == "bank-1"
        assert seen["covered"] == ["formulas"]

    @pytest.mark.asyncio
    async def test_empty_repository_uses_hardcoded_question(self, evaluation_client, fake_provider):
        fake_provider.failing.add("next_question")

        async def lookup(covered):
            return None

        question = await evaluation_client.generate_next_question(
            build_adaptive_context([], []), fallback=lookup
        )

        assert question["question"] == FALLBACK_QUESTION["question"]
        assert question["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_blank_generated_question_falls_back(self, evaluation_client, fake_provider):
        fake_provider.overrides["next_question"] = lambda: json.dumps({"question": "", "category": "charts"})

        question = await evaluation_client.generate_next_question(build_adaptive_context([], []))

        assert question["source"] == "fallback"


class TestClosingFeedback:
    """Test end-of-interview feedback."""

    @pytest.mark.asyncio
    async def test_generated(self, evaluation_client):
        feedback = await evaluation_client.generate_closing_feedback(
            [{"answer": "a", "score": 8, "category": "formulas"}]
        )

        assert feedback["strengths"][0] == "Strong formulas"
        assert feedback["overallFeedback"] == "Solid Excel skills overall."

    @pytest.mark.asyncio
    async def test_failure_uses_statistics(self, evaluation_client, fake_provider):
        fake_provider.failing.add("closing_feedback")
        responses = [{"answer": "a", "score": 9}, {"answer": "b", "score": 8}]

        feedback = await evaluation_client.generate_closing_feedback(responses)

        assert feedback == fallback_closing_feedback(responses)
        assert "8.5" in feedback["overallFeedback"]

    def test_fallback_tone_depends_on_average(self):
        strong = fallback_closing_feedback([{"score": 9}, {"score": 8}])
        weak = fallback_closing_feedback([{"score": 3}, {"score": 4}])

        assert strong["overallFeedback"].startswith("Strong performance")
        assert "Review core formulas and lookup functions" in weak["improvements"]
