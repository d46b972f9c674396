"""
Tests for analytics endpoints.

Tests:
- System metrics and request load
- Evaluation history paging and filters
- Human scores and calibration
"""

import pytest

from tests.helpers import answer, start_and_introduce


async def answer_questions(http, count: int) -> str:
    interview_id, question = await start_and_introduce(http)
    for _ in range(count):
        response = await answer(http, interview_id, question)
        assert response.status_code == 200, response.text
        question = response.json()["nextQuestion"]
    return interview_id


class TestSystemMetrics:

    @pytest.mark.asyncio
    async def test_empty(self, client):
        response = await client.get("/api/analytics/metrics")

        assert response.status_code == 200
        data = response.json()
        assert data["totalEvaluations"] == 0
        assert data["averageConsistencyScore"] == 0
        assert data["calibrationAccuracy"] is None
        assert data["categoryBreakdown"] == {}
        assert data["calibrationVersion"] == "v1.2.3"
        assert set(data["systemLoad"]) == {"averageResponseTime", "errorRate", "peakConcurrency"}

    @pytest.mark.asyncio
    async def test_breakdowns(self, client):
        await answer_questions(client, 3)

        data = (await client.get("/api/analytics/metrics")).json()

        assert data["totalEvaluations"] == 3
        assert 0 <= data["averageConsistencyScore"] <= 10
        assert sum(b["sampleSize"] for b in data["categoryBreakdown"].values()) == 3
        assert data["difficultyBreakdown"]["intermediate"]["averageScore"] == 8
        assert data["systemLoad"]["peakConcurrency"] >= 1
        assert data["systemLoad"]["errorRate"] == 0

    @pytest.mark.asyncio
    async def test_filter_by_difficulty(self, client):
        await answer_questions(client, 2)

        data = (await client.get("/api/analytics/metrics", params={"difficulty": "advanced"})).json()

        assert data["totalEvaluations"] == 0


class TestEvaluationHistory:

    @pytest.mark.asyncio
    async def test_pagination(self, client):
        await answer_questions(client, 3)

        page = (await client.get("/api/analytics/evaluation-history", params={"limit": 2})).json()
        rest = (
            await client.get("/api/analytics/evaluation-history", params={"limit": 2, "offset": 2})
        ).json()

        assert page["total"] == 3
        assert page["limit"] == 2
        assert len(page["history"]) == 2
        assert len(rest["history"]) == 1
        ids = {h["evaluationId"] for h in page["history"] + rest["history"]}
        assert len(ids) == 3

    @pytest.mark.asyncio
    async def test_filter_by_category(self, client):
        await answer_questions(client, 3)
        history = (await client.get("/api/analytics/evaluation-history")).json()["history"]
        category = history[0]["category"]

        filtered = (
            await client.get("/api/analytics/evaluation-history", params={"category": category})
        ).json()

        assert filtered["total"] >= 1
        assert all(h["category"] == category for h in filtered["history"])

    @pytest.mark.asyncio
    async def test_limit_bounds(self, client):
        response = await client.get("/api/analytics/evaluation-history", params={"limit": 0})

        assert response.status_code == 422


class TestHumanScore:

    @pytest.mark.asyncio
    async def test_sets_human_score_and_accuracy(self, client):
        await answer_questions(client, 1)
        record = (await client.get("/api/analytics/evaluation-history")).json()["history"][0]

        response = await client.post(
            f"/api/analytics/evaluation-history/{record['evaluationId']}/human-score",
            json={"humanScore": 6},
        )

        assert response.status_code == 200
        assert response.json()["humanScore"] == 6
        assert response.json()["aiScore"] == 8

        metrics = (await client.get("/api/analytics/metrics")).json()
        assert metrics["calibrationAccuracy"] == 80

    @pytest.mark.asyncio
    async def test_out_of_range(self, client):
        response = await client.post(
            "/api/analytics/evaluation-history/anything/human-score", json={"humanScore": 11}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_evaluation(self, client):
        response = await client.post(
            "/api/analytics/evaluation-history/missing/human-score", json={"humanScore": 5}
        )

        assert response.status_code == 404


class TestCalibration:

    @pytest.mark.asyncio
    async def test_no_history(self, client):
        response = await client.get(
            "/api/analytics/calibration", params={"category": "macros", "difficulty": "advanced"}
        )

        assert response.status_code == 200
        assert response.json()["baseline"] is None

    @pytest.mark.asyncio
    async def test_baseline_from_history(self, client):
        await answer_questions(client, 1)
        record = (await client.get("/api/analytics/evaluation-history")).json()["history"][0]

        data = (
            await client.get(
                "/api/analytics/calibration",
                params={"category": record["category"], "difficulty": record["difficulty"]},
            )
        ).json()

        baseline = data["baseline"]
        assert baseline["sampleSize"] == 1
        assert baseline["averageAiScore"] == 8
        assert baseline["scoreVariance"] == 0
        assert baseline["confidenceLevel"] == 2

    @pytest.mark.asyncio
    async def test_requires_bucket(self, client):
        response = await client.get("/api/analytics/calibration")

        assert response.status_code == 422
