"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("GOOGLE_API_KEY", "")
os.environ.setdefault("SEED_QUESTION_BANK", "false")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("APP_ENV", "development")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agents.interviewer.agent import EvaluationClient
from api.dependencies import get_evaluation_client
from api.main import app
from core.middleware.logging import request_stats
from database.engine import Base, build_engine, get_db
import database.models  # noqa: F401
from tests.helpers import FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def evaluation_client(fake_provider) -> EvaluationClient:
    return EvaluationClient(client=fake_provider, model="test-model", max_questions=10)


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, evaluation_client):
    """HTTP client against the app with database and provider overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_evaluation_client] = lambda: evaluation_client
    request_stats.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
