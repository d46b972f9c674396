"""
FastAPI application for the Excel interview service.

Run with ``uvicorn api.main:app``.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.middleware import (
    ErrorHandlingMiddleware,
    StructuredLoggingMiddleware,
    setup_error_handlers,
    setup_logging,
)
from database.engine import AsyncSessionLocal, init_db, close_db
from api.routes import (
    analytics,
    auth,
    health,
    hr,
    interviews,
    questions,
    transcribe,
)
from api.services.questions import count_questions, seed_questions

# Configure logging before anything else logs
setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

logger = logging.getLogger(__name__)


async def seed_question_bank_if_empty() -> None:
    """Populate the question bank on first start."""
    async with AsyncSessionLocal() as session:
        if await count_questions(session) == 0:
            created = await seed_questions(session)
            logger.info(f"Question bank was empty, seeded {len(created)} questions")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} ({settings.app_env})")
    await init_db()
    if settings.seed_question_bank:
        await seed_question_bank_if_empty()

    yield

    logger.info(f"Stopping {settings.app_name}")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Adaptive Excel skills interviews with AI evaluation and HR review",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

setup_error_handlers(app, debug=settings.debug)

# Middleware added last runs first: errors wrap logging, logging wraps CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    max_body_size=settings.log_max_body_size,
)
app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)

app.include_router(health.router, tags=["Health"])
app.include_router(auth.router)
app.include_router(interviews.router)
app.include_router(transcribe.router)
app.include_router(questions.router)
app.include_router(hr.router)
app.include_router(analytics.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
