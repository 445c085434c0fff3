"""FastAPI application for the Interview Coach answer gateway."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from interview_coach import __version__
from interview_coach.api import answers, health
from interview_coach.config import get_cors_origins, get_daily_answer_limit
from interview_coach.lib.logging_config import configure_logging, create_request_context_middleware
from interview_coach.models.sql.database import create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and validate configuration before serving."""
    create_tables()
    logger.info("Answer gateway started with a daily limit of %d", get_daily_answer_limit())
    yield
    logger.info("Answer gateway shutting down")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Interview Coach API",
        description="AI-graded interview practice with a per-user daily quota",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    create_request_context_middleware(app)
    app.add_exception_handler(RequestValidationError, answers.answer_validation_exception_handler)

    app.include_router(health.router)
    app.include_router(answers.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("interview_coach.main:app", host="0.0.0.0", port=8000)
