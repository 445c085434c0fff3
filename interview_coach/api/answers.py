"""Answer submission API endpoints.

POST /api/answer grades a practice answer with the AI coach and stores it,
counting against the caller's daily quota. GET /api/usage and GET /api/history
report the quota and past answers.
"""

import logging
from functools import lru_cache
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from interview_coach.api.auth import get_auth_dependency
from interview_coach.lib.exceptions import InvalidInputError, SubmissionError
from interview_coach.lib.feedback.generator import FeedbackGenerator, GeminiFeedbackGenerator
from interview_coach.lib.submission.orchestrator import SubmissionOrchestrator
from interview_coach.lib.submission.store import AnswerStore
from interview_coach.models.sql.database import SessionLocal
from interview_coach.schemas.answers import (
    AnswerSubmission,
    ErrorResponse,
    FeedbackResponse,
    HistoryItem,
    UsageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["answers"])


@lru_cache(maxsize=1)
def get_feedback_generator() -> FeedbackGenerator:
    """Shared generator client (one HTTP connection pool per process)."""
    return GeminiFeedbackGenerator()


def get_orchestrator(
    generator: Annotated[FeedbackGenerator, Depends(get_feedback_generator)],
) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(store=AnswerStore(SessionLocal), generator=generator)


def _error_response(error: SubmissionError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={
            "status": "error",
            "error": error.message,
            "code": error.error_code,
        },
    )


async def answer_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert 422 body validation errors on POST /api/answer to the 400 error envelope.

    Wrong-typed or oversized fields are reported the same way as a blank answer.
    Other endpoints keep FastAPI's default 422 response.
    """
    if request.url.path.rstrip("/") != f"{router.prefix}/answer":
        return await request_validation_exception_handler(request, exc)

    fields = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        fields.append({"field": field, "message": error["msg"]})

    logger.info("Rejected malformed answer submission: %s", fields)
    summary = "; ".join(f"{f['field']}: {f['message']}" for f in fields if f["field"])
    message = f"Invalid answer submission ({summary})." if summary else "Invalid answer submission."
    return _error_response(InvalidInputError(message, details={"fields": fields}))


def _unexpected_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error": "Failed to get AI feedback.",
            "code": "INTERNAL_001",
        },
    )


@router.post(
    "/answer",
    response_model=FeedbackResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing question or blank answer"},
        404: {"model": ErrorResponse, "description": "Question not found"},
        429: {"model": ErrorResponse, "description": "Daily feedback limit reached"},
        502: {"model": ErrorResponse, "description": "AI feedback failed or was unusable"},
        503: {"model": ErrorResponse, "description": "Answer could not be saved, retry"},
    },
    summary="Submit an answer for AI feedback",
)
async def submit_answer(
    submission: AnswerSubmission,
    request: Request,
    orchestrator: Annotated[SubmissionOrchestrator, Depends(get_orchestrator)],
    user_id: str = get_auth_dependency(),
):
    """Grade an interview answer and store it.

    Failed or unusable AI responses do not count against the daily limit.

    Returns:
        FeedbackResponse with the rating and feedback points
    """
    try:
        outcome = await orchestrator.submit_answer(
            user_id=user_id,
            question_id=submission.question_id,
            answer_text=submission.answer_text,
            is_cancelled=request.is_disconnected,
        )
    except SubmissionError as e:
        return _error_response(e)
    except Exception as e:
        logger.error("Unexpected error submitting answer: %s", str(e), exc_info=True)
        return _unexpected_error_response()

    return FeedbackResponse(
        rating=outcome.feedback.rating,
        feedback=list(outcome.feedback.feedback_points),
        rating_label=outcome.feedback.rating_label,
        answer_id=outcome.answer_id,
        remaining_today=outcome.remaining_today,
    )


@router.get("/usage", response_model=UsageResponse, summary="Today's feedback usage")
async def get_usage(
    orchestrator: Annotated[SubmissionOrchestrator, Depends(get_orchestrator)],
    user_id: str = get_auth_dependency(),
):
    usage = await orchestrator.get_usage(user_id)
    return UsageResponse(
        daily_limit=usage.daily_limit,
        used_today=usage.used_today,
        remaining_today=usage.remaining_today,
        resets_on=usage.resets_on,
    )


@router.get("/history", response_model=List[HistoryItem], summary="Past answers, newest first")
async def get_history(
    orchestrator: Annotated[SubmissionOrchestrator, Depends(get_orchestrator)],
    limit: int = Query(50, ge=1, le=200),
    user_id: str = get_auth_dependency(),
):
    entries = await orchestrator.list_history(user_id, limit=limit)
    return [
        HistoryItem(
            answer_id=entry.answer_id,
            question_id=entry.question_id,
            question=entry.question_text,
            job_track=entry.job_track_name,
            answer_text=entry.answer_text,
            rating=entry.feedback.rating,
            rating_label=entry.feedback.rating_label,
            feedback=list(entry.feedback.feedback_points),
            created_at=entry.created_at,
        )
        for entry in entries
    ]
