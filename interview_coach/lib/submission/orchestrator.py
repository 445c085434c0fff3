"""SubmissionOrchestrator: grade an interview answer under a daily quota.

A submission moves through these stages:

    VALIDATING -> QUOTA_PRECHECK -> GENERATING -> PARSING -> COMMITTING -> SUCCEEDED

Any stage can fail, which raises a SubmissionError tagged with the failing
stage. Only COMMITTING writes anything, and it writes the answer and the
quota increment together, so a failed or malformed AI call never uses up
quota. The quota pre-check is a fast path that saves an AI call when the user
is clearly out of quota; the authoritative check is repeated inside the
commit transaction.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from interview_coach.config import get_daily_answer_limit
from ..exceptions import (
    FeedbackParseError,
    GenerationFailedError,
    InvalidInputError,
    QuestionNotFoundError,
    QuotaExceededError,
    SubmissionCancelledError,
    SubmissionError,
)
from ..feedback.generator import FeedbackGenerator
from ..feedback.models import FeedbackResult
from ..feedback.parser import parse_feedback, validate_feedback_payload
from ..feedback.prompts import build_feedback_prompt
from ..quota.ledger import QuotaState, effective_count, next_reset, quota_today, remaining
from .store import AnswerStore, QuestionContext

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


class SubmissionStage(str, Enum):
    """Stages of a single answer submission."""

    VALIDATING = "validating"
    QUOTA_PRECHECK = "quota_precheck"
    GENERATING = "generating"
    PARSING = "parsing"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Returned to the caller when a submission succeeds."""

    answer_id: str
    feedback: FeedbackResult
    used_today: int
    remaining_today: int
    created_at: datetime


@dataclass(frozen=True)
class UsageSnapshot:
    """Where a user stands against today's limit."""

    daily_limit: int
    used_today: int
    remaining_today: int
    resets_on: date


@dataclass(frozen=True)
class HistoryEntry:
    """A past answer with its feedback, for the history page."""

    answer_id: str
    question_id: int
    question_text: str
    job_track_name: str
    answer_text: str
    feedback: FeedbackResult
    created_at: datetime


class SubmissionOrchestrator:
    """Coordinates validation, quota, generation, parsing and the commit.

    Store calls are synchronous SQLAlchemy work and run in worker threads;
    the generator is awaited directly.
    """

    def __init__(
        self,
        store: AnswerStore,
        generator: FeedbackGenerator,
        daily_limit: Optional[int] = None,
        clock: Callable[[], date] = quota_today,
    ):
        """Initialize the orchestrator.

        Args:
            store: Answer/quota persistence
            generator: AI feedback capability
            daily_limit: Calls per user per UTC day (defaults to DAILY_ANSWER_LIMIT)
            clock: Returns the current quota day; injectable for tests
        """
        self._store = store
        self._generator = generator
        self.daily_limit = daily_limit if daily_limit is not None else get_daily_answer_limit()
        self._clock = clock

    async def submit_answer(
        self,
        user_id: str,
        question_id: Any,
        answer_text: Optional[str],
        is_cancelled: Optional[CancelCheck] = None,
    ) -> SubmissionOutcome:
        """Grade ``answer_text`` and record it against the user's daily quota.

        Args:
            user_id: Authenticated caller
            question_id: Question being answered
            answer_text: The user's free-text answer
            is_cancelled: Optional coroutine function; when it reports True
                before the commit, the submission is abandoned without writing

        Returns:
            SubmissionOutcome with the validated feedback

        Raises:
            SubmissionError: One of its subclasses, with ``stage`` set
        """
        stage = SubmissionStage.VALIDATING
        try:
            question, cleaned_answer = await self._validate(question_id, answer_text)

            stage = SubmissionStage.QUOTA_PRECHECK
            today = self._clock()
            await self._precheck_quota(user_id, today)

            stage = SubmissionStage.GENERATING
            prompt = build_feedback_prompt(question.text, question.job_track_name, cleaned_answer)
            raw_text = await self._generate(prompt)

            stage = SubmissionStage.PARSING
            feedback = parse_feedback(raw_text)

            stage = SubmissionStage.COMMITTING
            if is_cancelled is not None and await is_cancelled():
                raise SubmissionCancelledError("Client disconnected before feedback was saved")

            # Generation can run past midnight; the commit counts against the current day
            commit_day = self._clock()
            committed = await asyncio.to_thread(
                self._store.commit,
                user_id=user_id,
                today=commit_day,
                limit=self.daily_limit,
                question_id=question.question_id,
                answer_text=cleaned_answer,
                feedback=feedback,
            )
        except SubmissionError as e:
            e.stage = stage.value
            self._log_failure(e, user_id, stage, question_id)
            logger.debug("Submission for user %s -> %s", user_id, SubmissionStage.FAILED.value)
            raise

        stage = SubmissionStage.SUCCEEDED
        logger.debug("Submission for user %s -> %s", user_id, stage.value)
        used = committed.quota.call_count
        logger.info(
            "Stored answer %s for question %s with rating %s (%d/%d used today)",
            committed.answer_id,
            question.question_id,
            feedback.rating,
            used,
            self.daily_limit,
            extra={
                "stage": stage.value,
                "question_id": question.question_id,
                "answer_id": committed.answer_id,
                "rating": feedback.rating,
                "used_today": used,
            },
        )
        return SubmissionOutcome(
            answer_id=committed.answer_id,
            feedback=feedback,
            used_today=used,
            remaining_today=max(self.daily_limit - used, 0),
            created_at=committed.created_at,
        )

    async def get_usage(self, user_id: str) -> UsageSnapshot:
        today = self._clock()
        state = await self._current_quota(user_id)
        return UsageSnapshot(
            daily_limit=self.daily_limit,
            used_today=effective_count(state, today),
            remaining_today=remaining(state, today, self.daily_limit),
            resets_on=next_reset(today),
        )

    async def list_history(self, user_id: str, limit: int = 50) -> List[HistoryEntry]:
        """Newest-first history; rows whose stored feedback no longer validates are skipped."""
        rows = await asyncio.to_thread(self._store.list_answers, user_id, limit)

        entries = []
        for row in rows:
            try:
                feedback = validate_feedback_payload(row.feedback or {})
            except FeedbackParseError as e:
                logger.warning("Skipping answer %s with unreadable feedback: %s", row.answer_id, e.message)
                continue
            entries.append(HistoryEntry(
                answer_id=row.answer_id,
                question_id=row.question_id,
                question_text=row.question_text,
                job_track_name=row.job_track_name,
                answer_text=row.answer_text,
                feedback=feedback,
                created_at=row.created_at,
            ))
        return entries

    async def _validate(self, question_id: Any, answer_text: Optional[str]):
        if question_id is None or isinstance(question_id, bool):
            raise InvalidInputError("Question ID and answer text are required.", details={"field": "questionId"})
        try:
            question_id = int(question_id)
        except (TypeError, ValueError):
            raise InvalidInputError("Question ID must be an integer.", details={"field": "questionId"}) from None

        cleaned_answer = answer_text.strip() if isinstance(answer_text, str) else ""
        if not cleaned_answer:
            raise InvalidInputError("Question ID and answer text are required.", details={"field": "answerText"})

        question: Optional[QuestionContext] = await asyncio.to_thread(self._store.get_question, question_id)
        if question is None:
            raise QuestionNotFoundError("Question not found.", details={"question_id": question_id})
        return question, cleaned_answer

    async def _current_quota(self, user_id: str) -> QuotaState:
        state = await asyncio.to_thread(self._store.read_quota, user_id)
        return state or QuotaState.initial(user_id)

    async def _precheck_quota(self, user_id: str, today: date) -> None:
        state = await self._current_quota(user_id)
        used = effective_count(state, today)
        if used >= self.daily_limit:
            raise QuotaExceededError(
                f"Daily limit of {self.daily_limit} feedback requests reached. Please try again tomorrow.",
                limit=self.daily_limit,
                used=used,
            )

    async def _generate(self, prompt: str) -> str:
        try:
            return await self._generator.generate(prompt)
        except SubmissionError:
            raise
        except Exception as e:
            # Generators are expected to raise GenerationFailedError themselves
            raise GenerationFailedError(
                "Failed to get AI feedback",
                details={"error": type(e).__name__},
            ) from e

    def _log_failure(self, error: SubmissionError, user_id: str, stage: SubmissionStage, question_id: Any) -> None:
        extra = {"stage": stage.value, "question_id": question_id, "error_code": error.error_code}
        if isinstance(error, (InvalidInputError, QuestionNotFoundError, SubmissionCancelledError)):
            logger.info("Submission rejected at %s: %s", stage.value, error.message, extra=extra)
        elif isinstance(error, QuotaExceededError):
            logger.warning(
                "Quota exceeded for user %s at %s (%s/%s)",
                user_id,
                stage.value,
                error.used,
                error.limit,
                extra=extra,
            )
        elif isinstance(error, FeedbackParseError):
            logger.warning(
                "Unusable AI feedback at %s: %s (%s)",
                stage.value,
                error.message,
                error.details.get("reason"),
                extra=extra,
            )
        else:
            logger.error("Submission failed at %s: %s", stage.value, error.message, exc_info=error, extra=extra)
