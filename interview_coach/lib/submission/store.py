"""Persistence for answers, usage quotas and question lookups.

``AnswerStore.commit`` is the only write path. It re-reads the user's ledger
row inside a transaction, re-applies the quota rule and writes the new quota
together with the answer record, so either both rows change or neither does.
"""

from __future__ import annotations

import logging
import threading
import uuid
import weakref
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from interview_coach.models.sql.answer import AnswerRecord
from interview_coach.models.sql.catalog import JobTrack, Question
from interview_coach.models.sql.quota import UsageQuota
from ..exceptions import CommitAbortedError
from ..feedback.models import FeedbackResult
from ..quota.ledger import QuotaState, try_consume

logger = logging.getLogger(__name__)


# Same-user commits inside one process are serialized so they queue on the
# ledger row instead of failing the compare-and-swap. Commits from other
# processes are still caught by the row lock and the guarded UPDATE.
_user_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_user_locks_guard = threading.Lock()


def _lock_for_user(user_id: str) -> threading.Lock:
    with _user_locks_guard:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _user_locks[user_id] = lock
        return lock


def _is_ledger_conflict(error: IntegrityError) -> bool:
    """True when the violated constraint is the usage ledger's primary key.

    Both SQLite and PostgreSQL name the table or its key in the message; a
    foreign key failure on the answer row does not mention it.
    """
    message = str(error.orig).lower()
    return UsageQuota.__tablename__ in message and ("unique" in message or "duplicate" in message)


@dataclass(frozen=True)
class QuestionContext:
    """What the grading prompt needs to know about a question."""

    question_id: int
    text: str
    job_track_name: str


@dataclass(frozen=True)
class CommittedAnswer:
    """Result of a successful commit."""

    answer_id: str
    created_at: datetime
    quota: QuotaState


@dataclass(frozen=True)
class StoredAnswer:
    """An answer row joined with its question, as listed in the history."""

    answer_id: str
    question_id: int
    question_text: str
    job_track_name: str
    answer_text: str
    feedback: Dict[str, Any]
    created_at: datetime


class AnswerStore:
    """SQLAlchemy-backed store used by the submission orchestrator.

    Each call opens and closes its own session so the store can be used from
    worker threads.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_question(self, question_id: int) -> Optional[QuestionContext]:
        with self._session_factory() as session:
            row = session.execute(
                select(Question.id, Question.text, JobTrack.name)
                .join(JobTrack, Question.job_track_id == JobTrack.id)
                .where(Question.id == question_id)
            ).one_or_none()

        if row is None:
            return None
        return QuestionContext(question_id=row[0], text=row[1], job_track_name=row[2])

    def read_quota(self, user_id: str) -> Optional[QuotaState]:
        with self._session_factory() as session:
            row = session.execute(
                select(UsageQuota.call_count, UsageQuota.last_call_date)
                .where(UsageQuota.user_id == user_id)
            ).one_or_none()

        if row is None:
            return None
        return QuotaState(user_id=user_id, call_count=row[0], last_call_date=row[1])

    def commit(
        self,
        *,
        user_id: str,
        today: date,
        limit: int,
        question_id: int,
        answer_text: str,
        feedback: FeedbackResult,
    ) -> CommittedAnswer:
        """Consume one call and store the answer in a single transaction.

        Raises:
            QuotaExceededError: The freshest ledger state is already at ``limit``.
                Nothing is written.
            CommitAbortedError: Another writer changed the ledger row first, or
                the database rejected the transaction. Nothing is written.
        """
        with _lock_for_user(user_id):
            try:
                with self._session_factory() as session, session.begin():
                    row = session.execute(
                        select(UsageQuota.call_count, UsageQuota.last_call_date)
                        .where(UsageQuota.user_id == user_id)
                        .with_for_update()
                    ).one_or_none()

                    if row is None:
                        current = QuotaState.initial(user_id)
                    else:
                        current = QuotaState(user_id=user_id, call_count=row[0], last_call_date=row[1])

                    updated = try_consume(current, today, limit)

                    if row is None:
                        session.add(UsageQuota(
                            user_id=user_id,
                            call_count=updated.call_count,
                            last_call_date=updated.last_call_date,
                        ))
                    else:
                        if current.last_call_date is None:
                            date_matches = UsageQuota.last_call_date.is_(None)
                        else:
                            date_matches = UsageQuota.last_call_date == current.last_call_date
                        result = session.execute(
                            update(UsageQuota)
                            .where(
                                UsageQuota.user_id == user_id,
                                UsageQuota.call_count == current.call_count,
                                date_matches,
                            )
                            .values(
                                call_count=updated.call_count,
                                last_call_date=updated.last_call_date,
                            )
                            .execution_options(synchronize_session=False)
                        )
                        if result.rowcount != 1:
                            raise CommitAbortedError(
                                "Usage quota changed during commit, please retry",
                                details={"reason": "concurrent_update"},
                            )

                    record = AnswerRecord(
                        id=str(uuid.uuid4()),
                        user_id=user_id,
                        question_id=question_id,
                        answer_text=answer_text,
                        feedback=feedback.to_payload(),
                        created_at=datetime.now(timezone.utc),
                    )
                    session.add(record)
                    session.flush()
            except IntegrityError as e:
                if not _is_ledger_conflict(e):
                    logger.error("Integrity error committing answer for user %s: %s", user_id, str(e))
                    raise CommitAbortedError(
                        "Failed to save answer",
                        details={"reason": "storage_error"},
                    ) from e
                logger.warning("Ledger row for user %s was created concurrently: %s", user_id, str(e))
                raise CommitAbortedError(
                    "Usage quota changed during commit, please retry",
                    details={"reason": "concurrent_insert"},
                ) from e
            except SQLAlchemyError as e:
                logger.error("Failed to commit answer for user %s: %s", user_id, str(e), exc_info=True)
                raise CommitAbortedError(
                    "Failed to save answer",
                    details={"reason": "storage_error"},
                ) from e

        return CommittedAnswer(answer_id=record.id, created_at=record.created_at, quota=updated)

    def list_answers(self, user_id: str, limit: int = 50) -> List[StoredAnswer]:
        """Newest-first answers for ``user_id``."""
        with self._session_factory() as session:
            rows = session.execute(
                select(AnswerRecord, Question.text, JobTrack.name)
                .join(Question, AnswerRecord.question_id == Question.id)
                .join(JobTrack, Question.job_track_id == JobTrack.id)
                .where(AnswerRecord.user_id == user_id)
                .order_by(AnswerRecord.created_at.desc())
                .limit(limit)
            ).all()

        return [
            StoredAnswer(
                answer_id=record.id,
                question_id=record.question_id,
                question_text=question_text,
                job_track_name=job_track_name,
                answer_text=record.answer_text,
                feedback=record.feedback,
                created_at=record.created_at,
            )
            for record, question_text, job_track_name in rows
        ]
