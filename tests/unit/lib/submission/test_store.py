"""Unit tests for AnswerStore against a SQLite database."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from interview_coach.lib.exceptions import CommitAbortedError, QuotaExceededError
from interview_coach.lib.feedback.models import FeedbackResult
from interview_coach.lib.quota.ledger import QuotaState
from interview_coach.lib.submission.store import AnswerStore
from interview_coach.models.sql.answer import AnswerRecord
from interview_coach.models.sql.catalog import Question
from interview_coach.models.sql.quota import UsageQuota

TODAY = date(2025, 3, 14)
FEEDBACK = FeedbackResult(rating=4, feedback_points=("a", "b", "c"))


def _answer_count(session_factory, user_id="u1"):
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(AnswerRecord).where(AnswerRecord.user_id == user_id))


def _commit(store, question_id, limit=20, today=TODAY, user_id="u1"):
    return store.commit(
        user_id=user_id,
        today=today,
        limit=limit,
        question_id=question_id,
        answer_text="My answer",
        feedback=FEEDBACK,
    )


def test_get_question_includes_job_track(store, question_id):
    question = store.get_question(question_id)
    assert question.question_id == question_id
    assert question.job_track_name == "Software Engineer"
    assert question.text.startswith("Tell me about a time")


def test_get_question_unknown_returns_none(store, question_id):
    assert store.get_question(question_id + 999) is None


def test_read_quota_without_row_returns_none(store):
    assert store.read_quota("nobody") is None


def test_first_commit_creates_ledger_and_answer(store, session_factory, question_id):
    committed = _commit(store, question_id)

    assert committed.quota == QuotaState("u1", call_count=1, last_call_date=TODAY)
    assert store.read_quota("u1") == committed.quota

    with session_factory() as session:
        record = session.get(AnswerRecord, committed.answer_id)
    assert record.answer_text == "My answer"
    assert record.feedback == {"rating": 4, "feedback": ["a", "b", "c"]}
    assert record.question_id == question_id


def test_commit_increments_existing_row(store, question_id):
    _commit(store, question_id)
    committed = _commit(store, question_id)
    assert committed.quota.call_count == 2


def test_commit_at_limit_writes_nothing(store, session_factory, question_id):
    _commit(store, question_id, limit=1)

    with pytest.raises(QuotaExceededError):
        _commit(store, question_id, limit=1)

    assert _answer_count(session_factory) == 1
    assert store.read_quota("u1").call_count == 1


def test_commit_on_new_day_resets_count(store, question_id):
    yesterday = TODAY - timedelta(days=1)
    _commit(store, question_id, limit=1, today=yesterday)

    committed = _commit(store, question_id, limit=1, today=TODAY)

    assert committed.quota == QuotaState("u1", call_count=1, last_call_date=TODAY)


def test_lost_compare_and_swap_aborts(store, session_factory, question_id):
    """A writer in another process changed the row between read and update."""
    _commit(store, question_id)

    result = MagicMock()
    result.rowcount = 0
    real_factory = session_factory

    def factory_with_stale_update():
        session = real_factory()
        original_execute = session.execute

        def execute(statement, *args, **kwargs):
            if statement.is_dml:
                return result
            return original_execute(statement, *args, **kwargs)

        session.execute = execute
        return session

    racing_store = AnswerStore(factory_with_stale_update)
    with pytest.raises(CommitAbortedError) as exc_info:
        _commit(racing_store, question_id)

    assert exc_info.value.details["reason"] == "concurrent_update"
    assert _answer_count(session_factory) == 1
    assert store.read_quota("u1").call_count == 1


def test_storage_failure_aborts_without_writing(store, session_factory, question_id):
    def broken_factory():
        session = session_factory()
        session.flush = MagicMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
        return session

    with pytest.raises(CommitAbortedError) as exc_info:
        _commit(AnswerStore(broken_factory), question_id)

    assert exc_info.value.details["reason"] == "storage_error"
    assert _answer_count(session_factory) == 0
    assert store.read_quota("u1") is None


def test_list_answers_newest_first(store, question_id):
    first = _commit(store, question_id)
    second = _commit(store, question_id)
    _commit(store, question_id, user_id="someone-else")

    answers = store.list_answers("u1")

    assert [a.answer_id for a in answers] == [second.answer_id, first.answer_id]
    assert answers[0].job_track_name == "Software Engineer"
    assert answers[0].feedback == {"rating": 4, "feedback": ["a", "b", "c"]}


def test_list_answers_respects_limit(store, question_id):
    for _ in range(3):
        _commit(store, question_id)
    assert len(store.list_answers("u1", limit=2)) == 2


def test_ledger_row_matches_commit(store, session_factory, question_id):
    _commit(store, question_id)
    with session_factory() as session:
        row = session.get(UsageQuota, "u1")
    assert row.call_count == 1
    assert row.last_call_date == TODAY


def test_deleted_question_is_a_storage_error(store, session_factory, question_id):
    """The question vanished between validation and commit."""
    with session_factory() as session, session.begin():
        session.delete(session.get(Question, question_id))

    with pytest.raises(CommitAbortedError) as exc_info:
        _commit(store, question_id)

    assert exc_info.value.details["reason"] == "storage_error"
    assert store.read_quota("u1") is None


def test_ledger_row_created_concurrently_is_an_insert_conflict(store, session_factory, question_id):
    """Another process inserted the first ledger row after this commit looked for it."""
    _commit(store, question_id)

    missing_row = MagicMock()
    missing_row.one_or_none.return_value = None

    def factory_with_missed_row():
        session = session_factory()
        original_execute = session.execute

        def execute(statement, *args, **kwargs):
            if not statement.is_dml and statement.get_final_froms()[0].name == UsageQuota.__tablename__:
                return missing_row
            return original_execute(statement, *args, **kwargs)

        session.execute = execute
        return session

    with pytest.raises(CommitAbortedError) as exc_info:
        _commit(AnswerStore(factory_with_missed_row), question_id)

    assert exc_info.value.details["reason"] == "concurrent_insert"
    assert _answer_count(session_factory) == 1
    assert store.read_quota("u1").call_count == 1
