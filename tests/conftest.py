"""
Pytest configuration and fixtures for the answer gateway tests.

DATABASE_URL must point at SQLite before interview_coach.models.sql.database
is imported, because the module builds its engine at import time.
"""
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="interview_coach_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'app.db'}"
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("DAILY_ANSWER_LIMIT", "20")

from interview_coach.lib.exceptions import GenerationFailedError  # noqa: E402
from interview_coach.lib.submission.orchestrator import SubmissionOrchestrator  # noqa: E402
from interview_coach.lib.submission.store import AnswerStore  # noqa: E402
from interview_coach.models.sql.catalog import JobTrack, Question  # noqa: E402
from interview_coach.models.sql.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    create_tables,
)

TODAY = date(2025, 3, 14)

VALID_FEEDBACK = (
    'Here is my assessment:\n'
    '{"rating": 4, "feedback": ["Clear STAR structure.", '
    '"Quantify the outcome of the migration.", "Confident tone."]}\n'
    'Good luck!'
)


class FakeGenerator:
    """Scripted feedback generator.

    Each call pops the next scripted item; strings are returned, exceptions
    raised. When the script runs out, ``default`` is used.
    """

    def __init__(
        self,
        script: Optional[List[Union[str, Exception]]] = None,
        default: Union[str, Exception] = VALID_FEEDBACK,
    ):
        self.script = list(script or [])
        self.default = default
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def db_engine(tmp_path):
    """Fresh SQLite database file with all tables created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'gateway.db'}")
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def question_id(session_factory) -> int:
    """Seed one job track with one question and return the question id."""
    with session_factory() as session, session.begin():
        track = JobTrack(name="Software Engineer")
        question = Question(
            text="Tell me about a time you faced a difficult technical challenge.",
            job_track=track,
        )
        session.add_all([track, question])
        session.flush()
        seeded_id = question.id
    return seeded_id


@pytest.fixture
def store(session_factory) -> AnswerStore:
    return AnswerStore(session_factory)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def failing_generator() -> FakeGenerator:
    return FakeGenerator(default=GenerationFailedError("upstream unavailable"))


@pytest.fixture
def make_orchestrator(store):
    """Build an orchestrator over the test store with a fixed clock."""

    def _make(generator, daily_limit: int = 20, today: date = TODAY) -> SubmissionOrchestrator:
        return SubmissionOrchestrator(
            store=store,
            generator=generator,
            daily_limit=daily_limit,
            clock=lambda: today,
        )

    return _make


@pytest.fixture
def make_generator():
    """Factory for scripted generators: make_generator(["text", SomeError()])."""
    return FakeGenerator
