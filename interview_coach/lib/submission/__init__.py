"""Answer submission: orchestration and transactional persistence."""

from .orchestrator import (
    HistoryEntry,
    SubmissionOrchestrator,
    SubmissionOutcome,
    SubmissionStage,
    UsageSnapshot,
)
from .store import AnswerStore, CommittedAnswer, QuestionContext, StoredAnswer

__all__ = [
    "AnswerStore",
    "CommittedAnswer",
    "HistoryEntry",
    "QuestionContext",
    "StoredAnswer",
    "SubmissionOrchestrator",
    "SubmissionOutcome",
    "SubmissionStage",
    "UsageSnapshot",
]
