"""SQLAlchemy models for the answer gateway."""

from .database import Base, SessionLocal, engine, get_db, create_tables
from .catalog import JobTrack, Question
from .answer import AnswerRecord
from .quota import UsageQuota

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "create_tables",
    "JobTrack",
    "Question",
    "AnswerRecord",
    "UsageQuota",
]
