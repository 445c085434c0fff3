"""Stored answers with the AI feedback they received."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text, CheckConstraint

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnswerRecord(Base):
    """One successful submission: the user's answer and its parsed feedback.

    Rows are only ever appended, in the same transaction that advances the
    user's usage quota. The gateway never updates or deletes them.
    """

    __tablename__ = "answers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    user_id = Column(String(255), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False, index=True)
    answer_text = Column(Text, nullable=False)

    # {"rating": int, "feedback": [str, ...]}
    feedback = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint("answer_text <> ''", name="ck_answers_answer_text_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<AnswerRecord(id={self.id}, user_id='{self.user_id}', question_id={self.question_id})>"
