"""Practice catalog models: job tracks and their interview questions.

The catalog is administered elsewhere; the answer gateway only reads it to
resolve the question being answered and the job track it belongs to.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


class JobTrack(Base):
    """A role the user is practicing for (e.g. "Software Engineer")."""

    __tablename__ = "job_tracks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    questions = relationship("Question", back_populates="job_track")

    def __repr__(self) -> str:
        return f"<JobTrack(id={self.id}, name='{self.name}')>"


class Question(Base):
    """An interview question within a job track."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    job_track_id = Column(Integer, ForeignKey("job_tracks.id"), nullable=False, index=True)

    job_track = relationship("JobTrack", back_populates="questions")

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, job_track_id={self.job_track_id})>"
