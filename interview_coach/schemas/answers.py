"""Pydantic schemas for the answer submission API.

Field names on the wire are camelCase to match the practice client.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnswerSubmission(BaseModel):
    """Request schema for POST /api/answer.

    Blank answers are rejected by the orchestrator rather than here so the
    error envelope is the same as for every other submission failure.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "questionId": 1,
                    "answerText": "In my last role I led the migration of our billing service...",
                }
            ]
        },
    )

    question_id: Optional[int] = Field(
        default=None,
        alias="questionId",
        description="Identifier of the question being answered",
        examples=[1],
    )

    answer_text: Optional[str] = Field(
        default=None,
        alias="answerText",
        max_length=10000,
        description="The user's free-text answer",
    )


class FeedbackResponse(BaseModel):
    """Response schema for a graded answer."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "rating": 4,
                    "feedback": [
                        "Clear structure using the STAR method.",
                        "Quantify the result, e.g. the latency you saved.",
                        "Confident, professional tone.",
                    ],
                    "ratingLabel": "Good",
                    "answerId": "f47ac10b-58cc-4372-a567-0e02b2c3d479",
                    "remainingToday": 12,
                }
            ]
        },
    )

    rating: int = Field(..., ge=1, le=5, description="Score from 1 to 5")
    feedback: List[str] = Field(..., description="Feedback points in presentation order")
    rating_label: str = Field(..., alias="ratingLabel", examples=["Good"])
    answer_id: str = Field(..., alias="answerId")
    remaining_today: int = Field(..., alias="remainingToday", ge=0)


class UsageResponse(BaseModel):
    """Response schema for GET /api/usage."""

    model_config = ConfigDict(populate_by_name=True)

    daily_limit: int = Field(..., alias="dailyLimit")
    used_today: int = Field(..., alias="usedToday")
    remaining_today: int = Field(..., alias="remainingToday")
    resets_on: date = Field(..., alias="resetsOn", description="UTC date the count starts over")


class HistoryItem(BaseModel):
    """One past answer in GET /api/history."""

    model_config = ConfigDict(populate_by_name=True)

    answer_id: str = Field(..., alias="answerId")
    question_id: int = Field(..., alias="questionId")
    question: str
    job_track: str = Field(..., alias="jobTrack")
    answer_text: str = Field(..., alias="answerText")
    rating: int
    rating_label: str = Field(..., alias="ratingLabel")
    feedback: List[str]
    created_at: datetime = Field(..., alias="createdAt")


class ErrorResponse(BaseModel):
    """Response schema for every error case."""

    status: str = Field(
        ...,
        pattern="^error$",
        description="Always 'error' for error responses",
        examples=["error"],
    )

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Daily limit of 20 feedback requests reached. Please try again tomorrow."],
    )

    code: str = Field(
        ...,
        description="Stable error code",
        examples=["SUBMIT_QUOTA_001"],
    )
