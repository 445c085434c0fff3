"""Structured feedback produced from generator output."""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

MIN_RATING = 1
MAX_RATING = 5

RATING_LABELS = {
    5: "Excellent",
    4: "Good",
    3: "Okay",
    2: "Needs Work",
    1: "Poor",
}


class FeedbackResult(BaseModel):
    """Validated feedback on one interview answer.

    Only the parser builds these, after checking the generator's payload.
    ``feedback_points`` keeps the generator's order, which is also the order
    they are shown to the user.
    """

    model_config = ConfigDict(frozen=True)

    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    feedback_points: Tuple[str, ...] = Field(..., min_length=1)

    @property
    def rating_label(self) -> str:
        return RATING_LABELS[self.rating]

    def to_payload(self) -> Dict[str, Any]:
        """Serialized form stored with the answer and returned to clients."""
        return {"rating": self.rating, "feedback": list(self.feedback_points)}
