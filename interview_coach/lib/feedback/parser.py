"""Turn raw generator text into a validated FeedbackResult.

The generator is asked for a bare JSON object but nothing enforces that: the
model may wrap it in prose or code fences, or return something that is not
JSON at all. Parsing is therefore strict and all-or-nothing; any problem
raises a FeedbackParseError subclass and no partial result is produced.
"""

import json
import logging
from typing import Any, Dict, List

from ..exceptions import (
    InvalidFeedbackBodyError,
    InvalidRatingError,
    MalformedFeedbackError,
)
from .models import MAX_RATING, MIN_RATING, FeedbackResult

logger = logging.getLogger(__name__)

FEEDBACK_KEYS = ("feedback", "feedback_points", "feedbackPoints")


def extract_json_object(raw_text: str) -> Dict[str, Any]:
    """Decode the span from the first ``{`` to the last ``}`` of ``raw_text``."""
    if not isinstance(raw_text, str):
        raise MalformedFeedbackError("Generator output is not text")

    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end < start:
        raise MalformedFeedbackError(
            "AI did not return valid feedback",
            details={"reason": "no_json_object"},
        )

    candidate = raw_text[start:end + 1]
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedFeedbackError(
            "AI did not return valid feedback",
            details={"reason": "invalid_json", "position": exc.pos},
        ) from exc

    if not isinstance(data, dict):
        raise MalformedFeedbackError(
            "AI did not return valid feedback",
            details={"reason": "not_an_object"},
        )
    return data


def _validate_rating(data: Dict[str, Any]) -> int:
    if "rating" not in data or data["rating"] is None:
        raise InvalidRatingError("Feedback is missing a rating", details={"reason": "missing"})

    rating = data["rating"]
    # bool is an int subclass; floats are rejected even when integral
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(
            f"Feedback rating must be an integer, got {rating!r}",
            details={"reason": "not_integer", "value": repr(rating)},
        )
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRatingError(
            f"Feedback rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}",
            details={"reason": "out_of_range", "value": rating},
        )
    return rating


def _validate_points(data: Dict[str, Any]) -> List[str]:
    points = None
    for key in FEEDBACK_KEYS:
        if key in data:
            points = data[key]
            break

    if points is None:
        raise InvalidFeedbackBodyError("Feedback points are missing", details={"reason": "missing"})
    if not isinstance(points, list):
        raise InvalidFeedbackBodyError(
            "Feedback points must be a list of strings",
            details={"reason": "not_a_list"},
        )
    if not points:
        raise InvalidFeedbackBodyError("Feedback points are empty", details={"reason": "empty"})

    cleaned = []
    for index, point in enumerate(points):
        if not isinstance(point, str):
            raise InvalidFeedbackBodyError(
                f"Feedback point {index} is not a string",
                details={"reason": "not_a_string", "index": index},
            )
        if not point.strip():
            raise InvalidFeedbackBodyError(
                f"Feedback point {index} is empty",
                details={"reason": "empty_point", "index": index},
            )
        cleaned.append(point.strip())
    return cleaned


def validate_feedback_payload(data: Dict[str, Any]) -> FeedbackResult:
    """Validate an already-decoded feedback object."""
    rating = _validate_rating(data)
    points = _validate_points(data)
    return FeedbackResult(rating=rating, feedback_points=tuple(points))


def parse_feedback(raw_text: str) -> FeedbackResult:
    """Parse generator output into a FeedbackResult.

    Raises:
        MalformedFeedbackError: No decodable JSON object in the text
        InvalidRatingError: Rating missing, not an integer, or outside 1-5
        InvalidFeedbackBodyError: Feedback points missing, empty, or not strings
    """
    data = extract_json_object(raw_text)
    result = validate_feedback_payload(data)
    logger.debug("Parsed feedback with rating %s and %d points", result.rating, len(result.feedback_points))
    return result
