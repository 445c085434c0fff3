"""AI feedback library.

Components:
    - models: FeedbackResult value object and rating labels
    - parser: strict extraction and validation of generator output
    - prompts: grading prompt construction
    - generator: FeedbackGenerator protocol and the Gemini client
"""

from .models import FeedbackResult, RATING_LABELS
from .parser import parse_feedback, validate_feedback_payload
from .prompts import build_feedback_prompt

__all__ = [
    "FeedbackResult",
    "RATING_LABELS",
    "parse_feedback",
    "validate_feedback_payload",
    "build_feedback_prompt",
]
