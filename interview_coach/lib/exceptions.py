"""Custom exception classes for the answer-submission gateway."""

from typing import Optional, Dict, Any


class SubmissionError(Exception):
    """Base exception for answer submission failures.

    Every failure raised by the gateway carries a stable ``error_code`` and the
    HTTP ``status_code`` the web layer should answer with. ``stage`` is filled
    in by the orchestrator with the submission stage that failed.
    """

    ERROR_CODE = "SUBMIT_001"
    STATUS_CODE = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize exception with message, code, and optional details.

        Args:
            message: Error message
            error_code: Optional error code override
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.ERROR_CODE
        self.status_code = self.STATUS_CODE
        self.details = details or {}
        self.stage: Optional[str] = None


class InvalidInputError(SubmissionError):
    """Raised when required submission fields are missing or blank."""

    ERROR_CODE = "SUBMIT_INPUT_001"
    STATUS_CODE = 400


class QuestionNotFoundError(SubmissionError):
    """Raised when the answered question does not exist."""

    ERROR_CODE = "SUBMIT_QUESTION_001"
    STATUS_CODE = 404


class QuotaExceededError(SubmissionError):
    """Raised when the user has used up today's feedback calls."""

    ERROR_CODE = "SUBMIT_QUOTA_001"
    STATUS_CODE = 429

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        limit: Optional[int] = None,
        used: Optional[int] = None
    ):
        """Initialize with the limit and the count already used today."""
        super().__init__(message, error_code)
        self.limit = limit
        self.used = used
        self.details["limit"] = limit
        self.details["used"] = used


class GenerationFailedError(SubmissionError):
    """Raised when the feedback generator errors out or returns nothing."""

    ERROR_CODE = "SUBMIT_GENERATION_001"
    STATUS_CODE = 502


class FeedbackParseError(SubmissionError):
    """Base class for generator output that cannot be turned into feedback."""

    ERROR_CODE = "SUBMIT_PARSE_001"
    STATUS_CODE = 502


class MalformedFeedbackError(FeedbackParseError):
    """Raised when no decodable JSON object is found in the generator output."""

    ERROR_CODE = "SUBMIT_PARSE_002"


class InvalidRatingError(FeedbackParseError):
    """Raised when the rating is missing, not an integer, or outside 1-5."""

    ERROR_CODE = "SUBMIT_PARSE_003"


class InvalidFeedbackBodyError(FeedbackParseError):
    """Raised when the feedback points are missing, empty, or not strings."""

    ERROR_CODE = "SUBMIT_PARSE_004"


class CommitAbortedError(SubmissionError):
    """Raised when the atomic answer/quota commit could not be applied.

    Covers a concurrent writer winning the ledger row and plain storage
    failures. Nothing was written; the caller may resubmit.
    """

    ERROR_CODE = "SUBMIT_COMMIT_001"
    STATUS_CODE = 503


class SubmissionCancelledError(SubmissionError):
    """Raised when the caller went away before the commit."""

    ERROR_CODE = "SUBMIT_CANCELLED_001"
    STATUS_CODE = 499
