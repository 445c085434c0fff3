"""Interview Coach answer-submission gateway."""

__version__ = "0.1.0"
