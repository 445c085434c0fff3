"""HTTP API for the answer gateway."""

from . import answers
from . import health

__all__ = [
    "answers",
    "health",
]
