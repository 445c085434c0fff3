"""Context variables for request-scoped data.

The answers router records the authenticated user at the start of each
request; the logging filter reads it back so every log line emitted while
handling a submission is attributed to that user.

Usage:
    set_current_user_id(user_id)
    ...
    user_id = get_current_user_id()

Note: These use contextvars which are properly isolated per async task.
"""

from contextvars import ContextVar
from typing import Optional

_current_user_id: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


def set_current_user_id(user_id: str) -> None:
    """Set the current user ID.

    Args:
        user_id: Identifier of the authenticated caller
    """
    _current_user_id.set(user_id)


def get_current_user_id() -> Optional[str]:
    """Get the current user ID.

    Returns:
        The user ID if set, None otherwise
    """
    return _current_user_id.get()


def clear_context() -> None:
    """Clear all context variables.

    Useful for testing or cleanup. In production, context variables
    are automatically isolated per request/async task.
    """
    _current_user_id.set(None)
