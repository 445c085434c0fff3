"""Caller identity for the answer endpoints.

Sign-in is handled upstream: the authentication middleware in front of this
service validates the session and stores the caller on
``request.state.user_id``. This module only reads it back.
"""

import logging

from fastapi import Depends, HTTPException, Request

from interview_coach.config import get_dev_user_id, is_dev_mode
from interview_coach.lib.context import set_current_user_id

logger = logging.getLogger(__name__)


async def _get_user_id_impl(request: Request) -> str:
    """Resolve the authenticated user id, or fail with 401.

    In DEV_MODE a request without an identity is attributed to DEV_USER_ID.
    """
    user_id = getattr(request.state, "user_id", None)

    if not user_id and is_dev_mode():
        user_id = get_dev_user_id()
        logger.debug("DEV_MODE enabled - using development user %s", user_id)

    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = str(user_id)
    set_current_user_id(user_id)
    return user_id


def get_auth_dependency():
    """Get the auth dependency for route protection.

    Usage:
        @router.get("/endpoint")
        async def protected_endpoint(user_id: str = get_auth_dependency()):
            ...
    """
    return Depends(_get_user_id_impl)
