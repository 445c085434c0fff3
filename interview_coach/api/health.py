"""Liveness endpoint."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from interview_coach import __version__

router = APIRouter()


@router.get("/health")
async def health_check_endpoint() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "Interview Coach answer gateway",
        "version": __version__,
    }
