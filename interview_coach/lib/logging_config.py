"""Logging setup for the answer gateway.

Every record carries the request id and the authenticated user. Submission
logs also carry the fields listed in ``SUBMISSION_FIELDS``; the orchestrator
passes them through ``extra`` so a single submission can be followed from
validation to commit:

    logger.warning(
        "Unusable AI feedback",
        extra={"stage": "parsing", "question_id": 3, "error_code": "SUBMIT_PARSE_003"},
    )

LOG_FORMAT=json (default) writes one JSON object per line; LOG_FORMAT=simple
writes a short human-readable line for local runs.
"""

import json
import logging
import os
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from interview_coach.config import get_log_level
from interview_coach.lib.context import get_current_user_id

# Set per HTTP request by the request context middleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Per-submission fields the orchestrator attaches with ``extra``
SUBMISSION_FIELDS = ("stage", "question_id", "answer_id", "rating", "used_today", "error_code")

QUIET_LOGGERS = ("httpcore", "httpx", "openai", "sqlalchemy.engine", "uvicorn.access")


class ContextFilter(logging.Filter):
    """Stamp request_id and user_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        if getattr(record, "user_id", None) is None:
            record.user_id = get_current_user_id()  # type: ignore[attr-defined]
        return True


def _submission_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {}
    for name in SUBMISSION_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
            "user_id": getattr(record, "user_id", None),
        }
        entry.update(_submission_fields(record))

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(entry, default=str)


class SimpleFormatter(logging.Formatter):
    """``<time> <level> <logger> - <message> [key=value ...]``"""

    def format(self, record: logging.LogRecord) -> str:
        context: List[str] = []
        for name in ("request_id", "user_id"):
            value = getattr(record, name, None)
            if value:
                context.append(f"{name}={value}")
        context.extend(f"{name}={value}" for name, value in _submission_fields(record).items())

        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} {record.levelname:<8} {record.name} - {record.getMessage()}"
        if context:
            line += f" [{' '.join(context)}]"

        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return line


def configure_logging(log_format: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger."""
    level = getattr(logging, get_log_level(), logging.INFO)

    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "").lower() or "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SimpleFormatter() if log_format == "simple" else JsonFormatter())
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_request_context_middleware(app) -> None:
    """Register request correlation middleware on a FastAPI app."""
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.requests import Request
    from starlette.responses import Response

    class RequestContextMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next) -> Response:
            req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
            token = request_id_var.set(req_id)
            try:
                response = await call_next(request)
            finally:
                request_id_var.reset(token)
            response.headers["X-Request-ID"] = req_id
            return response

    app.add_middleware(RequestContextMiddleware)
