"""Configuration management for the Interview Coach answer gateway."""

import os
import logging
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file from the home directory location.
#
# Location: ~/.interview_coach/.env
#
# Setup:
#   mkdir -p ~/.interview_coach
#   cp .env.example ~/.interview_coach/.env
#   chmod 600 ~/.interview_coach/.env

_env_loaded_from: Optional[str] = None

def _load_env_file() -> Optional[str]:
    """Load .env from the home directory location only."""
    home = Path.home()
    env_path = home / '.interview_coach' / '.env'

    if env_path.exists():
        load_dotenv(env_path)
        return str(env_path)

    return None

_env_loaded_from = _load_env_file()

logger = logging.getLogger(__name__)

DEFAULT_DAILY_ANSWER_LIMIT = 20
DEFAULT_FEEDBACK_MODEL = "gemini-2.5-flash"
DEFAULT_DEV_USER_ID = "dev-user"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing required values."""
    pass


def _get_positive_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        value = int(raw_value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw_value!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def get_log_level() -> str:
    """Get log level from environment, default to INFO."""
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

    if level not in valid_levels:
        logger.warning("Invalid log level '%s', defaulting to INFO", level)
        return 'INFO'

    return level


def get_database_url() -> str:
    """Get primary PostgreSQL database connection URL."""
    db_user = os.getenv('POSTGRES_USER', 'postgres')
    db_pass = os.getenv('POSTGRES_PASSWORD', 'postgres')
    db_host = os.getenv('POSTGRES_HOST', 'postgres')
    db_port = os.getenv('POSTGRES_PORT', '5432')
    db_name = os.getenv('POSTGRES_DB', 'interview_coach')

    return f"postgresql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


def get_app_database_url() -> str:
    """Get the application database URL.

    Holds the question catalog, submitted answers and per-user usage quotas.

    Reads from DATABASE_URL environment variable, falling back to constructed
    URL from individual POSTGRES_* variables.
    """
    return os.getenv('DATABASE_URL', get_database_url())


def get_daily_answer_limit() -> int:
    """Number of AI feedback calls a user may consume per UTC calendar day."""
    return _get_positive_int('DAILY_ANSWER_LIMIT', DEFAULT_DAILY_ANSWER_LIMIT)


def get_gemini_api_key() -> Optional[str]:
    """Get Gemini API key from environment."""
    return os.getenv('GEMINI_API_KEY', None)


def get_feedback_model() -> str:
    """Model used to grade interview answers."""
    return os.getenv('FEEDBACK_MODEL', DEFAULT_FEEDBACK_MODEL)


def get_feedback_timeout_seconds() -> int:
    return _get_positive_int('FEEDBACK_TIMEOUT_SECONDS', 30)


def get_feedback_temperature() -> float:
    raw_value = os.getenv('FEEDBACK_TEMPERATURE', '0.4')
    try:
        return float(raw_value)
    except ValueError as exc:
        raise ConfigurationError(f"FEEDBACK_TEMPERATURE must be a number, got {raw_value!r}") from exc


def is_dev_mode() -> bool:
    """Check if application is running in development mode.

    When DEV_MODE=true, requests without an authenticated identity are
    attributed to DEV_USER_ID so the gateway can be exercised locally
    without the upstream auth service.
    """
    value = os.getenv('DEV_MODE', 'false')
    return value.strip().lower() in ('true', '1', 'yes')


def get_dev_user_id() -> str:
    return os.getenv('DEV_USER_ID', DEFAULT_DEV_USER_ID)


def get_cors_origins() -> List[str]:
    """Allowed browser origins for the practice client."""
    raw_value = os.getenv('CORS_ORIGINS', 'http://localhost:5173')
    return [origin.strip() for origin in raw_value.split(',') if origin.strip()]
