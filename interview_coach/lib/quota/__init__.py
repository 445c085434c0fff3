"""Per-user daily quota ledger."""

from .ledger import (
    QuotaState,
    effective_count,
    next_reset,
    quota_today,
    remaining,
    try_consume,
)

__all__ = [
    "QuotaState",
    "effective_count",
    "next_reset",
    "quota_today",
    "remaining",
    "try_consume",
]
