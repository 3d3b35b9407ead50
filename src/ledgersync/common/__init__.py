from __future__ import annotations

from .logging import configure_logging
from .retry import BackoffPolicy, retry_with_backoff, with_backoff

__all__ = [
    "BackoffPolicy",
    "configure_logging",
    "retry_with_backoff",
    "with_backoff",
]
