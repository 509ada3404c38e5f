"""
Observability helpers: logging configuration and structured log context.
"""

from docindex.observability.logger import configure_logging
from docindex.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)

__all__ = [
    "configure_logging",
    "log_with_context",
    "log_exception_with_context",
    "safe_log_value",
]
