"""
Observability — структурированное логирование кошелька (structlog).
"""

from .logging import configure_structlog, get_logger

__all__ = [
    "configure_structlog",
    "get_logger",
]
