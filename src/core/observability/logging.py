"""
Structured logging configuration with structlog.

Production — JSON, development — цветной console вывод.
Уровень логирования берётся из переменной окружения LOG_LEVEL (default INFO).

Usage:
    from src.core.observability import configure_structlog, get_logger

    configure_structlog(environment="development")
    log = get_logger(__name__)
    log.info("transaction_submitted", tx_id=0)
"""

import logging
import os
from typing import Any, Final

import structlog
from structlog.typing import Processor


LOG_LEVEL_ENV: Final[str] = "LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[str] = "INFO"


def _get_log_level() -> int:
    """Уровень логирования из окружения (logging.INFO если не задан/неизвестен)."""
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_structlog(environment: str = "production") -> None:
    """
    Конфигурация structlog. Вызывается один раз при старте процесса.

    Args:
        environment: 'production' для JSON вывода, иначе console
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processors: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + final_processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, component: str = "wallet") -> Any:
    """
    Lazy logger с заранее привязанными module и component.

    Конфигурация применяется при первом использовании, поэтому logger
    можно создавать на уровне модуля до вызова configure_structlog.

    Args:
        name: Имя модуля (обычно __name__)
        component: Тип компонента (default: "wallet")
    """
    return structlog.get_logger(module=name, component=component)
