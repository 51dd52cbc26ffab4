"""Structured logging configuration with stdlib bridge.

Configures structlog with:
- JSON output for production (one event per line, machine queryable)
- ConsoleRenderer for dev mode (human-readable, colored)
- Stdlib bridge so logs from the calling pipeline are rendered the same way
- Context variables (e.g. a response id bound by the caller) merged into every entry
"""

import logging
import logging.config

import structlog

from council_recovery.core.config import Settings, get_settings


def preview(text: str, max_len: int = 200) -> str:
    """Shorten text for log output, noting the original length."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + f"... [truncated, {len(text)} total chars]"


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog with stdlib bridge.

    Call this once at process start, before the first logger is used
    (structlog caches the processor chain on first use).

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: True for JSON output (production), False for ConsoleRenderer (dev)
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"handlers": ["default"], "level": log_level},
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog from COUNCIL_RECOVERY_LOG_LEVEL and COUNCIL_RECOVERY_JSON_LOGS."""
    settings = settings or get_settings()
    configure_structlog(log_level=settings.log_level, json_logs=settings.json_logs)
