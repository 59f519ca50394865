"""structlog setup shared by the CLI and the lifecycle package.

Lifecycle modules log key/value events (``stack_provisioned``,
``explorer_synced``, ...) through get_logger(); the CLI decides once where
they go and how they are rendered.
"""

import logging
import sys
from pathlib import Path

import structlog

# HTTP client libraries log every request at INFO, which floods the
# readiness loop output
_QUIET_LOGGERS = ("httpx", "httpcore")


def _build_handler(log_file: str | Path | None) -> logging.Handler:
    if log_file:
        return logging.FileHandler(str(log_file))
    return logging.StreamHandler(sys.stderr)


def configure_logging(
    level: str = "info",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Route lifecycle events to stderr or a file.

    Args:
        level: Log level name; unknown names fall back to info
        log_file: Write to this file instead of stderr
        json_output: Render JSON lines instead of the console format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = _build_handler(log_file)
    handler.setLevel(log_level)
    logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s", force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
