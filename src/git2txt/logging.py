from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(filename: str | Path | None = None, *, debug: bool = False) -> structlog.BoundLogger:
    """Set up structured logging for the git2txt package.

    The first call wins for handlers; later calls may still raise the level to DEBUG
    or redirect output to a file, which the CLI does once flags are parsed.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        debug: Emit DEBUG events (per-file decisions) instead of INFO only.

    Returns:
        A structlog logger instance configured for the git2txt package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    level = logging.DEBUG if debug else logging.INFO
    if not _LOGGING_CONFIGURED or filename or debug:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=_LOGGING_CONFIGURED,
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("git2txt")


logger = setup_logging()
