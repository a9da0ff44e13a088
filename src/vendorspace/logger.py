"""
Logging setup for vendor-space.

Events are emitted through structlog and rendered by the standard logging
handlers, so third-party and stdlib warnings share one output. The CLI starts
silent and picks stderr or a log file once its options are known.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger, ProcessorFormatter
from structlog.typing import Processor

_SHARED_PROCESSORS: tuple[Processor, ...] = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
)


def _bridge_structlog(min_level: int) -> None:
    # Loggers are created at import time and reconfigured later, so no caching.
    structlog.configure(
        processors=_SHARED_PROCESSORS + (ProcessorFormatter.wrap_for_formatter,),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _plain_formatter() -> ProcessorFormatter:
    return ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=_SHARED_PROCESSORS,
    )


def _install(handler: logging.Handler, level: int) -> None:
    """Make ``handler`` the only handler on the root logger."""
    _bridge_structlog(level)
    logging.captureWarnings(True)
    if not isinstance(handler, logging.NullHandler):
        handler.setFormatter(_plain_formatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def parse_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a logging constant."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def configure_logging(
    level: int = logging.INFO,
    enable_console: bool = True,
    console_level: Optional[int] = None,
) -> None:
    """
    Route log events to stderr, or drop them.

    Parameters
    ----------
    level:
        Root logger level; also the structlog filtering level.
    enable_console:
        When False a ``NullHandler`` replaces the stderr handler.
    console_level:
        Threshold for the stderr handler. Defaults to ``level``.
    """
    if not enable_console:
        _install(logging.NullHandler(), level)
        return
    handler = logging.StreamHandler()
    handler.setLevel(console_level if console_level is not None else level)
    _install(handler, level)


def get_logger(name: Optional[str] = None) -> BoundLogger:
    return structlog.get_logger(name)


def redirect_logging_to_file(path: Path, level: int = logging.INFO) -> None:
    """Send all log events to ``path``, truncating it first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _install(logging.FileHandler(path, mode="w", encoding="utf-8"), level)
