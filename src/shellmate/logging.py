"""Diagnostics logging for shellmate.

Log events go to stderr as console lines or JSON objects. Anything the
user is meant to read (replies, prompts, command output) goes through the
rich console instead, so logging stays quiet at the default level.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.typing import FilteringBoundLogger, Processor

if TYPE_CHECKING:
    from shellmate.config import Settings

# Held at WARNING whatever the configured level.
_QUIET_LIBRARIES = ("httpx", "httpcore")


def _renderer(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(settings: "Settings") -> None:
    """Route structlog and stdlib logging to stderr at the configured level."""
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs: object) -> None:
    """Attach fields (e.g. ``mode="chat"``) to every later event in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def _component(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(f"shellmate.{name}")


class Loggers:
    """Per-component loggers, created at import time by each module."""

    @staticmethod
    def cli() -> FilteringBoundLogger:
        return _component("cli")

    @staticmethod
    def repl() -> FilteringBoundLogger:
        return _component("repl")

    @staticmethod
    def providers() -> FilteringBoundLogger:
        return _component("providers")

    @staticmethod
    def shellenv() -> FilteringBoundLogger:
        return _component("shellenv")

    @staticmethod
    def safety() -> FilteringBoundLogger:
        return _component("safety")

    @staticmethod
    def execution() -> FilteringBoundLogger:
        return _component("execution")
