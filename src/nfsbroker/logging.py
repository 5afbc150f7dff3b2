"""Structured logging for the broker state store.

Events are kebab-case names with structured fields, rendered by structlog
as JSON for deployment or as colored console lines during development.
Parameter values and parameter hashes are never passed to a logger.

Usage:
    from nfsbroker.logging import configure_logging, get_logger

    configure_logging(json_format=True)

    logger = get_logger(__name__)
    logger.info("state-saved", state_file="/var/vcap/store/nfsbroker/state.json")

Sessions:
    Each durable store action logs under its own session:

        log = store_logger("restore-state")
        log.info("start")  # session="restore-state"

Request context:
    with log_context(binding_id="b-1"):
        store.is_binding_conflict("b-1", details)  # every event carries binding_id
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor

PERSISTENCE_LOGGER = "nfsbroker.persistence"

_configured = False


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(
    json_format: bool = False,
    level: int = logging.INFO,
    logger_factory: Any = None,
) -> None:
    """Configure structlog for the store.

    Safe to call again; the last call wins.

    Args:
        json_format: Render one JSON object per event instead of console lines
        level: Minimum level that is emitted
        logger_factory: Replacement output factory, mostly for tests
    """
    global _configured

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        *_renderer(json_format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=logger_factory or structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str) -> Any:
    """Get a structured logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every event logged inside the block.

    Fields are held in context variables, so concurrent requests on other
    threads do not see them. Previous values are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def store_logger(session: str, logger: Any = None) -> Any:
    """Get a logger bound to a store session.

    Args:
        session: Session name, e.g. "serialize-state"
        logger: Caller's logger to nest the session under; defaults to
            the persistence logger

    Returns:
        Logger with ``session`` bound
    """
    parent = logger if logger is not None else get_logger(PERSISTENCE_LOGGER)
    return parent.bind(session=session)
