"""structlog configuration shared by the CLI and host applications.

Per-field filtering diagnostics are emitted on the
``fpd_validator.diagnostics`` logger.  They can be much noisier than the
engine's own events, so that logger gets its own level.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

DIAGNOSTICS_LOGGER = "fpd_validator.diagnostics"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure_logging(
    level: str = "INFO",
    fmt: str = "console",
    diagnostics_level: Optional[str] = None,
) -> None:
    """Set up structlog with console or JSON rendering on stderr.

    *diagnostics_level* overrides *level* for the diagnostics logger only,
    e.g. ``"ERROR"`` to silence dropped-field lines in a busy host.
    """
    logging.basicConfig(format="%(message)s", level=_level(level), stream=sys.stderr)
    logging.getLogger(DIAGNOSTICS_LOGGER).setLevel(
        _level(diagnostics_level) if diagnostics_level else logging.NOTSET
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
