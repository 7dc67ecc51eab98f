"""Logging for the mlm CLI and ``mlm serve``.

Application modules log through ``logging.getLogger(__name__)``; the
stores report statement kinds and row counts at DEBUG and backing-store
failures at WARNING.  Everything is routed through one structlog
formatter on stderr so stdout stays reserved for command results
(``--json`` output is piped into other tools).

``--log-json`` switches the renderer to JSON lines for log shippers;
``-v`` opens the ``mlm`` hierarchy up to DEBUG.  Alembic and uvicorn
stay at WARNING either way.
"""

from __future__ import annotations

import logging
import sys

import structlog

QUIET_LOGGERS = ("alembic", "uvicorn", "uvicorn.access", "uvicorn.error")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler; safe to call once per CLI invocation.

    Args:
        verbose: DEBUG for ``mlm.*`` (WARNING otherwise).
        log_json: JSON lines instead of the console renderer.
    """
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    # Replace rather than append: the CLI group callback runs on every invocation.
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("mlm").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
