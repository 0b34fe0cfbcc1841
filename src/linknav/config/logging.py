"""structlog configuration for linknav.

Every record, whether emitted through structlog (``cache.hit``,
``traversal.branch_truncated``) or through a plain stdlib logger, goes
through the same processor chain and ends up on stderr:

- console renderer by default (colored when stderr is a terminal)
- JSON lines with ``--log-json``

When a vault is known it is bound into the structlog context, so each
line carries ``vault=<root>``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

PACKAGE_LOGGER = "linknav"

# Loggers that stay at WARNING even with --verbose.
_QUIET_LOGGERS = ("asyncio", "markdown_it")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    chain: list[structlog.types.Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_json:
        chain.append(structlog.processors.format_exc_info)
        chain.append(structlog.processors.JSONRenderer())
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return chain


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    vault_root: Path | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        verbose: Let ``linknav.*`` loggers through at DEBUG; otherwise WARNING.
        log_json: Render JSON lines instead of the console format.
        vault_root: Bound into the log context when given.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=_final_processors(log_json),
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if vault_root is not None:
        structlog.contextvars.bind_contextvars(vault=str(vault_root))
