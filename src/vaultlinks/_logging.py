"""Logging setup for vaultlinks.

Library modules only create loggers:

    import logging
    log = logging.getLogger(__name__)

and never attach handlers. The CLI calls :func:`configure_logging` once.
The engine logs per-pass details at DEBUG, so the default INFO level keeps
stderr clean; set ``VAULTLINKS_LOG_LEVEL=DEBUG`` to see them. Records from
the orchestrator carry ``session=<id>`` when a session id is given.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "vaultlinks"

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# Name of the stderr handler installed by configure_logging
HANDLER_NAME = "vaultlinks-stderr"


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.environ.get("VAULTLINKS_LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str | int | None = None) -> None:
    """Attach a stderr handler to the ``vaultlinks`` logger.

    Args:
        level: Explicit level; defaults to ``VAULTLINKS_LOG_LEVEL`` or INFO.

    Only the first call installs the handler; later calls just adjust the level.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = _resolve_level(level)

    if not any(h.get_name() == HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        # Records stop here; the root logger never sees them
        package_logger.propagate = False

    package_logger.setLevel(resolved)
    for handler in package_logger.handlers:
        handler.setLevel(resolved)


def set_quiet_mode(quiet: bool) -> None:
    """Raise the threshold to ERROR when quiet, else restore the configured level."""
    configure_logging(logging.ERROR if quiet else None)
