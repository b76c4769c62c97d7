"""Logging for the ``statement_parser`` package.

Library modules call ``get_logger("statement_parser.<module>")`` and never
attach handlers; only the CLI calls :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import os

_PKG_LOGGER_NAME = "statement_parser"
LOG_LEVEL_ENV_VAR = "STATEMENT_PARSER_LOG_LEVEL"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def resolve_level(level: str | None = None) -> int:
    """Level name from ``level``, then ``STATEMENT_PARSER_LOG_LEVEL``, else WARNING.

    Unknown names fall back to WARNING so a typo never silences errors.
    """

    name = (level or os.getenv(LOG_LEVEL_ENV_VAR) or "").strip().upper()
    numeric = logging.getLevelNamesMapping().get(name)
    return numeric if numeric is not None else logging.WARNING


def configure_logging(level: str | None = None) -> None:
    """Send package records to stderr; only the first call has any effect.

    stdout is left alone because it carries the CSV or JSON output.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    # Records would otherwise be emitted twice if the host configured root.
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV_VAR", "configure_logging", "get_logger", "resolve_level"]
