"""Logging for ``expense_ingest``.

Library modules log through ``get_logger("expense_ingest.<module>")`` and never
attach handlers; the package logger carries a ``NullHandler`` until the CLI
calls ``configure_logging()``. Work done on behalf of one import goes through
``job_logger(job_id)`` so every line names its job.

Environment:

- ``EXPENSE_INGEST_LOG_LEVEL``: level name or number for the package logger.
- ``EXPENSE_INGEST_SQL_LOG``: when truthy, SQLAlchemy statements are logged to
  the same handler at INFO.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from typing import IO, Any

PACKAGE_LOGGER = "expense_ingest"
LEVEL_ENV = "EXPENSE_INGEST_LOG_LEVEL"
SQL_LOG_ENV = "EXPENSE_INGEST_SQL_LOG"

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# pdfminer reports every unknown glyph and font quirk; statements are full of them.
_CHATTY_LIBRARIES = ("pdfminer", "pdfplumber")

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """``level`` if given, else ``$EXPENSE_INGEST_LOG_LEVEL``, else INFO."""

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    return logging.getLevelNamesMapping().get(text, logging.INFO)


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] = sys.stderr,
    fmt: str = DEFAULT_FORMAT,
    sql: bool | None = None,
) -> logging.Handler:
    """Attach one stream handler to the package logger; later calls reuse it.

    PDF library loggers are held at WARNING unless ``level`` is DEBUG. With
    ``sql`` (default: ``$EXPENSE_INGEST_SQL_LOG``) the ``sqlalchemy.engine``
    logger shares the handler.
    """

    global _handler
    if _handler is not None:
        return _handler

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))

    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.handlers = [h for h in pkg.handlers if not isinstance(h, logging.NullHandler)]
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    pkg.propagate = False

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(resolved if resolved <= logging.DEBUG else logging.WARNING)

    if sql is None:
        sql = _env_flag(SQL_LOG_ENV)
    if sql:
        engine_log = logging.getLogger("sqlalchemy.engine")
        engine_log.addHandler(handler)
        engine_log.setLevel(logging.INFO)

    _handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


class JobLogger(logging.LoggerAdapter):
    """Prefixes messages with ``[job <id>]``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra: Mapping[str, object] = self.extra or {}
        return f"[job {extra['job_id']}] {msg}", kwargs


def job_logger(job_id: str, name: str = "expense_ingest.importer") -> JobLogger:
    return JobLogger(get_logger(name), {"job_id": job_id})


__all__ = [
    "PACKAGE_LOGGER",
    "LEVEL_ENV",
    "SQL_LOG_ENV",
    "configure_logging",
    "get_logger",
    "job_logger",
    "JobLogger",
    "resolve_level",
]
