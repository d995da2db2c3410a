# jqline:header:start
#
#   project      : jqline
#   file         : logging.py
#   file_relpath : src/jqline/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Internal logging for jqline.

jqline logs through the standard ``logging`` module with three additions: a
``TRACE`` level below ``DEBUG`` for per-record events, the
[`JqlineLogger`][jqline.config.logging.JqlineLogger] class exposing
``trace()``, and a ``yachalk`` formatter that colors records by severity.

Standard output carries query results, so log records always go to standard
error and the root level stays at ``CRITICAL`` unless ``JQLINE_LOG_LEVEL``
(or an explicit level) asks for more.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from jqline.constants import ENV_LOG_LEVEL

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

LEVEL_NAMES: Final[dict[str, int]] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
    "CRITICAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}

# Below INFO, records also name the logger and line that emitted them.
LOG_FORMAT: Final[str] = "jqline: [%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT: Final[str] = (
    "jqline: [%(levelname)s] [%(name)s:%(lineno)d %(funcName)s] %(message)s"
)


class JqlineLogger(logging.Logger):
    """``logging.Logger`` with a ``trace()`` method."""

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log ``msg % args`` at ``TRACE`` severity.

        Args:
            msg (object): Message, possibly with ``%`` placeholders.
            *args (object): Values for the placeholders.
            extra (Mapping[str, object] | None): Extra attributes for the record.
        """
        if not self.isEnabledFor(TRACE_LEVEL):
            return
        self._log(TRACE_LEVEL, msg, args, extra=extra, stacklevel=2)


logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.setLoggerClass(JqlineLogger)


class ChalkFormatter(logging.Formatter):
    """Formatter painting each record with a color picked by its level.

    Args:
        fmt (str): ``%``-style record format.
        colored (bool): Apply colors; plain text otherwise.
    """

    STYLES: Final[tuple[tuple[int, Callable[[str], str]], ...]] = (
        (logging.CRITICAL, chalk.red_bright),
        (logging.ERROR, chalk.red),
        (logging.WARNING, chalk.yellow),
        (logging.INFO, chalk.green),
        (logging.DEBUG, chalk.gray),
        (TRACE_LEVEL, chalk.blue),
    )

    def __init__(self, fmt: str, *, colored: bool = True) -> None:
        super().__init__(fmt)
        self.colored: bool = colored

    def format(self, record: logging.LogRecord) -> str:
        message: str = super().format(record)
        if not self.colored:
            return message
        for threshold, style in self.STYLES:
            if record.levelno >= threshold:
                return style(message)
        return chalk.dim(message)


def resolve_env_log_level() -> int | None:
    """Return the level named by ``JQLINE_LOG_LEVEL``, or None.

    Accepts level names in any case (``trace``, ``DEBUG``, ``warn``) and plain
    numbers. Unknown names count as unset.
    """
    raw: str = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    if not raw:
        return None
    if raw.isdigit():
        return int(raw)
    return LEVEL_NAMES.get(raw)


def setup_logging(level: int | None = None) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level (int | None): Root level. When None, ``JQLINE_LOG_LEVEL`` decides,
            falling back to ``CRITICAL``.
    """
    if level is None:
        level = resolve_env_log_level() or logging.CRITICAL

    root: logging.Logger = logging.getLogger()
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ChalkFormatter(
            LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT,
            colored=sys.stderr.isatty(),
        )
    )
    root.addHandler(handler)


def get_logger(name: str) -> JqlineLogger:
    """Return the [`JqlineLogger`][jqline.config.logging.JqlineLogger] called ``name``."""
    return cast("JqlineLogger", logging.getLogger(name))
