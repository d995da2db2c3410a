# jqline:header:start
#
#   project      : jqline
#   file         : console_api.py
#   file_relpath : src/jqline/pipeline/console_api.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Framework-agnostic console interface for program output.

The run loop writes result bytes and diagnostics through this protocol, so
it does not depend on Click. Logging is separate and never goes through a
console.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleLike(Protocol):
    """Minimal interface of the console used by the run loop."""

    def write_value(self, data: bytes) -> None:
        """Write encoded output to stdout and flush."""
        ...

    def write_err(self, text: str) -> None:
        """Write text to stderr exactly as given (``debug``, ``stderr``, halt values)."""
        ...

    def error(self, text: str, *, nl: bool = True) -> None:
        """Write a diagnostic message to stderr."""
        ...
