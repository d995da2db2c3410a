# jqline:header:start
#
#   project      : jqline
#   file         : console.py
#   file_relpath : src/jqline/cli/console.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Console abstraction for user-facing program output.

This module provides a `ClickConsole` class that separates program output
(result values on stdout, diagnostics on stderr) from internal logging.
"""

from __future__ import annotations

import sys
from typing import BinaryIO, TextIO

import click

from jqline.core.errors import printable_text
from jqline.pipeline.console_api import ConsoleLike


class ClickConsole(ConsoleLike):
    """Program-output console, independent from the logger.

    Args:
        enable_color (bool): If True, diagnostics are colored.
        out (BinaryIO | None): Binary stream for result values.
            Defaults to the binary buffer of ``sys.stdout``.
        err (TextIO | None): Text stream for diagnostics. Defaults to ``sys.stderr``.

    Attributes:
        enable_color (bool): Whether to emit ANSI color codes in diagnostics.
        out (BinaryIO): Stream for result values.
        err (TextIO): Stream for diagnostics.
    """

    enable_color: bool
    out: BinaryIO
    err: TextIO

    def __init__(
        self,
        *,
        enable_color: bool = False,
        out: BinaryIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.enable_color = enable_color
        self.out = out or sys.stdout.buffer
        self.err = err or sys.stderr

    def write_value(self, data: bytes) -> None:
        """Write encoded output to stdout and flush.

        Args:
            data (bytes): Encoded value including its terminator.
        """
        self.out.write(data)
        self.out.flush()

    def write_err(self, text: str) -> None:
        """Write text to stderr without adding a newline.

        Args:
            text (str): Text to write.
        """
        click.echo(printable_text(text), nl=False, file=self.err, color=False)

    def error(self, text: str, *, nl: bool = True) -> None:
        """Write an error message to stderr.

        Args:
            text (str): Error text.
            nl (bool): If True, append a newline.
        """
        click.secho(
            printable_text(text), nl=nl, file=self.err, color=self.enable_color, fg="bright_red"
        )
