# jqline:header:start
#
#   project      : jqline
#   file         : errors.py
#   file_relpath : src/jqline/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Bridge between jqline errors and Click's exception handling.

Usage:
    Wrap a [`JqlineError`][jqline.core.errors.JqlineError] in
    [`JqlineCliError`][jqline.cli.errors.JqlineCliError] and raise it from the
    command; Click shows it and exits with the wrapped error's exit code.

Styling:
    The message is printed through the project console in the Click context
    when there is one, otherwise with ``click.echo``. Errors with an empty
    message (already reported, or plain exit-status verdicts) print nothing.
"""

from __future__ import annotations

from typing import IO, Any

import click

from jqline.constants import PROG_NAME
from jqline.core.errors import JqlineError


class JqlineCliError(click.ClickException):
    """A [`JqlineError`][jqline.core.errors.JqlineError] raised at the CLI boundary.

    Args:
        error (JqlineError): The error to report.

    Attributes:
        error (JqlineError): The wrapped error.
        exit_code (int): Exit code taken from the wrapped error.
    """

    def __init__(self, error: JqlineError) -> None:
        super().__init__(error.message)
        self.error: JqlineError = error
        self.exit_code = int(error.exit_code)

    def format_message(self) -> str:
        """Return ``jqline: <message>``, without color."""
        return f"{PROG_NAME}: {self.message}"

    def show(self, file: IO[Any] | None = None) -> None:
        """Display the error using the project console if available."""
        if not self.message:
            return
        ctx = click.get_current_context(silent=True)
        console = ctx.obj.get("console") if ctx is not None and isinstance(ctx.obj, dict) else None
        if console is not None:
            console.error(self.format_message())
            return
        click.echo(self.format_message(), file=file, err=True)
