# jqline:header:start
#
#   project      : jqline
#   file         : errors.py
#   file_relpath : src/jqline/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Error taxonomy for jqline.

Every error that crosses a layer boundary derives from
[`JqlineError`][jqline.core.errors.JqlineError] and carries the
[`ExitCode`][jqline.core.exit_codes.ExitCode] the CLI reports for it.

Hierarchy:

    JqlineError
    ├── ConfigError            (flag, indentation and color settings)
    │   └── VariableNameError  (binding name is not an identifier)
    ├── QueryParseError        (query text could not be parsed)
    ├── QueryCompileError      (query could not be compiled)
    ├── InputError             (per-record input failures; yielded, not raised)
    │   ├── JsonParseError
    │   ├── YamlParseError
    │   ├── InputOpenError
    │   └── InputReadError
    ├── MarshalError           (a result value could not be rendered)
    ├── EmptyError             (already reported; never printed again)
    └── ExitStatusError        (carries the exit-status verdict; not a failure)

Input errors are *values* on the input stream: iterators yield them and the
run loop reports them, so one bad record never aborts a run. Everything else
is raised and handled at the CLI boundary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from jqline.core.exit_codes import ExitCode

# Longest source line shown in an error snippet before it is windowed.
_SNIPPET_WIDTH: int = 64

# Lone surrogates: undecodable input bytes (surrogateescape) or unpaired \u escapes.
_SURROGATE_RE: re.Pattern[str] = re.compile("[\ud800-\udfff]")


class JqlineError(Exception):
    """Base class for all jqline errors.

    Attributes:
        exit_code (ExitCode): Process exit code reported when this error ends a run.
        message (str): Human-readable message, without the program-name prefix.
    """

    exit_code: ExitCode = ExitCode.DEFAULT_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __str__(self) -> str:
        return self.message


class ConfigError(JqlineError):
    """Invalid command-line flags or settings detected before processing starts."""

    exit_code = ExitCode.FLAG_ERROR


class VariableNameError(ConfigError):
    """A binding name (``--arg NAME ...``) is not a valid identifier."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid variable name: ${name}")
        self.name: str = name


class QueryParseError(JqlineError):
    """The query text could not be parsed.

    Args:
        fname (str): Where the query came from (``<arg>`` or the ``-f`` file name).
        text (str): The full query text.
        cause (Exception): The underlying syntax error.
        offset (int | None): Character offset of the failure within ``text``.
    """

    exit_code = ExitCode.COMPILE_ERROR

    def __init__(self, fname: str, text: str, cause: Exception, offset: int | None = None) -> None:
        self.fname: str = fname
        self.text: str = text
        self.cause: Exception = cause
        self.offset: int | None = offset
        if offset is None:
            message = f"invalid query: {fname}: {cause}"
        else:
            line, column = line_and_column(text, offset)
            message = f"invalid query: {fname}:{line}\n" + render_snippet(
                text, line, column, str(cause)
            )
        super().__init__(message)


class QueryCompileError(JqlineError):
    """The parsed query could not be compiled (undefined functions, variables, modules)."""

    exit_code = ExitCode.COMPILE_ERROR

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"compile error: {cause}")
        self.cause: Exception = cause


class InputError(JqlineError):
    """A failure attached to one input source.

    Attributes:
        name (str): File name, ``<stdin>``, or the ``$name`` of a binding.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name: str = name


class JsonParseError(InputError):
    """Malformed JSON text.

    Args:
        name (str): Source of the text.
        text (str): The buffered, not yet consumed text at the time of failure.
        cause (Exception): The decoder error.
        line (int | None): 1-based line of the failure within the source.
        column (int | None): 1-based column of the failure.
        offset_line (int): Line number of the first line of ``text`` within the source.
    """

    kind: str = "json"

    def __init__(
        self,
        name: str,
        text: str,
        cause: Exception,
        *,
        line: int | None = None,
        column: int | None = None,
        offset_line: int = 1,
    ) -> None:
        self.text: str = text
        self.cause: Exception = cause
        reason: str
        if isinstance(cause, RecursionError):
            reason = "exceeds depth limit for parsing"
        else:
            reason = getattr(cause, "msg", None) or getattr(cause, "problem", None) or str(cause)
        if line is None or column is None:
            message = f"invalid {self.kind}: {name}: {reason}"
        else:
            absolute: int = offset_line + line - 1
            message = f"invalid {self.kind}: {name}:{absolute}\n" + render_snippet(
                text, line, column, reason, label=absolute
            )
        super().__init__(name, message)


class YamlParseError(JsonParseError):
    """Malformed YAML text (same shape as [`JsonParseError`][jqline.core.errors.JsonParseError])."""

    kind = "yaml"


class InputOpenError(InputError):
    """An input file could not be opened."""

    def __init__(self, name: str, cause: OSError) -> None:
        super().__init__(name, f"open {name}: {cause.strerror or cause}")
        self.cause: OSError = cause


class InputReadError(InputError):
    """Reading from an already opened input failed."""

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(name, f"read {name}: {cause}")
        self.cause: Exception = cause


class MarshalError(JqlineError):
    """A result value could not be encoded for output."""


class EmptyError(JqlineError):
    """Marks an error that has already been reported to the error stream.

    The CLI boundary uses the wrapped exit code but prints nothing.
    """

    def __init__(self, exit_code: ExitCode = ExitCode.DEFAULT_ERROR) -> None:
        super().__init__("")
        self.exit_code = exit_code


class ExitStatusError(JqlineError):
    """Carries the exit-status verdict (``-e``) out of a run; not a real failure."""

    def __init__(self, exit_code: ExitCode) -> None:
        super().__init__("")
        self.exit_code = exit_code


@dataclass(frozen=True)
class Failure:
    """One reported failure of a run.

    Attributes:
        source (str): Input source the failure belongs to.
        message (str): Message as printed (without program-name prefix).
    """

    source: str
    message: str


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a character offset in ``text``."""
    offset = max(0, min(offset, len(text)))
    line: int = text.count("\n", 0, offset) + 1
    column: int = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def render_snippet(
    text: str,
    line: int,
    column: int,
    message: str,
    *,
    label: int | None = None,
) -> str:
    """Render a one-line source excerpt with a caret under ``column``.

    Args:
        text (str): Source text.
        line (int): 1-based line within ``text``.
        column (int): 1-based column within that line.
        message (str): Text printed after the caret.
        label (int | None): Line number shown in the gutter (defaults to ``line``).

    Returns:
        str: Two lines: the excerpt and the caret line.
    """
    lines: list[str] = text.split("\n")
    src: str = lines[min(max(line, 1), len(lines)) - 1].rstrip("\r").expandtabs(1)
    src = printable_text(src)
    col: int = max(column, 1)
    if len(src) > _SNIPPET_WIDTH:
        start: int = max(0, min(col - _SNIPPET_WIDTH // 2, len(src) - _SNIPPET_WIDTH))
        src = src[start : start + _SNIPPET_WIDTH]
        col -= start
    gutter: str = f"    {label if label is not None else line} | "
    return f"{gutter}{src}\n{' ' * (len(gutter) + col - 1)}^  {message}"


def printable_text(text: str) -> str:
    """Return ``text`` with lone surrogates replaced by U+FFFD.

    Input is decoded with ``surrogateescape``, so excerpts of invalid UTF-8
    contain surrogates that no text stream can encode.
    """
    return _SURROGATE_RE.sub("\ufffd", text)
