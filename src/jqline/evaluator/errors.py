# jqline:header:start
#
#   project      : jqline
#   file         : errors.py
#   file_relpath : src/jqline/evaluator/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Errors raised by the query evaluator.

- [`QuerySyntaxError`][jqline.evaluator.errors.QuerySyntaxError]: the query text is malformed.
- [`QueryResolveError`][jqline.evaluator.errors.QueryResolveError]: a function, variable
  or module referenced by the query does not exist (compile time).
- [`QueryRuntimeError`][jqline.evaluator.errors.QueryRuntimeError]: evaluation failed
  for one input. These are yielded on the result stream, not raised past
  [`Program.run`][jqline.evaluator.compiler.Program.run].
- [`HaltRequest`][jqline.evaluator.errors.HaltRequest]: ``halt`` / ``halt_error`` asked
  to stop the whole run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jqline.rendering.json_encoder import to_compact_json

if TYPE_CHECKING:
    from jqline.core.values import Value


class QuerySyntaxError(Exception):
    """The query text could not be tokenized or parsed.

    Attributes:
        offset (int): Character offset of the offending token.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.offset: int = offset


class QueryResolveError(Exception):
    """A name used by the query could not be resolved at compile time."""


class QueryRuntimeError(Exception):
    """An error raised while evaluating the query for one input value.

    Attributes:
        value (Value): The error payload. ``error("msg")`` carries ``"msg"``;
            internal failures carry their message string.
    """

    def __init__(self, value: Value) -> None:
        super().__init__(value)
        self.value: Value = value

    @property
    def message(self) -> str:
        """Return the text shown to users."""
        if isinstance(self.value, str):
            return self.value
        return f"{to_compact_json(self.value)} (not a string)"

    def __str__(self) -> str:
        return self.message


class HaltRequest(Exception):
    """Stop the whole run (``halt`` / ``halt_error``).

    Attributes:
        value (Value): Written to the error stream when ``has_value`` is set.
        exit_code (int): Process exit code.
        has_value (bool): False for a plain ``halt``.
    """

    def __init__(self, value: Value, exit_code: int, *, has_value: bool = True) -> None:
        super().__init__(exit_code)
        self.value: Value = value
        self.exit_code: int = exit_code
        self.has_value: bool = has_value
