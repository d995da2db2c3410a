# jqline:header:start
#
#   project      : jqline
#   file         : natives.py
#   file_relpath : src/jqline/pipeline/natives.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Native filters provided by the command-line host.

- ``debug`` / ``debug(msg)``: write ``["DEBUG:",<value>]`` to the error stream.
- ``stderr``: write the input as compact JSON to the error stream.
- ``exec(name)`` / ``exec(name; args)``: run a program with empty standard
  input and return its standard output.
- ``execpipe(name)`` / ``execpipe(name; args)``: like ``exec``, with the input
  string piped to the program's standard input.

``exec`` and ``execpipe`` are left out of the table when unsafe filters are
disabled, which makes queries that use them fail to compile.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING, Callable

from jqline.config.logging import get_logger
from jqline.evaluator import NativeFunction, QueryRuntimeError, native_table
from jqline.rendering.json_encoder import to_compact_json

if TYPE_CHECKING:
    from jqline.config.logging import JqlineLogger
    from jqline.core.values import Value

logger: JqlineLogger = get_logger(__name__)

ErrorWriter = Callable[[str], None]
"""Writes text, as-is, to the error stream."""


def build_natives(
    write_err: ErrorWriter,
    *,
    unsafe_filters: bool = True,
) -> dict[tuple[str, int], NativeFunction]:
    """Return the native function table.

    Args:
        write_err (ErrorWriter): Error-stream writer used by ``debug`` and ``stderr``.
        unsafe_filters (bool): Include ``exec`` and ``execpipe``.

    Returns:
        dict[tuple[str, int], NativeFunction]: Natives keyed by ``(name, arity)``.
    """

    def debug(value: Value, args: list[Value]) -> Value:
        message = args[0] if args else value
        write_err(to_compact_json(["DEBUG:", message]) + "\n")
        return value

    def stderr(value: Value, args: list[Value]) -> Value:
        write_err(to_compact_json(value))
        return value

    natives: list[NativeFunction] = [
        NativeFunction("debug", (0, 1), debug),
        NativeFunction("stderr", (0,), stderr),
    ]
    if unsafe_filters:
        natives.append(NativeFunction("exec", (1, 2), exec_filter))
        natives.append(NativeFunction("execpipe", (1, 2), execpipe_filter))
    else:
        logger.debug("Unsafe filters disabled")
    return native_table(*natives)


def exec_filter(value: Value, args: list[Value]) -> Value:
    """``exec(name; args)``: run ``name`` with empty standard input."""
    name, argv = _command("exec", args)
    return run_command(name, argv, "")


def execpipe_filter(value: Value, args: list[Value]) -> Value:
    """``execpipe(name; args)``: run ``name`` with the input on standard input."""
    name, argv = _command("execpipe", args)
    if value is not None and not isinstance(value, str):
        raise QueryRuntimeError(
            f"execpipe: input must be a string or null, not {to_compact_json(value)}"
        )
    return run_command(name, argv, value or "")


def _command(filter_name: str, args: list[Value]) -> tuple[str, list[str]]:
    name = args[0]
    if not isinstance(name, str):
        raise QueryRuntimeError(f"{filter_name}: program name must be a string")
    argv: Value = args[1] if len(args) > 1 else []
    if not isinstance(argv, list) or not all(isinstance(a, str) for a in argv):
        raise QueryRuntimeError(f"{filter_name}: arguments must be an array of strings")
    return name, list(argv)


def run_command(name: str, argv: list[str], stdin_text: str) -> str:
    """Run a program and return its standard output.

    Raises:
        QueryRuntimeError: If the program cannot be started or exits with a
            non-zero status.
    """
    logger.debug("exec: %s %s", name, argv)
    try:
        completed = subprocess.run(
            [name, *argv],
            input=stdin_text.encode("utf-8", errors="surrogateescape"),
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise QueryRuntimeError(f"exec: {name}: {exc.strerror or exc}") from exc
    if completed.returncode != 0:
        detail = completed.stderr.decode("utf-8", errors="replace").strip()
        raise QueryRuntimeError(
            f"exec: {name} exited with status {completed.returncode}: {detail}"
        )
    return completed.stdout.decode("utf-8", errors="surrogateescape")
