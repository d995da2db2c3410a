# jqline:header:start
#
#   project      : jqline
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""CLI test helpers for running jqline through Click's test runner.

`run_cli()` invokes the command with optional standard input; `run_cli_in()`
additionally changes the working directory to ``tmp_path`` so that relative
file arguments resolve against the files a test created. The ``assert_*``
helpers check the documented exit codes and show the combined output on
failure.

Click's runner keeps standard output and standard error apart: use
``result.stdout`` for values and ``result.stderr`` for diagnostics.
"""

from __future__ import annotations

import os
from typing import IO, TYPE_CHECKING, Any, Sequence

from click.testing import CliRunner, Result

from jqline.cli.main import cli
from jqline.core.exit_codes import ExitCode

if TYPE_CHECKING:
    from pathlib import Path


def run_cli(
    argv: Sequence[str],
    *,
    input_text: str | bytes | IO[Any] | None = None,
    env: dict[str, str | None] | None = None,
) -> Result:
    """Invoke the CLI without changing the working directory.

    Args:
        argv (Sequence[str]): CLI argument vector, e.g. ``["-c", ".a"]``.
        input_text (str | bytes | IO[Any] | None): Standard input for the command.
        env (dict[str, str | None] | None): Environment overrides; ``None`` values unset.

    Returns:
        Result: The `click.testing.Result` produced by `CliRunner.invoke`.

    Example:
        ```python
        result = run_cli(["-c", ".a"], input_text='{"a": [1, 2]}')
        assert result.stdout == "[1,2]\\n"
        ```
    """
    runner = CliRunner()
    return runner.invoke(cli, list(argv), input=input_text, env=env)


def run_cli_in(
    tmp_path: Path,
    argv: Sequence[str],
    *,
    input_text: str | bytes | IO[Any] | None = None,
    env: dict[str, str | None] | None = None,
) -> Result:
    """Invoke the CLI with `tmp_path` as the working directory.

    Args:
        tmp_path (Path): Directory used as the CWD for the invocation.
        argv (Sequence[str]): CLI argument vector.
        input_text (str | bytes | IO[Any] | None): Standard input for the command.
        env (dict[str, str | None] | None): Environment overrides; ``None`` values unset.

    Returns:
        Result: The `click.testing.Result` produced by `CliRunner.invoke`.
    """
    cwd: str = os.getcwd()
    try:
        os.chdir(tmp_path)
        return run_cli(argv, input_text=input_text, env=env)
    finally:
        os.chdir(cwd)


def assert_SUCCESS(result: Result) -> None:
    """Assert that the command exited successfully (code 0).

    Args:
        result (Result): The Result object returned by `run_cli` or `run_cli_in`.
    """
    assert result.exit_code == ExitCode.SUCCESS, result.output


def assert_FALSY(result: Result) -> None:
    """Assert the exit-status verdict "last value false or null" (code 1)."""
    assert result.exit_code == ExitCode.FALSY, result.output


def assert_FLAG_ERROR(result: Result) -> None:
    """Assert that flag parsing or validation failed (code 2).

    Args:
        result (Result): The Result object returned by `run_cli` or `run_cli_in`.
    """
    assert result.exit_code == ExitCode.FLAG_ERROR, result.output


def assert_COMPILE_ERROR(result: Result) -> None:
    """Assert that the query failed to parse or compile (code 3)."""
    assert result.exit_code == ExitCode.COMPILE_ERROR, result.output


def assert_NO_VALUE(result: Result) -> None:
    """Assert the exit-status verdict "nothing printed" (code 4)."""
    assert result.exit_code == ExitCode.NO_VALUE, result.output


def assert_DEFAULT_ERROR(result: Result) -> None:
    """Assert that the run reported a failure (code 5).

    Args:
        result (Result): The Result object returned by `run_cli` or `run_cli_in`.
    """
    assert result.exit_code == ExitCode.DEFAULT_ERROR, result.output
