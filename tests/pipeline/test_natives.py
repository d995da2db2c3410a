# jqline:header:start
#
#   project      : jqline
#   file         : test_natives.py
#   file_relpath : tests/pipeline/test_natives.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Unit tests for the host-provided native filters."""

from __future__ import annotations

import shutil

import pytest

from jqline.evaluator import CompileOptions, QueryRuntimeError, compile_query, parse_query
from jqline.pipeline.natives import build_natives, exec_filter, execpipe_filter, run_command
from tests.conftest import mark_pipeline

needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


def _run(query: str, value: object, written: list[str], *, unsafe: bool = True) -> list[object]:
    natives = build_natives(written.append, unsafe_filters=unsafe)
    program = compile_query(parse_query(query), CompileOptions(functions=natives))
    return list(program.run(value))


@mark_pipeline
def test_table_covers_all_arities() -> None:
    natives = build_natives(lambda text: None)

    assert set(natives) == {
        ("debug", 0),
        ("debug", 1),
        ("stderr", 0),
        ("exec", 1),
        ("exec", 2),
        ("execpipe", 1),
        ("execpipe", 2),
    }


@mark_pipeline
def test_unsafe_filters_can_be_left_out() -> None:
    natives = build_natives(lambda text: None, unsafe_filters=False)

    assert set(natives) == {("debug", 0), ("debug", 1), ("stderr", 0)}


@mark_pipeline
def test_debug_passes_the_input_through() -> None:
    written: list[str] = []

    assert _run("debug, debug(.a)", {"a": 1}, written) == [{"a": 1}, {"a": 1}]
    assert written == ['["DEBUG:",{"a":1}]\n', '["DEBUG:",1]\n']


@mark_pipeline
def test_stderr_writes_compact_json_without_newline() -> None:
    written: list[str] = []

    assert _run("stderr", [1, "x"], written) == [[1, "x"]]
    assert written == ['[1,"x"]']


@mark_pipeline
@needs_sh
def test_exec_returns_standard_output() -> None:
    assert exec_filter(None, ["sh", ["-c", "printf hi"]]) == "hi"


@mark_pipeline
@needs_sh
def test_execpipe_feeds_the_input() -> None:
    assert execpipe_filter("abc", ["sh", ["-c", "cat"]]) == "abc"
    assert execpipe_filter(None, ["sh", ["-c", "cat"]]) == ""


@mark_pipeline
def test_execpipe_rejects_non_string_input() -> None:
    with pytest.raises(QueryRuntimeError) as info:
        execpipe_filter({"a": 1}, ["cat"])

    assert info.value.message == 'execpipe: input must be a string or null, not {"a":1}'


@mark_pipeline
def test_exec_validates_arguments() -> None:
    with pytest.raises(QueryRuntimeError, match="program name must be a string"):
        exec_filter(None, [1])
    with pytest.raises(QueryRuntimeError, match="arguments must be an array of strings"):
        exec_filter(None, ["echo", ["a", 2]])


@mark_pipeline
def test_missing_program() -> None:
    with pytest.raises(QueryRuntimeError) as info:
        run_command("jqline-no-such-program", [], "")

    assert info.value.message.startswith("exec: jqline-no-such-program: ")


@mark_pipeline
@needs_sh
def test_non_zero_exit_status_is_an_error() -> None:
    with pytest.raises(QueryRuntimeError) as info:
        run_command("sh", ["-c", "echo broken >&2; exit 3"], "")

    assert info.value.message == "exec: sh exited with status 3: broken"


@mark_pipeline
@needs_sh
def test_exec_errors_are_result_items() -> None:
    results = _run('exec("sh"; ["-c", "exit 1"]), "after"', None, [])

    assert isinstance(results[0], QueryRuntimeError)
    assert results[1] == "after"
