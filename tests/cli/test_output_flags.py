# jqline:header:start
#
#   project      : jqline
#   file         : test_output_flags.py
#   file_relpath : tests/cli/test_output_flags.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""CLI tests for output flags: compact, raw, join, NUL, tab, indent, YAML, color."""

from __future__ import annotations

from tests.cli.conftest import assert_FLAG_ERROR, assert_SUCCESS, run_cli
from tests.conftest import mark_cli, parametrize


@mark_cli
def test_compact_output() -> None:
    result = run_cli(["-c", "."], input_text='{"a": [1, {"b": null}]}')

    assert_SUCCESS(result)
    assert result.stdout == '{"a":[1,{"b":null}]}\n'


@mark_cli
def test_raw_output_writes_strings_unquoted() -> None:
    result = run_cli(["-r", ".[]"], input_text='["a\\tb", 1, {"c": "d"}]')

    assert_SUCCESS(result)
    assert result.stdout == 'a\tb\n1\n{\n  "c": "d"\n}\n'


@mark_cli
def test_join_output_has_no_terminator() -> None:
    result = run_cli(["-j", ".[]"], input_text='["a", "b", 1]')

    assert_SUCCESS(result)
    assert result.stdout == "ab1"


@mark_cli
def test_raw_output0_terminates_with_nul() -> None:
    result = run_cli(["--raw-output0", ".[]"], input_text='["a", "b"]')

    assert_SUCCESS(result)
    assert result.stdout == "a\0b\0"


@mark_cli
def test_tab_indentation() -> None:
    result = run_cli(["--tab", "."], input_text='{"a": [1]}')

    assert_SUCCESS(result)
    assert result.stdout == '{\n\t"a": [\n\t\t1\n\t]\n}\n'


@mark_cli
def test_indent_zero_is_compact() -> None:
    result = run_cli(["--indent", "0", "."], input_text='{"a": 1}')

    assert_SUCCESS(result)
    assert result.stdout == '{"a":1}\n'


@mark_cli
def test_indent_four() -> None:
    result = run_cli(["--indent", "4", "."], input_text='{"a": 1}')

    assert_SUCCESS(result)
    assert result.stdout == '{\n    "a": 1\n}\n'


@mark_cli
@parametrize(
    "value, message",
    [
        ("-1", "negative indentation count"),
        ("10", "too many indentation count"),
    ],
)
def test_indent_out_of_range_fails_before_reading_input(value: str, message: str) -> None:
    """Invalid indentation is a flag error; no input is consumed and nothing is printed."""
    result = run_cli([f"--indent={value}", "."], input_text="{not json")

    assert_FLAG_ERROR(result)
    assert result.stdout == ""
    assert result.stderr == f"jqline: {message}\n"


@mark_cli
def test_yaml_output_with_tab_is_rejected() -> None:
    result = run_cli(["--yaml-output", "--tab", "."], input_text="1")

    assert_FLAG_ERROR(result)
    assert "tab indentation" in result.stderr
    assert result.stdout == ""


@mark_cli
def test_yaml_output_separates_documents() -> None:
    """YAML documents are separated by ``---``; the first one has no separator."""
    result = run_cli(["--yaml-output", ".[]"], input_text='[{"b": 1, "a": null}, {"c": "x"}]')

    assert_SUCCESS(result)
    assert result.stdout == "b: 1\na: null\n---\nc: x\n"


@mark_cli
def test_yaml_output_ignores_raw_flag() -> None:
    result = run_cli(["--yaml-output", "-r", "."], input_text='"text"')

    assert_SUCCESS(result)
    assert result.stdout == "text\n"


@mark_cli
def test_color_output_forced() -> None:
    result = run_cli(["-C", "-c", "."], input_text='{"a": 1}')

    assert_SUCCESS(result)
    assert "\x1b[34;1m" in result.stdout
    assert "\x1b[36m1\x1b[0m" in result.stdout


@mark_cli
def test_monochrome_output_has_no_escapes() -> None:
    result = run_cli(["-M", "-c", "."], input_text='{"a": 1}')

    assert_SUCCESS(result)
    assert result.stdout == '{"a":1}\n'


@mark_cli
def test_color_scheme_from_environment() -> None:
    result = run_cli(
        ["-C", "-c", "."], input_text="null", env={"JQLINE_COLORS": "1;31"}
    )

    assert_SUCCESS(result)
    assert result.stdout == "\x1b[1;31mnull\x1b[0m\n"


@mark_cli
def test_invalid_color_scheme_is_a_flag_error() -> None:
    result = run_cli(["-c", "."], input_text="1", env={"JQLINE_COLORS": "red"})

    assert_FLAG_ERROR(result)
    assert "invalid color" in result.stderr
