# jqline:header:start
#
#   project      : jqline
#   file         : test_evaluator_errors.py
#   file_relpath : tests/evaluator/test_evaluator_errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Runtime errors as result items, ``try``/``catch`` and the input builtins."""

from __future__ import annotations

from typing import Any

import pytest

from jqline.core.errors import JsonParseError
from jqline.evaluator import HaltRequest, QueryRuntimeError
from tests.conftest import mark_evaluator, parametrize
from tests.evaluator.conftest import evaluate, messages, values


class NamedInputs:
    """Iterator over prepared input records with a ``current_name``."""

    def __init__(self, items: list[Any], name: str = "data.json") -> None:
        self._items = iter(items)
        self.current_name = name

    def __iter__(self) -> NamedInputs:
        return self

    def __next__(self) -> Any:
        return next(self._items)


@mark_evaluator
def test_errors_do_not_end_the_stream() -> None:
    results = messages(evaluate('1, error("boom"), 3'))

    assert results == [1, ("error", "boom"), 3]


@mark_evaluator
def test_error_in_one_element_keeps_the_others() -> None:
    results = messages(evaluate(".[] | .a", [{"a": 1}, 2, {"a": 3}]))

    assert results == [1, ("error", "Cannot index number with \"a\""), 3]


@mark_evaluator
def test_collecting_stops_at_the_first_error() -> None:
    results = messages(evaluate('[1, error("x"), 2], "after"'))

    assert results == [("error", "x"), "after"]


@mark_evaluator
def test_error_payload_is_kept() -> None:
    (result,) = evaluate('error({"code": 2})')

    assert isinstance(result, QueryRuntimeError)
    assert result.value == {"code": 2}
    assert result.message == '{"code":2} (not a string)'


@mark_evaluator
@parametrize(
    "query, expected",
    [
        ('try error("x") catch ("caught: " + .)', ["caught: x"]),
        ('try error({"a": 1}) catch .a', [1]),
        ("[.[] | try tonumber catch null]", [[1, None]]),
        ('try (1, error("x"), 3)', [1]),
        ('try (1, error("x"), 3) catch .', [1, "x"]),
        ('[.[] | (tonumber)?]', [[1]]),
        ("try 5", [5]),
        ('try error("x")', []),
        ('(try error("x") catch .) | ascii_upcase', ["X"]),
    ],
)
def test_try_catch(query: str, expected: list[Any]) -> None:
    assert values(query, ["1", "x"]) == expected


@mark_evaluator
def test_errors_in_catch_handler_propagate() -> None:
    results = messages(evaluate('try error("a") catch error("b: " + .)'))

    assert results == [("error", "b: a")]


@mark_evaluator
def test_halt_is_raised_not_yielded() -> None:
    with pytest.raises(HaltRequest) as info:
        evaluate('1, halt, 2')

    assert info.value.exit_code == 0
    assert not info.value.has_value


@mark_evaluator
@parametrize(
    "query, value, code",
    [
        ("halt_error", "bye", 5),
        ("halt_error(1)", {"a": 1}, 1),
        ("halt_error(0)", "ok", 0),
    ],
)
def test_halt_error(query: str, value: Any, code: int) -> None:
    with pytest.raises(HaltRequest) as info:
        evaluate(query, value)

    assert info.value.exit_code == code
    assert info.value.value == value


@mark_evaluator
def test_halt_error_needs_a_number() -> None:
    assert messages(evaluate('halt_error("x")')) == [
        ("error", 'halt_error/1: number required: string ("x")')
    ]


@mark_evaluator
def test_input_and_inputs() -> None:
    inputs = NamedInputs([2, 3, 4])

    assert values("[., input]", 1, inputs=inputs) == [[1, 2]]
    assert values("[inputs]", None, inputs=inputs) == [[3, 4]]


@mark_evaluator
def test_input_without_more_inputs() -> None:
    results = messages(evaluate("input", None, inputs=NamedInputs([])))

    assert results == [("error", "No more inputs")]


@mark_evaluator
def test_input_without_source() -> None:
    assert messages(evaluate("input")) == [("error", "No more inputs")]


@mark_evaluator
def test_inputs_report_decode_errors_and_continue() -> None:
    broken = JsonParseError("data.json", "{", ValueError("bad"))
    inputs = NamedInputs([1, broken, 2])

    results = messages(evaluate("inputs", None, inputs=inputs))

    assert results == [1, ("error", "invalid json: data.json: bad"), 2]


@mark_evaluator
@parametrize(
    "name, expected",
    [
        ("data.json", "data.json"),
        ("<stdin>", None),
    ],
)
def test_input_filename(name: str, expected: str | None) -> None:
    inputs = NamedInputs([], name=name)

    assert values("input_filename", None, inputs=inputs) == [expected]
    assert values("input_filename") == [None]


@mark_evaluator
def test_unbounded_recursion_is_a_runtime_error() -> None:
    assert messages(evaluate("def f: f; f")) == [("error", "stack overflow")]


@mark_evaluator
def test_recursion_error_ends_only_the_current_input() -> None:
    assert messages(evaluate("def f: 1 + f; f")) == [("error", "stack overflow")]
    assert values("def f($n): if $n == 0 then 0 else f($n - 1) end; f(10)") == [0]
