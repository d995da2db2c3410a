# jqline:header:start
#
#   project      : jqline
#   file         : test_builtins.py
#   file_relpath : tests/evaluator/test_builtins.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Tests for the builtin function library."""

from __future__ import annotations

import math
from typing import Any

from tests.conftest import mark_evaluator, parametrize
from tests.evaluator.conftest import evaluate, messages, values


@mark_evaluator
@parametrize(
    "query, value, expected",
    [
        ("length", "héllo", 5),
        ("length", [1, 2], 2),
        ("length", {"a": 1}, 1),
        ("length", None, 0),
        ("length", -3, 3),
        ("utf8bytelength", "héllo", 6),
        ("keys", {"b": 1, "a": 2}, ["a", "b"]),
        ("keys_unsorted", {"b": 1, "a": 2}, ["b", "a"]),
        ("keys", [5, 6], [0, 1]),
        ('has("a")', {"a": None}, True),
        ("has(2)", [1, 2], False),
        ("type", None, "null"),
        (
            "[.[] | type]",
            [True, 1.5, "s", [], {}],
            ["boolean", "number", "string", "array", "object"],
        ),
        ("not", None, True),
        ("map(. + 1)", [1, 2], [2, 3]),
        ("add", [1, 2, 3], 6),
        ("add", ["a", "b"], "ab"),
        ("add", [], None),
        ("to_entries", {"a": 1}, [{"key": "a", "value": 1}]),
        ("from_entries", [{"key": "a", "value": 1}, {"k": "b", "v": 2}, {"name": 3, "value": 4}],
         {"a": 1, "b": 2, "3": 4}),
        ("with_entries({key: .key, value: (.value * 10)})", {"a": 1}, {"a": 10}),
        ('contains({a: [1]})', {"a": [1, 2], "b": 3}, True),
        ('contains("ell")', "hello", True),
        ("contains([[1]])", [[1, 2]], True),
        ('inside({"a": 1, "b": 2})', {"a": 1}, True),
        ('in({"a": 1})', "a", True),
        ("tostring", [1], "[1]"),
        ("tostring", "x", "x"),
        ("tojson", {"a": "b"}, '{"a":"b"}'),
        ("fromjson", '{"a": [1, 2]}', {"a": [1, 2]}),
        ("tonumber", " 42 ", 42),
        ("tonumber", 3, 3),
        ("ascii_downcase", "ÀBC", "Àbc"),
        ("ascii_upcase", "abc-é", "ABC-é"),
        ('split(", ")', "a, b, c", ["a", "b", "c"]),
        ('split("")', "ab", ["a", "b"]),
        ('join("-")', ["a", 1, None, True], "a-1--true"),
        ("explode", "A😀", [65, 128512]),
        ("implode", [65, 128512], "A😀"),
        ('indices(", ")', "a, b, c", [1, 4]),
        ("indices(1)", [0, 1, 2, 1], [1, 3]),
        ("indices([1, 2])", [0, 1, 2, 1, 2], [1, 3]),
        ("sort", [3, "a", None, [1], True, {"x": 1}, 1], [None, True, 1, 3, "a", [1], {"x": 1}]),
        ("sort_by(.n)", [{"n": 2}, {"n": 1}], [{"n": 1}, {"n": 2}]),
        ("group_by(.k)", [{"k": 2}, {"k": 1}, {"k": 2}], [[{"k": 1}], [{"k": 2}, {"k": 2}]]),
        ("unique", [2, 1, 2, 1], [1, 2]),
        ("unique_by(length)", ["ab", "c", "de"], ["c", "ab"]),
        ("min", [], None),
        ("reverse", [1, 2, 3], [3, 2, 1]),
        ("reverse", "abc", "cba"),
        ("reverse", None, []),
        ("flatten", [1, [2, [3, [4]]]], [1, 2, 3, 4]),
        ("flatten(1)", [1, [2, [3]]], [1, 2, [3]]),
        ("nth(1)", [1, 2, 3], 2),
        ("[nth(2; range(10))]", None, [2]),
        ("[values]", None, []),
        ("[.[] | numbers]", [1, "a", None, 2.5], [1, 2.5]),
        ("[.[] | strings]", [1, "a"], ["a"]),
        ("[.[] | scalars]", [1, [2], {"a": 3}, None], [1, None]),
        ("[.[] | iterables]", [1, [2], {"a": 3}], [[2], {"a": 3}]),
        ("[paths]", {"a": [1]}, [["a"], ["a", 0]]),
        ("[paths(type == \"number\")]", {"a": [1], "b": 2}, [["a", 0], ["b"]]),
        ("[leaf_paths]", {"a": {"b": 1}}, [["a", "b"]]),
        ('getpath(["a", "b"])', {"a": {"b": 5}}, 5),
        ('getpath(["a", "x", "y"])', {"a": {}}, None),
        ('setpath(["a", 1]; 9)', None, {"a": [None, 9]}),
        ('setpath([]; 1)', {"a": 1}, 1),
        ("walk(if type == \"number\" then . + 1 else . end)", [1, {"a": 2}], [2, {"a": 3}]),
    ],
)
def test_builtin_values(query: str, value: Any, expected: Any) -> None:
    assert values(query, value) == [expected]


@mark_evaluator
@parametrize(
    "query, value, expected",
    [
        ("any, all", [True, False], [True, False]),
        ('startswith("he"), endswith("lo")', "hello", [True, True]),
        ('ltrimstr("he"), rtrimstr("lo"), ltrimstr(1)', "hello", ["llo", "hel", "hello"]),
        ('index("b"), rindex("b")', "abcb", [1, 3]),
        ("min, max", [3, 1, 2], [1, 3]),
        ("min_by(.n), max_by(.n)", [{"n": 2}, {"n": 1}], [{"n": 1}, {"n": 2}]),
        ("first, last", [1, 2, 3], [1, 3]),
        ("any(. > 2), all(. > 0)", [1, 2, 3], [True, True]),
        ("any(.[]; . == 2), all(.[]; . < 3)", [1, 2, 3], [True, False]),
        ("isvalid(.[0]), isvalid(.a)", [1], [True, False]),
    ],
)
def test_builtins_with_several_results(query: str, value: Any, expected: list[Any]) -> None:
    assert values(query, value) == expected


@mark_evaluator
def test_stream_round_trip() -> None:
    doc = {"a": [1, {"b": None}], "c": "x"}

    events = values("[tostream]", doc)[0]

    assert events == [
        [["a", 0], 1],
        [["a", 1, "b"], None],
        [["a", 1, "b"]],
        [["a", 1]],
        [["c"], "x"],
        [["c"]],
    ]
    assert values("fromstream(tostream)", doc) == [doc]
    assert values("[1|truncate_stream([[0],1],[[1,0],2],[[1,0]],[[1]])]") == [
        [[[0], 2], [[0]]]
    ]


@mark_evaluator
def test_fromstream_of_scalars() -> None:
    assert values("fromstream(1, 2 | tostream)") == [1, 2]


@mark_evaluator
def test_math() -> None:
    assert values("[.[] | floor], [.[] | ceil], [.[] | round]", [1.5, -1.5]) == [
        [1, -2],
        [2, -1],
        [2, -2],
    ]
    assert values("16 | sqrt, (2 | pow(.; 10)), (-3 | fabs)") == [4, 1024, 3]
    assert values("100 | log10") == [2]
    assert values("infinite | isinfinite, (nan | isnan), (1 | isnan)") == [True, True, False]
    (result,) = values("-1 | sqrt")
    assert math.isnan(result)


@mark_evaluator
@parametrize(
    "query, value, message",
    [
        ("length", True, "boolean (true) has no length"),
        ("keys", 1, "number (1) has no keys"),
        ('has("a")', [1], "Cannot check whether array has a string key"),
        ("tonumber", "abc", "Cannot parse 'abc' as JSON"),
        ("sort", "abc", 'string ("abc") cannot be sorted, as it is not an array'),
        ("implode", "x", 'string ("x") cannot be imploded'),
        ('join(",")', [[1]], "Cannot join with array"),
        ("ascii_downcase", 1, "ascii_downcase input must be a string"),
        ("fromjson", 1, "number (1) cannot be parsed as JSON"),
        ("fromjson", "NaN", "invalid literal NaN (while parsing 'NaN')"),
        ("[range(\"a\")]", None, "Range bounds must be numeric"),
        ("nth(-1; 1)", None, "Out of bounds negative array index"),
        ('{"a": 1} - 1', None, 'object ({"a":1}) and number (1) cannot be subtracted'),
        ("1 / 0", None, "number (1) and number (0) cannot be divided because the divisor is zero"),
        ('"abcdefghijklmn" + 1', None, 'string ("abcdefghi...) and number (1) cannot be added'),
        (".[]", 5, "Cannot iterate over number (5)"),
        (".[]", None, "Cannot iterate over null"),
        ('.["a"]', [1], 'Cannot index array with "a"'),
        (".[0]", {"a": 1}, "Cannot index object with number"),
        ('{(1): 2}', None, "Object keys must be strings, not 1"),
        ("-\"a\"", None, 'string ("a") cannot be negated'),
        ('setpath(["a"]; 1)', [1], 'Cannot index array with "a"'),
        ("error", {"code": 1}, '{"code":1} (not a string)'),
        ("error(null)", None, "null (not a string)"),
    ],
)
def test_builtin_errors(query: str, value: Any, message: str) -> None:
    assert messages(evaluate(query, value)) == [("error", message)]


@mark_evaluator
def test_index_with_several_keys() -> None:
    assert values('.["a", "b"]', {"a": 1, "b": 2}) == [1, 2]
