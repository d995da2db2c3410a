# jqline:header:start
#
#   project      : jqline
#   file         : test_stream_events.py
#   file_relpath : tests/evaluator/test_stream_events.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

# pyright: strict

"""Tests for the streaming form of values."""

from __future__ import annotations

from typing import Any

from hypothesis import given

from jqline.core.values import sort_key
from jqline.evaluator import stream_events
from tests.conftest import mark_evaluator, parametrize
from tests.evaluator.conftest import values
from tests.strategies_jqline import s_value


@mark_evaluator
@parametrize(
    "value, events",
    [
        (3, [[[], 3]]),
        ([], [[[], []]]),
        ({}, [[[], {}]]),
        ({"a": 1, "b": [2]}, [[["a"], 1], [["b", 0], 2], [["b", 0]], [["b"]]]),
        ([[], {"k": {}}], [[[0], []], [[1, "k"], {}], [[1, "k"]], [[1]]]),
    ],
)
def test_events(value: Any, events: list[Any]) -> None:
    assert list(stream_events(value)) == events


@mark_evaluator
@given(s_value())
def test_every_value_survives_a_stream_round_trip(value: Any) -> None:
    assert values("fromstream(tostream)", value) == [value]


@mark_evaluator
@given(s_value())
def test_leaf_events_match_paths(value: Any) -> None:
    leaves = [event[0] for event in stream_events(value) if len(event) == 2]
    scalar_paths = values("[paths(type | . != \"array\" and . != \"object\"), "
                          "(paths(type == \"array\" or type == \"object\") as $p "
                          "| select(getpath($p) | length == 0) | $p)] | sort", value)[0]

    if leaves == [[]]:
        assert scalar_paths == []
    else:
        assert sorted(leaves, key=sort_key) == scalar_paths
