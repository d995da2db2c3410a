# jqline:header:start
#
#   project      : jqline
#   file         : test_decoders.py
#   file_relpath : tests/inputs/test_decoders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Unit tests for the decoders: JSON, YAML, raw lines, null and stream events."""

from __future__ import annotations

import io

from jqline.core.errors import InputReadError, JsonParseError, YamlParseError
from jqline.core.values import JsonNumber
from jqline.inputs import JsonIterator, NullIterator, RawLineIterator, StreamIterator, YamlIterator
from tests.conftest import mark_pipeline, parametrize


class _FailingStream(io.StringIO):
    """Text stream whose reads fail after the first line."""

    def __init__(self, first: str) -> None:
        super().__init__(first)
        self.calls = 0

    def readline(self, size: int | None = -1) -> str:  # type: ignore[override]
        self.calls += 1
        if self.calls > 1:
            raise OSError("device gone")
        return super().readline(size)

    def __iter__(self) -> _FailingStream:
        return self

    def __next__(self) -> str:
        line = self.readline()
        if not line:
            raise StopIteration
        return line


@mark_pipeline
@parametrize("chunk_size", [1, 2, 3, 7, 4096])
def test_json_documents_survive_any_chunk_size(chunk_size: int) -> None:
    """Texts split across reads (numbers included) decode the same way."""
    text = '12345 {"a": [1, 2.50]}\n"x y" true\nnull 678'

    values = list(JsonIterator(io.StringIO(text), "in", chunk_size=chunk_size))

    assert values == [12345, {"a": [1, 2.5]}, "x y", True, None, 678]
    assert isinstance(values[1]["a"][1], JsonNumber)
    assert values[1]["a"][1].literal == "2.50"


@mark_pipeline
def test_json_error_is_yielded_once_and_ends_the_source() -> None:
    items = list(JsonIterator(io.StringIO('1\n2\n{"a" 3}\n4'), "data.json"))

    assert items[:2] == [1, 2]
    assert len(items) == 3
    error = items[2]
    assert isinstance(error, JsonParseError)
    assert error.name == "data.json"
    assert error.message.startswith("invalid json: data.json:3\n")


@mark_pipeline
def test_json_rejects_non_standard_constants() -> None:
    items = list(JsonIterator(io.StringIO("NaN"), "in"))

    assert len(items) == 1
    assert isinstance(items[0], JsonParseError)


@mark_pipeline
def test_json_too_deep_is_a_parse_error() -> None:
    depth = 100_000
    text = "[" * depth + "]" * depth + " 1"

    items = list(JsonIterator(io.StringIO(text), "deep.json"))

    assert len(items) == 1
    assert isinstance(items[0], JsonParseError)
    assert items[0].message == "invalid json: deep.json: exceeds depth limit for parsing"


@mark_pipeline
def test_json_empty_stream_yields_nothing() -> None:
    assert list(JsonIterator(io.StringIO("  \n\t"), "in")) == []


@mark_pipeline
def test_json_read_failure_is_yielded() -> None:
    items = list(JsonIterator(_FailingStream("1\n"), "in", chunk_size=4096))

    assert items[0] == 1
    assert len(items) == 2
    assert isinstance(items[1], InputReadError)
    assert "device gone" in items[1].message


@mark_pipeline
def test_yaml_documents() -> None:
    text = "a: 1\nb: [x, y]\n---\n- 1\n- null\n"

    assert list(YamlIterator(io.StringIO(text), "in.yaml")) == [
        {"a": 1, "b": ["x", "y"]},
        [1, None],
    ]


@mark_pipeline
def test_yaml_non_json_scalars_become_strings() -> None:
    values = list(YamlIterator(io.StringIO("when: 2024-01-02\n2: two\n"), "in.yaml"))

    assert values == [{"when": "2024-01-02", "2": "two"}]


@mark_pipeline
@parametrize(
    "text, expected",
    [
        ("1: x\ntrue: y\n", {"1": "x", "true": "y"}),
        (
            "1: x\n1.5: y\nnull: z\nfalse: w\n",
            {"1": "x", "1.5": "y", "null": "z", "false": "w"},
        ),
        ("0: a\nfalse: b\n", {"0": "a", "false": "b"}),
        ("a: 1\n1: 2\n1.0: 3\n", {"a": 1, "1": 3}),
    ],
)
def test_yaml_keys_are_coerced_before_they_collide(text: str, expected: dict[str, object]) -> None:
    """Keys become strings before they can collide as Python objects (1 == true)."""
    assert list(YamlIterator(io.StringIO(text), "in.yaml")) == [expected]


@mark_pipeline
def test_yaml_merge_keys_yield_string_keys() -> None:
    text = "base: &b {a: 1, 2: two}\nderived:\n  <<: *b\n  a: 3\n  true: yes\n"

    (document,) = list(YamlIterator(io.StringIO(text), "in.yaml"))

    assert document == {
        "base": {"a": 1, "2": "two"},
        "derived": {"a": 3, "2": "two", "true": "yes"},
    }


@mark_pipeline
def test_yaml_first_document_is_yielded_before_the_rest_is_read() -> None:
    text = "a: 1\n---\n" + "".join(f"k{i}: {i}\n" for i in range(500))
    stream = io.StringIO(text)

    documents = iter(YamlIterator(stream, "in.yaml"))

    assert next(documents) == {"a": 1}
    assert stream.tell() < len(text) // 2
    assert len(next(documents)) == 500


@mark_pipeline
def test_yaml_error_after_good_document() -> None:
    items = list(YamlIterator(io.StringIO("a: 1\n---\nb: [1\n"), "in.yaml"))

    assert items[0] == {"a": 1}
    assert len(items) == 2
    assert isinstance(items[1], YamlParseError)
    assert items[1].message.startswith("invalid yaml: in.yaml:")


@mark_pipeline
def test_raw_lines_strip_terminators() -> None:
    stream = io.StringIO("one\r\ntwo\n\nthree", newline="")

    assert list(RawLineIterator(stream, "in")) == ["one", "two", "", "three"]


@mark_pipeline
def test_raw_lines_never_fail_to_decode() -> None:
    stream = io.StringIO('{"unterminated\n[1, 2\n')

    assert list(RawLineIterator(stream, "in")) == ['{"unterminated', "[1, 2"]


@mark_pipeline
def test_raw_lines_read_failure() -> None:
    items = list(RawLineIterator(_FailingStream("ok\nlost\n"), "in"))

    assert items[0] == "ok"
    assert isinstance(items[1], InputReadError)


@mark_pipeline
def test_null_iterator_yields_null_once() -> None:
    iterator = NullIterator()

    assert list(iterator) == [None]
    assert iterator.current_name == "<null>"


@mark_pipeline
def test_stream_iterator_emits_events_and_passes_errors() -> None:
    inner = JsonIterator(io.StringIO('[1, {"b": null}] 3 {'), "in")

    items = list(StreamIterator(inner))

    assert items[:5] == [
        [[0], 1],
        [[1, "b"], None],
        [[1, "b"]],
        [[1]],
        [[], 3],
    ]
    assert isinstance(items[5], JsonParseError)
