# jqline:header:start
#
#   project      : jqline
#   file         : test_yaml_encoder.py
#   file_relpath : tests/rendering/test_yaml_encoder.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Unit tests for the YAML encoder."""

from __future__ import annotations

from jqline.core.values import JsonNumber
from jqline.rendering.yaml_encoder import YamlEncoder


def test_mapping_keeps_insertion_order() -> None:
    assert YamlEncoder().encode({"b": 1, "a": None}) == "b: 1\na: null\n"


def test_scalar_document_has_no_end_marker() -> None:
    assert YamlEncoder().encode("text") == "text\n"
    assert YamlEncoder().encode(None) == "null\n"


def test_nested_null_is_spelled_out() -> None:
    assert YamlEncoder().encode({"a": {"b": None}}) == "a:\n  b: null\n"


def test_json_numbers_are_plain_floats() -> None:
    assert YamlEncoder().encode({"x": JsonNumber("1.50")}) == "x: 1.5\n"


def test_shared_subtrees_are_not_aliased() -> None:
    shared = {"k": 1}

    text = YamlEncoder().encode({"a": shared, "b": shared})

    assert "&" not in text
    assert "*" not in text
    assert text == "a:\n  k: 1\nb:\n  k: 1\n"


def test_indent_is_at_least_two() -> None:
    assert YamlEncoder(indent=0).encode({"a": {"b": 1}}) == "a:\n  b: 1\n"
    assert YamlEncoder(indent=4).encode({"a": {"b": 1}}) == "a:\n    b: 1\n"
