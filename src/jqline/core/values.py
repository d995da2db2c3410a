# jqline:header:start
#
#   project      : jqline
#   file         : values.py
#   file_relpath : src/jqline/core/values.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""The jqline value model.

Values are Python's native JSON types: ``None``, ``bool``, ``int``, ``float``,
``str``, ``list`` and ``dict`` (string keys, insertion ordered). This module
names the variants ([`ValueKind`][jqline.core.values.ValueKind]) and defines
the operations whose semantics must match the query language rather than
Python: ordering, truthiness and type names.

Numbers read from JSON keep their source literal: integers are ``int`` and
therefore lossless; other numbers are [`JsonNumber`][jqline.core.values.JsonNumber],
a ``float`` that remembers the text it was parsed from.
"""

from __future__ import annotations

import datetime
import json
import math
from enum import IntEnum
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from collections.abc import Callable

Value = Union[None, bool, int, float, str, list[Any], dict[str, Any]]
"""Type alias for any decoded or produced value."""


class JsonNumber(float):
    """A ``float`` that carries the literal it was decoded from.

    The JSON encoder writes [`literal`][jqline.core.values.JsonNumber.literal]
    verbatim, so ``1.10`` or ``1e1000`` survive a pass through jqline
    unchanged. Arithmetic on a ``JsonNumber`` returns a plain ``float``.
    """

    literal: str

    def __new__(cls, literal: str) -> JsonNumber:
        obj: JsonNumber = float.__new__(cls, literal)
        obj.literal = literal
        return obj

    def __repr__(self) -> str:
        return f"JsonNumber({self.literal!r})"


def _reject_constant(name: str) -> float:
    raise ValueError(f"invalid literal {name}")


JSON_DECODER: json.JSONDecoder = json.JSONDecoder(
    parse_float=JsonNumber, parse_constant=_reject_constant
)
"""Shared JSON decoder: keeps number literals, rejects ``NaN`` and ``Infinity``."""


class ValueKind(IntEnum):
    """Value variants, in jq sort order."""

    NULL = 0
    FALSE = 1
    TRUE = 2
    NUMBER = 3
    STRING = 4
    ARRAY = 5
    OBJECT = 6

    @property
    def type_name(self) -> str:
        """Return the name the query language's ``type`` builtin uses for this kind."""
        if self in (ValueKind.FALSE, ValueKind.TRUE):
            return "boolean"
        return self.name.lower()


def kind_of(value: Value) -> ValueKind:
    """Return the [`ValueKind`][jqline.core.values.ValueKind] of ``value``.

    Raises:
        TypeError: If ``value`` is not part of the value model.
    """
    if value is None:
        return ValueKind.NULL
    if value is True:
        return ValueKind.TRUE
    if value is False:
        return ValueKind.FALSE
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise TypeError(f"not a jqline value: {type(value).__name__}")


def type_name(value: Value) -> str:
    """Return ``"null"``, ``"boolean"``, ``"number"``, ``"string"``, ``"array"`` or ``"object"``."""
    return kind_of(value).type_name


def is_truthy(value: Value) -> bool:
    """Return ``False`` for ``null`` and ``false``; every other value is truthy."""
    return value is not None and value is not False


def compare_values(left: Value, right: Value) -> int:
    """Three-way comparison following the query language's total order.

    ``null < false < true < numbers < strings < arrays < objects``. Arrays
    compare element-wise; objects compare their sorted key lists first and then
    the values key by key.

    Returns:
        int: Negative, zero or positive like a classic ``cmp``.
    """
    lk: ValueKind = kind_of(left)
    rk: ValueKind = kind_of(right)
    if lk != rk:
        return -1 if lk < rk else 1
    if lk == ValueKind.NUMBER or lk == ValueKind.STRING:
        return (left > right) - (left < right)  # type: ignore[operator]
    if lk == ValueKind.ARRAY:
        for a, b in zip(left, right):  # type: ignore[arg-type]
            c: int = compare_values(a, b)
            if c:
                return c
        return (len(left) > len(right)) - (len(left) < len(right))  # type: ignore[arg-type]
    if lk == ValueKind.OBJECT:
        lkeys: list[str] = sorted(left)  # type: ignore[arg-type]
        rkeys: list[str] = sorted(right)  # type: ignore[arg-type]
        c = compare_values(lkeys, rkeys)
        if c:
            return c
        for key in lkeys:
            c = compare_values(left[key], right[key])  # type: ignore[index]
            if c:
                return c
    return 0


sort_key: Callable[[Value], Any] = cmp_to_key(compare_values)
"""Key function for ``sorted()`` using [`compare_values`][jqline.core.values.compare_values]."""


def format_key(key: object) -> str:
    """Return the string form of a non-string mapping key.

    YAML allows any scalar as a mapping key, the value model only strings.
    """
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, float):
        return format_float(key)
    if isinstance(key, (datetime.date, datetime.datetime)):
        return key.isoformat()
    return str(key)


def format_float(number: float) -> str:
    """Render a float the way the JSON encoder does."""
    if isinstance(number, JsonNumber):
        return number.literal
    if math.isnan(number):
        return "null"
    if math.isinf(number):
        return "1.7976931348623157e+308" if number > 0 else "-1.7976931348623157e+308"
    if number.is_integer() and abs(number) < 1e17:
        return str(int(number))
    return repr(number)


def normalize_yaml(value: Any) -> Value:
    """Coerce a YAML-decoded tree into the value model.

    Mapping keys become strings (see [`format_key`][jqline.core.values.format_key]),
    timestamps become ISO 8601 strings and binary scalars become text.
    """
    if isinstance(value, dict):
        return {format_key(k): normalize_yaml(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_yaml(v) for v in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
