# jqline:header:start
#
#   project      : jqline
#   file         : builtins.py
#   file_relpath : src/jqline/evaluator/builtins.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Builtin functions of the query language.

Most builtins are implemented in Python and registered in
[`BUILTINS`][jqline.evaluator.builtins.BUILTINS] keyed by ``(name, arity)``.
Builtins that are naturally written in the query language itself live in
[`PRELUDE`][jqline.evaluator.builtins.PRELUDE]; the compiler places its
definitions around every query.

Calling convention: a builtin receives the input value, one *thunk* per
argument (a callable evaluating the argument expression against a given
input) and the [`Runtime`][jqline.evaluator.builtins.Runtime]. It returns an
iterator of results. Raising
[`QueryRuntimeError`][jqline.evaluator.errors.QueryRuntimeError] ends the
builtin's output with that error.
"""

from __future__ import annotations

import itertools
import math
from typing import TYPE_CHECKING, Any, Callable, Protocol, Union

from jqline.core.errors import InputError
from jqline.core.values import JSON_DECODER, compare_values, is_truthy, sort_key, type_name
from jqline.evaluator.errors import HaltRequest, QueryRuntimeError
from jqline.evaluator.stream import stream_events
from jqline.rendering.json_encoder import to_compact_json

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from jqline.core.values import Value

Result = Union["Value", QueryRuntimeError]
"""An item of a result stream: a value or a runtime error."""

Thunk = Callable[["Value"], "Iterator[Result]"]
Builtin = Callable[["Value", "tuple[Thunk, ...]", "Runtime"], "Iterator[Result]"]

BUILTINS: dict[tuple[str, int], Builtin] = {}
"""Python builtins keyed by ``(name, arity)``."""

# Longest value excerpt in an error message.
_EXCERPT_WIDTH: int = 11

NO_MORE_INPUTS: str = "No more inputs"


class Runtime(Protocol):
    """Services the evaluator needs from its host."""

    def next_input(self) -> Value:
        """Return the next input value (``input``).

        Raises:
            QueryRuntimeError: ``No more inputs`` or the input's decode error.
        """
        ...

    def input_name(self) -> str | None:
        """Return the source name of the current input, if it is a file."""
        ...

    def environ(self) -> dict[str, Value]:
        """Return the process environment as an object."""
        ...


def iter_values(items: Iterable[Result]) -> Iterator[Value]:
    """Yield the values of a result stream, raising its first error."""
    for item in items:
        if isinstance(item, QueryRuntimeError):
            raise item
        yield item


def describe(value: Value) -> str:
    """Return ``type (excerpt)`` as used in runtime error messages."""
    text: str = to_compact_json(value)
    if len(text) > _EXCERPT_WIDTH:
        text = text[: _EXCERPT_WIDTH - 1] + "..."
    return f"{type_name(value)} ({text})"


def is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def builtin(name: str, arity: int = 0) -> Callable[[Builtin], Builtin]:
    """Register a generator builtin that receives raw argument thunks."""

    def register(fn: Builtin) -> Builtin:
        BUILTINS[(name, arity)] = fn
        return fn

    return register


def function(name: str, arity: int = 0) -> Callable[[Callable[..., Value]], Callable[..., Value]]:
    """Register a builtin computing one value from the input and argument values.

    Arguments are evaluated against the input; the function is called once per
    combination of argument values.
    """

    def register(fn: Callable[..., Value]) -> Callable[..., Value]:
        def run(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
            if not args:
                yield fn(value)
                return
            for combo in _product([list(iter_values(arg(value))) for arg in args]):
                yield fn(value, *combo)

        BUILTINS[(name, arity)] = run
        return fn

    return register


def _product(columns: list[list[Value]]) -> Iterator[tuple[Value, ...]]:
    # Later arguments vary slowest.
    for combo in itertools.product(*reversed(columns)):
        yield tuple(reversed(combo))


# Arithmetic and indexing (shared with the compiler)


def binary_op(op: str, left: Value, right: Value) -> Value:
    """Apply an arithmetic or comparison operator."""
    if op in _COMPARATORS:
        return _COMPARATORS[op](compare_values(left, right))
    return _ARITHMETIC[op](left, right)


def _add(left: Value, right: Value) -> Value:
    if left is None:
        return right
    if right is None:
        return left
    if is_number(left) and is_number(right):
        return left + right  # type: ignore[operator]
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    if isinstance(left, list) and isinstance(right, list):
        return left + right
    if isinstance(left, dict) and isinstance(right, dict):
        return {**left, **right}
    raise QueryRuntimeError(f"{describe(left)} and {describe(right)} cannot be added")


def _subtract(left: Value, right: Value) -> Value:
    if is_number(left) and is_number(right):
        return left - right  # type: ignore[operator]
    if isinstance(left, list) and isinstance(right, list):
        return [x for x in left if all(compare_values(x, y) for y in right)]
    raise QueryRuntimeError(f"{describe(left)} and {describe(right)} cannot be subtracted")


def _multiply(left: Value, right: Value) -> Value:
    if is_number(left) and is_number(right):
        return left * right  # type: ignore[operator]
    if isinstance(left, str) and is_number(right):
        left, right = right, left
    if is_number(left) and isinstance(right, str):
        if left <= 0:  # type: ignore[operator]
            return None
        return right * math.ceil(left)  # type: ignore[arg-type]
    if isinstance(left, dict) and isinstance(right, dict):
        return _deep_merge(left, right)
    raise QueryRuntimeError(f"{describe(left)} and {describe(right)} cannot be multiplied")


def _deep_merge(left: dict[str, Any], right: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(left)
    for key, value in right.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _divide(left: Value, right: Value) -> Value:
    if is_number(left) and is_number(right):
        if right == 0:
            raise _zero_division(left, right)
        quotient: float = left / right  # type: ignore[operator]
        return int(quotient) if quotient.is_integer() and abs(quotient) < 1e17 else quotient
    if isinstance(left, str) and isinstance(right, str):
        return _split(left, right)
    raise QueryRuntimeError(f"{describe(left)} and {describe(right)} cannot be divided")


def _zero_division(left: Value, right: Value) -> QueryRuntimeError:
    return QueryRuntimeError(
        f"{describe(left)} and {describe(right)} cannot be divided because the divisor is zero"
    )


def _modulo(left: Value, right: Value) -> Value:
    if is_number(left) and is_number(right):
        divisor: int = abs(int(right))  # type: ignore[arg-type]
        if divisor == 0:
            raise _zero_division(left, right)
        remainder: int = abs(int(left)) % divisor  # type: ignore[arg-type]
        return -remainder if left < 0 else remainder  # type: ignore[operator]
    raise QueryRuntimeError(f"{describe(left)} and {describe(right)} cannot be divided")


_ARITHMETIC: dict[str, Callable[[Value, Value], Value]] = {
    "+": _add,
    "-": _subtract,
    "*": _multiply,
    "/": _divide,
    "%": _modulo,
}

_COMPARATORS: dict[str, Callable[[int], bool]] = {
    "==": lambda c: c == 0,
    "!=": lambda c: c != 0,
    "<": lambda c: c < 0,
    "<=": lambda c: c <= 0,
    ">": lambda c: c > 0,
    ">=": lambda c: c >= 0,
}


def index_value(target: Value, key: Value) -> Value:
    """Return ``target[key]`` with the query language's rules."""
    if isinstance(target, dict) and isinstance(key, str):
        return target.get(key)
    if isinstance(target, list) and is_number(key):
        if isinstance(key, float) and math.isnan(key):
            return None
        position: int = math.floor(key)  # type: ignore[arg-type]
        if position < 0:
            position += len(target)
        return target[position] if 0 <= position < len(target) else None
    if target is None and (isinstance(key, str) or is_number(key) or key is None):
        return None
    if isinstance(target, list) and isinstance(key, list):
        return _indices(target, key)
    if isinstance(key, str):
        raise QueryRuntimeError(f'Cannot index {type_name(target)} with "{key}"')
    raise QueryRuntimeError(f"Cannot index {type_name(target)} with {type_name(key)}")


def slice_value(target: Value, start: Value, end: Value) -> Value:
    """Return ``target[start:end]``."""
    if target is None:
        return None
    if not isinstance(target, (list, str)):
        raise QueryRuntimeError(f"Cannot index {type_name(target)} with object")
    for bound in (start, end):
        if bound is not None and not is_number(bound):
            raise QueryRuntimeError("Start and end indices of an array slice must be numbers")
    length: int = len(target)
    lo: int = 0 if start is None else math.floor(start)  # type: ignore[arg-type]
    hi: int = length if end is None else math.ceil(end)  # type: ignore[arg-type]
    if lo < 0:
        lo = max(0, length + lo)
    if hi < 0:
        hi = max(0, length + hi)
    return target[min(lo, length) : min(max(hi, lo), length)]


def iterate_value(target: Value) -> Iterator[Value]:
    """Yield the elements of an array or the values of an object."""
    if isinstance(target, list):
        yield from target
    elif isinstance(target, dict):
        yield from target.values()
    elif target is None:
        raise QueryRuntimeError("Cannot iterate over null")
    else:
        raise QueryRuntimeError(f"Cannot iterate over {describe(target)}")


def get_path(value: Value, path: Value) -> Value:
    if not isinstance(path, list):
        raise QueryRuntimeError("Path must be specified as an array")
    for key in path:
        if value is None:
            return None
        value = index_value(value, key)
    return value


def set_path(root: Value, path: list[Value], leaf: Value) -> Value:
    """Return a copy of ``root`` with ``leaf`` stored at ``path``."""
    if not path:
        return leaf
    key, rest = path[0], path[1:]
    if isinstance(key, str):
        if root is None:
            root = {}
        if not isinstance(root, dict):
            raise QueryRuntimeError(f'Cannot index {type_name(root)} with "{key}"')
        updated: dict[str, Any] = dict(root)
        updated[key] = set_path(root.get(key), rest, leaf)
        return updated
    if is_number(key):
        if root is None:
            root = []
        if not isinstance(root, list):
            raise QueryRuntimeError(f"Cannot index {type_name(root)} with number")
        position: int = int(key)  # type: ignore[arg-type]
        if position < 0:
            position += len(root)
            if position < 0:
                raise QueryRuntimeError("Out of bounds negative array index")
        items: list[Any] = list(root)
        items.extend([None] * (position + 1 - len(items)))
        items[position] = set_path(items[position], rest, leaf)
        return items
    raise QueryRuntimeError(f"Cannot update field at object index of {type_name(root)}")


def _indices(haystack: Value, needle: Value) -> Value:
    if haystack is None:
        return None
    if isinstance(haystack, str) and isinstance(needle, str):
        if not needle:
            return None
        found: list[Value] = []
        start: int = haystack.find(needle)
        while start >= 0:
            found.append(start)
            start = haystack.find(needle, start + 1)
        return found
    if isinstance(haystack, list):
        pattern: list[Value] = needle if isinstance(needle, list) else [needle]
        if not pattern:
            return None
        width: int = len(pattern)
        return [
            i
            for i in range(len(haystack) - width + 1)
            if compare_values(haystack[i : i + width], pattern) == 0
        ]
    raise QueryRuntimeError(
        f"Cannot determine indices of {describe(needle)} in {describe(haystack)}"
    )


def _split(text: str, separator: str) -> list[Value]:
    if not text:
        return []
    if not separator:
        return list(text)
    return list(text.split(separator))


# Core


@builtin("empty")
def _empty(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    return iter(())


@function("not")
def _not(value: Value) -> Value:
    return not is_truthy(value)


@function("error")
def _error0(value: Value) -> Value:
    raise QueryRuntimeError(value)


@function("error", 1)
def _error1(value: Value, message: Value) -> Value:
    raise QueryRuntimeError(message)


@function("type")
def _type(value: Value) -> Value:
    return type_name(value)


@builtin("recurse")
def _recurse(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    stack: list[Value] = [value]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, list):
            stack.extend(reversed(current))
        elif isinstance(current, dict):
            stack.extend(reversed(list(current.values())))


# The iterative generators below replace recursive definitions so that long
# loops do not grow the interpreter stack.


def _unfold(
    value: Value, step: Callable[[Value, list[Iterator[Result]]], Iterator[Result]]
) -> Iterator[Result]:
    stack: list[Iterator[Result]] = [iter([value])]
    while stack:
        try:
            item = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if isinstance(item, QueryRuntimeError):
            yield item
            continue
        yield from step(item, stack)


@builtin("recurse", 1)
def _recurse_with(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    def step(item: Value, stack: list[Iterator[Result]]) -> Iterator[Result]:
        yield item
        stack.append(iter(args[0](item)))

    return _unfold(value, step)


BUILTINS[("repeat", 1)] = _recurse_with


@builtin("while", 2)
def _while(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    def step(item: Value, stack: list[Iterator[Result]]) -> Iterator[Result]:
        for cond in iter_values(args[0](item)):
            if is_truthy(cond):
                yield item
                stack.append(iter(args[1](item)))

    return _unfold(value, step)


@builtin("until", 2)
def _until(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    def step(item: Value, stack: list[Iterator[Result]]) -> Iterator[Result]:
        for cond in iter_values(args[0](item)):
            if is_truthy(cond):
                yield item
            else:
                stack.append(iter(args[1](item)))

    return _unfold(value, step)


@function("length")
def _length(value: Value) -> Value:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise QueryRuntimeError(f"{describe(value)} has no length")
    if is_number(value):
        return abs(value)  # type: ignore[arg-type]
    if isinstance(value, (str, list, dict)):
        return len(value)
    raise QueryRuntimeError(f"{describe(value)} has no length")


@function("utf8bytelength")
def _utf8bytelength(value: Value) -> Value:
    if not isinstance(value, str):
        raise QueryRuntimeError(f"{describe(value)} only strings have UTF-8 byte length")
    return len(value.encode("utf-8", errors="surrogatepass"))


@function("keys")
def _keys(value: Value) -> Value:
    if isinstance(value, dict):
        return sorted(value)
    if isinstance(value, list):
        return list(range(len(value)))
    raise QueryRuntimeError(f"{describe(value)} has no keys")


@function("keys_unsorted")
def _keys_unsorted(value: Value) -> Value:
    if isinstance(value, dict):
        return list(value)
    return _keys(value)


@function("has", 1)
def _has(value: Value, key: Value) -> Value:
    if isinstance(value, dict) and isinstance(key, str):
        return key in value
    if isinstance(value, list) and is_number(key):
        return 0 <= key < len(value)  # type: ignore[operator]
    raise QueryRuntimeError(f"Cannot check whether {type_name(value)} has a {type_name(key)} key")


@function("contains", 1)
def _contains_builtin(value: Value, other: Value) -> Value:
    return _contains(value, other)


def _contains(left: Value, right: Value) -> bool:
    if isinstance(left, dict) and isinstance(right, dict):
        return all(key in left and _contains(left[key], item) for key, item in right.items())
    if isinstance(left, list) and isinstance(right, list):
        return all(any(_contains(x, y) for x in left) for y in right)
    if isinstance(left, str) and isinstance(right, str):
        return right in left
    if type_name(left) == type_name(right):
        return compare_values(left, right) == 0
    raise QueryRuntimeError(
        f"{describe(left)} and {describe(right)} cannot have their containment checked"
    )


# Strings


@function("tostring")
def _tostring(value: Value) -> Value:
    return value if isinstance(value, str) else to_compact_json(value)


@function("tojson")
def _tojson(value: Value) -> Value:
    return to_compact_json(value)


@function("fromjson")
def _fromjson(value: Value) -> Value:
    if not isinstance(value, str):
        raise QueryRuntimeError(f"{describe(value)} cannot be parsed as JSON")
    return _parse_json(value)


@function("tonumber")
def _tonumber(value: Value) -> Value:
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            number = _parse_json(value.strip())
        except QueryRuntimeError:
            number = None
        if is_number(number):
            return number
        raise QueryRuntimeError(f"Cannot parse '{value}' as JSON")
    raise QueryRuntimeError(f"{describe(value)} cannot be parsed as a number")


def _parse_json(text: str) -> Value:
    try:
        return JSON_DECODER.decode(text)
    except ValueError as exc:
        raise QueryRuntimeError(f"{exc} (while parsing '{text}')") from exc


@function("ascii_downcase")
def _ascii_downcase(value: Value) -> Value:
    if not isinstance(value, str):
        raise QueryRuntimeError("ascii_downcase input must be a string")
    return value.translate(_DOWNCASE)


@function("ascii_upcase")
def _ascii_upcase(value: Value) -> Value:
    if not isinstance(value, str):
        raise QueryRuntimeError("ascii_upcase input must be a string")
    return value.translate(_UPCASE)


_DOWNCASE: dict[int, int] = {c: c + 32 for c in range(ord("A"), ord("Z") + 1)}
_UPCASE: dict[int, int] = {c + 32: c for c in range(ord("A"), ord("Z") + 1)}


@function("split", 1)
def _split_builtin(value: Value, separator: Value) -> Value:
    if not isinstance(value, str) or not isinstance(separator, str):
        raise QueryRuntimeError("split input and separator must be strings")
    return _split(value, separator)


@function("join", 1)
def _join(value: Value, separator: Value) -> Value:
    if not isinstance(separator, str):
        raise QueryRuntimeError(f"{describe(separator)} is not a valid separator")
    parts: list[str] = []
    for item in iterate_value(value):
        if item is None:
            parts.append("")
        elif isinstance(item, str):
            parts.append(item)
        elif is_number(item) or isinstance(item, bool):
            parts.append(to_compact_json(item))
        else:
            raise QueryRuntimeError(f"Cannot join with {type_name(item)}")
    return separator.join(parts)


@function("startswith", 1)
def _startswith(value: Value, prefix: Value) -> Value:
    if not isinstance(value, str) or not isinstance(prefix, str):
        raise QueryRuntimeError("startswith() requires string inputs")
    return value.startswith(prefix)


@function("endswith", 1)
def _endswith(value: Value, suffix: Value) -> Value:
    if not isinstance(value, str) or not isinstance(suffix, str):
        raise QueryRuntimeError("endswith() requires string inputs")
    return value.endswith(suffix)


@function("ltrimstr", 1)
def _ltrimstr(value: Value, prefix: Value) -> Value:
    if isinstance(value, str) and isinstance(prefix, str) and value.startswith(prefix):
        return value[len(prefix) :]
    return value


@function("rtrimstr", 1)
def _rtrimstr(value: Value, suffix: Value) -> Value:
    if isinstance(value, str) and isinstance(suffix, str) and suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value


@function("explode")
def _explode(value: Value) -> Value:
    if not isinstance(value, str):
        raise QueryRuntimeError(f"{describe(value)} cannot be exploded")
    return [ord(c) for c in value]


@function("implode")
def _implode(value: Value) -> Value:
    if not isinstance(value, list) or not all(is_number(c) for c in value):
        raise QueryRuntimeError(f"{describe(value)} cannot be imploded")
    try:
        return "".join(chr(int(c)) for c in value)
    except (ValueError, OverflowError) as exc:
        raise QueryRuntimeError(f"{describe(value)} cannot be imploded") from exc


@function("indices", 1)
def _indices_builtin(value: Value, needle: Value) -> Value:
    return _indices(value, needle)


@function("index", 1)
def _index(value: Value, needle: Value) -> Value:
    found = _indices(value, needle)
    return found[0] if found else None


@function("rindex", 1)
def _rindex(value: Value, needle: Value) -> Value:
    found = _indices(value, needle)
    return found[-1] if found else None


# Arrays


def _require_array(value: Value, what: str) -> list[Value]:
    if not isinstance(value, list):
        raise QueryRuntimeError(f"{describe(value)} cannot be {what}, as it is not an array")
    return value


@function("sort")
def _sort(value: Value) -> Value:
    return sorted(_require_array(value, "sorted"), key=sort_key)


@function("unique")
def _unique(value: Value) -> Value:
    result: list[Value] = []
    for item in sorted(_require_array(value, "sorted"), key=sort_key):
        if not result or compare_values(result[-1], item):
            result.append(item)
    return result


@function("min")
def _min(value: Value) -> Value:
    items = _require_array(value, "compared")
    return min(items, key=sort_key) if items else None


@function("max")
def _max(value: Value) -> Value:
    items = _require_array(value, "compared")
    return max(reversed(items), key=sort_key) if items else None


@function("reverse")
def _reverse(value: Value) -> Value:
    if value is None:
        return []
    if isinstance(value, str):
        return value[::-1]
    return list(reversed(_require_array(value, "reversed")))


@function("flatten")
def _flatten0(value: Value) -> Value:
    return _flatten(_require_array(value, "flattened"), math.inf)


@function("flatten", 1)
def _flatten1(value: Value, depth: Value) -> Value:
    if not is_number(depth) or depth < 0:  # type: ignore[operator]
        raise QueryRuntimeError("flatten depth must not be negative")
    return _flatten(_require_array(value, "flattened"), depth)  # type: ignore[arg-type]


def _flatten(items: list[Value], depth: float) -> list[Value]:
    result: list[Value] = []
    for item in items:
        if isinstance(item, list) and depth > 0:
            result.extend(_flatten(item, depth - 1))
        else:
            result.append(item)
    return result


def _keyed(value: Value, arg: Thunk, what: str) -> list[tuple[list[Value], Value]]:
    return [(list(iter_values(arg(item))), item) for item in _require_array(value, what)]


@builtin("sort_by", 1)
def _sort_by(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    pairs = _keyed(value, args[0], "sorted")
    yield [item for _, item in sorted(pairs, key=lambda pair: sort_key(pair[0]))]


def _groups(pairs: list[tuple[list[Value], Value]]) -> list[list[tuple[list[Value], Value]]]:
    groups: list[list[tuple[list[Value], Value]]] = []
    for pair in sorted(pairs, key=lambda pair: sort_key(pair[0])):
        if groups and compare_values(groups[-1][0][0], pair[0]) == 0:
            groups[-1].append(pair)
        else:
            groups.append([pair])
    return groups


@builtin("group_by", 1)
def _group_by(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield [[item for _, item in group] for group in _groups(_keyed(value, args[0], "grouped"))]


@builtin("unique_by", 1)
def _unique_by(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield [group[0][1] for group in _groups(_keyed(value, args[0], "grouped"))]


@builtin("min_by", 1)
def _min_by(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    pairs = _keyed(value, args[0], "compared")
    yield min(pairs, key=lambda pair: sort_key(pair[0]))[1] if pairs else None


@builtin("max_by", 1)
def _max_by(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    pairs = _keyed(value, args[0], "compared")
    yield max(reversed(pairs), key=lambda pair: sort_key(pair[0]))[1] if pairs else None


# Generators and control flow


@builtin("range", 1)
def _range1(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for end in iter_values(args[0](value)):
        yield from _range(0, end, 1)


@builtin("range", 2)
def _range2(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for start in iter_values(args[0](value)):
        for end in iter_values(args[1](value)):
            yield from _range(start, end, 1)


@builtin("range", 3)
def _range3(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for start in iter_values(args[0](value)):
        for end in iter_values(args[1](value)):
            for step in iter_values(args[2](value)):
                yield from _range(start, end, step)


def _range(start: Value, end: Value, step: Value) -> Iterator[Value]:
    if not (is_number(start) and is_number(end) and is_number(step)):
        raise QueryRuntimeError("Range bounds must be numeric")
    current = start
    if step > 0:  # type: ignore[operator]
        while current < end:  # type: ignore[operator]
            yield current
            current += step  # type: ignore[operator]
    elif step < 0:  # type: ignore[operator]
        while current > end:  # type: ignore[operator]
            yield current
            current += step  # type: ignore[operator]


@builtin("limit", 2)
def _limit(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for count in iter_values(args[0](value)):
        if not is_number(count) or count <= 0:  # type: ignore[operator]
            continue
        emitted: int = 0
        for item in args[1](value):
            yield item
            if isinstance(item, QueryRuntimeError):
                return
            emitted += 1
            if emitted >= count:  # type: ignore[operator]
                break


@builtin("first", 1)
def _first(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for item in args[0](value):
        yield item
        return


@builtin("isempty", 1)
def _isempty(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for item in args[0](value):
        yield item if isinstance(item, QueryRuntimeError) else False
        return
    yield True


@builtin("halt")
def _halt(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    raise HaltRequest(None, 0, has_value=False)


@builtin("halt_error", 1)
def _halt_error(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for code in iter_values(args[0](value)):
        if not is_number(code):
            raise QueryRuntimeError(f"halt_error/1: number required: {describe(code)}")
        raise HaltRequest(value, int(code))  # type: ignore[arg-type]
    return iter(())


# Paths and streams


@function("getpath", 1)
def _getpath(value: Value, path: Value) -> Value:
    try:
        return get_path(value, path)
    except QueryRuntimeError:
        if not isinstance(path, list):
            raise
        return None


@function("setpath", 2)
def _setpath(value: Value, path: Value, leaf: Value) -> Value:
    if not isinstance(path, list):
        raise QueryRuntimeError("Path must be specified as an array")
    return set_path(value, path, leaf)


@builtin("paths")
def _paths(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for path, _ in _walk_paths(value, []):
        yield path


@builtin("paths", 1)
def _paths_filtered(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    for path, node in _walk_paths(value, []):
        if any(is_truthy(v) for v in iter_values(args[0](node))):
            yield path


def _walk_paths(value: Value, prefix: list[Value]) -> Iterator[tuple[list[Value], Value]]:
    children: Iterable[tuple[Value, Value]]
    if isinstance(value, dict):
        children = value.items()
    elif isinstance(value, list):
        children = enumerate(value)
    else:
        return
    for key, child in children:
        path = [*prefix, key]
        yield path, child
        yield from _walk_paths(child, path)


@builtin("tostream")
def _tostream(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield from stream_events(value)


@builtin("fromstream", 1)
def _fromstream(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    current: Value = None
    for event in iter_values(args[0](value)):
        if not isinstance(event, list) or not event or not isinstance(event[0], list):
            raise QueryRuntimeError("Invalid stream event: " + to_compact_json(event))
        path: list[Value] = event[0]
        if len(event) == 2:
            if not path:
                yield event[1]
                continue
            current = set_path(current, path, event[1])
        elif len(path) <= 1:
            yield current
            current = None


# Inputs and environment


@builtin("input")
def _input(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield rt.next_input()


@builtin("inputs")
def _inputs(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    while True:
        try:
            item = rt.next_input()
        except QueryRuntimeError as err:
            if err.value == NO_MORE_INPUTS:
                return
            yield err
            continue
        yield item


@builtin("input_filename")
def _input_filename(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield rt.input_name()


@builtin("env")
def _env(value: Value, args: tuple[Thunk, ...], rt: Runtime) -> Iterator[Result]:
    yield rt.environ()


# Math


def _math(name: str, fn: Callable[[float], float]) -> None:
    def apply(value: Value) -> Value:
        if not is_number(value):
            raise QueryRuntimeError(f"{describe(value)} number required")
        try:
            result: float = fn(value)  # type: ignore[arg-type]
        except (ValueError, OverflowError):
            return math.nan
        if isinstance(result, int) or (result.is_integer() and abs(result) < 1e17):
            return int(result)
        return result

    function(name)(apply)


for _name, _fn in (
    ("floor", math.floor),
    ("ceil", math.ceil),
    ("round", lambda x: math.floor(x + 0.5) if x >= 0 else -math.floor(-x + 0.5)),
    ("sqrt", math.sqrt),
    ("fabs", math.fabs),
    ("exp", math.exp),
    ("log", math.log),
    ("log2", math.log2),
    ("log10", math.log10),
):
    _math(_name, _fn)


@function("pow", 2)
def _pow(value: Value, base: Value, exponent: Value) -> Value:
    if not is_number(base) or not is_number(exponent):
        raise QueryRuntimeError("pow/2: number required")
    try:
        return math.pow(base, exponent)  # type: ignore[arg-type]
    except (ValueError, OverflowError):
        return math.nan


@function("infinite")
def _infinite(value: Value) -> Value:
    return math.inf


@function("nan")
def _nan(value: Value) -> Value:
    return math.nan


@function("isinfinite")
def _isinfinite(value: Value) -> Value:
    if not is_number(value):
        raise QueryRuntimeError(f"{describe(value)} number required")
    return math.isinf(value)  # type: ignore[arg-type]


@function("isnan")
def _isnan(value: Value) -> Value:
    if not is_number(value):
        raise QueryRuntimeError(f"{describe(value)} number required")
    return math.isnan(value)  # type: ignore[arg-type]


def input_failure(item: object) -> QueryRuntimeError:
    """Turn an input record that is not a value into a runtime error."""
    if isinstance(item, InputError):
        return QueryRuntimeError(item.message)
    return QueryRuntimeError(str(item))


PRELUDE: str = r"""
def select(f): if f then . else empty end;
def map(f): [.[] | f];
def recurse(f; cond): recurse(f | select(cond));
def values: select(. != null);
def nulls: select(. == null);
def booleans: select(type == "boolean");
def numbers: select(type == "number");
def strings: select(type == "string");
def arrays: select(type == "array");
def objects: select(type == "object");
def iterables: select(type | . == "array" or . == "object");
def scalars: select(type | . != "array" and . != "object");
def add: reduce .[] as $x (null; . + $x);
def any: reduce .[] as $x (false; . or $x);
def all: reduce .[] as $x (true; . and $x);
def any(f): reduce (.[] | f) as $x (false; . or $x);
def all(f): reduce (.[] | f) as $x (true; . and $x);
def any(g; cond): isempty(first(g | cond | select(.))) | not;
def all(g; cond): isempty(first(g | cond | select(. | not)));
def isvalid(f): try (f | true) catch false;
def first: .[0];
def last: .[-1];
def last(f): reduce f as $x (null; $x);
def nth($n): .[$n];
def nth($n; f):
    if $n < 0 then error("Out of bounds negative array index") else last(limit($n + 1; f)) end;
def in(xs): . as $x | xs | has($x);
def inside(xs): . as $x | xs | contains($x);
def to_entries: [keys_unsorted[] as $k | {key: $k, value: .[$k]}];
def from_entries: reduce .[] as $x ({};
    . + { ($x | if .key == null then .k // .name // .Name // .K // .Key else .key end
             | if type == "string" then . else tojson end):
          ($x | if has("value") then .value else .v end) });
def with_entries(f): to_entries | map(f) | from_entries;
def walk(f):
    def w: if type == "object" then to_entries | map({key, value: (.value | w)}) | from_entries
           elif type == "array" then map(w) else . end | f; w;
def leaf_paths: paths(scalars);
def halt_error: halt_error(5);
def truncate_stream(stream): . as $n | null | stream | . as $input
    | if (.[0] | length) > $n then setpath([0]; .[0][$n:]) else empty end;
"""
"""Builtins defined in the query language itself."""
