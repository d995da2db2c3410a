# jqline:header:start
#
#   project      : jqline
#   file         : stream.py
#   file_relpath : src/jqline/evaluator/stream.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Streaming form of a value (``--stream`` and ``tostream``).

A value is flattened into events: ``[path, leaf]`` for every scalar or empty
container, and ``[path]`` after the last child of every non-empty container,
where ``path`` is the path of that last child.

    {"a": 1, "b": [2]}  ->  [["a"],1]  [["b",0],2]  [["b",0]]  [["b"]]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from jqline.core.values import Value


def stream_events(value: Value) -> Iterator[list[Value]]:
    """Yield the stream events of ``value`` in document order."""
    yield from _events(value, [])


def _events(value: Value, path: list[Value]) -> Iterator[list[Value]]:
    if isinstance(value, dict) and value:
        key: Value = None
        for key, child in value.items():
            yield from _events(child, [*path, key])
        yield [[*path, key]]
    elif isinstance(value, list) and value:
        for index, child in enumerate(value):
            yield from _events(child, [*path, index])
        yield [[*path, len(value) - 1]]
    else:
        yield [list(path), value]
