# jqline:header:start
#
#   project      : jqline
#   file         : decoders.py
#   file_relpath : src/jqline/inputs/decoders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Decoders: turn one text stream into input records.

- [`JsonIterator`][jqline.inputs.decoders.JsonIterator]: consecutive JSON texts.
- [`YamlIterator`][jqline.inputs.decoders.YamlIterator]: YAML documents.
- [`RawLineIterator`][jqline.inputs.decoders.RawLineIterator]: one string per line.
- [`NullIterator`][jqline.inputs.decoders.NullIterator]: a single ``null`` (``-n``).
- [`StreamIterator`][jqline.inputs.decoders.StreamIterator]: stream events of
  another iterator's values (``--stream``).

Decoders never raise for bad input: they yield one
[`InputError`][jqline.core.errors.InputError] and stop.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.constructor import ConstructorError, SafeConstructor
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode

from jqline.config.logging import get_logger
from jqline.constants import NULL_INPUT_NAME
from jqline.core.errors import InputReadError, JsonParseError, YamlParseError
from jqline.core.values import JSON_DECODER, format_key, normalize_yaml
from jqline.evaluator.stream import stream_events
from jqline.inputs.base import InputIterator

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import TextIO

    from jqline.config.logging import JqlineLogger
    from jqline.inputs.base import InputRecord

logger: JqlineLogger = get_logger(__name__)

# Characters read per refill of the JSON buffer.
CHUNK_SIZE: int = 64 * 1024

_WHITESPACE: str = " \t\n\r"


class JsonIterator(InputIterator):
    """Decode consecutive JSON texts from a stream.

    The stream is read in chunks of at most one line into a buffer that
    ``json.JSONDecoder.raw_decode`` consumes from the front. A text that ends
    exactly at the end of the buffer is only accepted once more input (or end
    of input) shows it is complete, so numbers split across chunks decode
    correctly.

    Args:
        stream (TextIO): Text source.
        name (str): Source name for diagnostics.
        chunk_size (int): Maximum characters per read.
    """

    def __init__(self, stream: TextIO, name: str, *, chunk_size: int = CHUNK_SIZE) -> None:
        super().__init__()
        self.stream: TextIO = stream
        self.current_name = name
        self.chunk_size: int = chunk_size
        self.decoder: json.JSONDecoder = JSON_DECODER

    def records(self) -> Iterator[InputRecord]:
        try:
            yield from self._decode()
        except (OSError, UnicodeError) as exc:
            yield InputReadError(self.current_name, exc)

    def _decode(self) -> Iterator[InputRecord]:
        buffer: str = ""
        eof: bool = False
        # Line number (within the source) of the first line of ``buffer``.
        first_line: int = 1
        while True:
            stripped: str = buffer.lstrip(_WHITESPACE)
            first_line += buffer.count("\n", 0, len(buffer) - len(stripped))
            buffer = stripped
            if not buffer:
                if eof:
                    return
                buffer = self.stream.readline(self.chunk_size)
                eof = not buffer
                continue
            try:
                value, end = self.decoder.raw_decode(buffer)
            except RecursionError as exc:
                logger.debug("JSON text in %s nests too deeply", self.current_name)
                yield JsonParseError(self.current_name, buffer, exc)
                return
            except ValueError as exc:
                if not eof:
                    # Reads grow with the buffer so one large text decodes in few passes.
                    chunk: str = self.stream.read(max(self.chunk_size, len(buffer)))
                    buffer += chunk
                    eof = not chunk
                    continue
                logger.debug("JSON decode error in %s: %s", self.current_name, exc)
                yield JsonParseError(
                    self.current_name,
                    buffer,
                    exc,
                    line=getattr(exc, "lineno", None),
                    column=getattr(exc, "colno", None),
                    offset_line=first_line,
                )
                return
            if end == len(buffer) and not eof:
                chunk = self.stream.readline(self.chunk_size)
                if chunk:
                    buffer += chunk
                    continue
                eof = True
            first_line += buffer.count("\n", 0, end)
            buffer = buffer[end:]
            yield value


class StringKeyConstructor(SafeConstructor):
    """Safe constructor that turns mapping keys into strings before storing them.

    Keys are coerced while the mapping is built, so keys that only compare
    equal as Python objects (``1`` and ``true``, ``0`` and ``false``) stay
    distinct. A key that repeats after coercion (``1`` and ``1.0``) keeps its
    last value, as in JSON objects.
    """

    def construct_mapping(self, node: Any, deep: bool = False) -> dict[str, Any]:
        if not isinstance(node, MappingNode):
            raise ConstructorError(
                None, None, f"expected a mapping node, but found {node.id!s}", node.start_mark
            )
        # Merged (``<<``) pairs are moved to the front, so the node's own keys win.
        self.flatten_mapping(node)
        mapping: dict[str, Any] = {}
        for key_node, value_node in node.value:
            key: str = format_key(normalize_yaml(self.construct_object(key_node, deep=True)))
            mapping[key] = self.construct_object(value_node, deep=deep)
        return mapping


class _TeeReader:
    """Read-through proxy that keeps the text handed to the YAML reader."""

    def __init__(self, stream: TextIO, name: str) -> None:
        self.stream: TextIO = stream
        self.name: str = name
        self._parts: list[str] = []

    def read(self, size: int = -1) -> str:
        # At most one line per call, so a document is handed over once its lines arrive.
        chunk: str = self.stream.readline(size)
        self._parts.append(chunk)
        return chunk

    @property
    def text(self) -> str:
        return "".join(self._parts)


class YamlIterator(InputIterator):
    """Decode the YAML documents of a stream with ``ruamel.yaml``'s safe loader.

    Documents are loaded one at a time as the stream is read, so the first
    document is available before the source ends. Mapping keys are coerced to
    strings by [`StringKeyConstructor`][jqline.inputs.decoders.StringKeyConstructor]
    and non-JSON scalars become text (see
    [`normalize_yaml`][jqline.core.values.normalize_yaml]).
    """

    def __init__(self, stream: TextIO, name: str) -> None:
        super().__init__()
        self.stream: TextIO = stream
        self.current_name = name

    def records(self) -> Iterator[InputRecord]:
        source = _TeeReader(self.stream, self.current_name)
        yaml = YAML(typ="safe", pure=True)
        yaml.Constructor = StringKeyConstructor
        documents: Iterator[Any] = yaml.load_all(source)
        while True:
            try:
                document = next(documents)
            except StopIteration:
                return
            except (OSError, UnicodeError) as exc:
                yield InputReadError(self.current_name, exc)
                return
            except RecursionError as exc:
                logger.debug("YAML document in %s nests too deeply", self.current_name)
                yield YamlParseError(self.current_name, source.text, exc)
                return
            except YAMLError as exc:
                logger.debug("YAML decode error in %s: %s", self.current_name, exc)
                mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
                yield YamlParseError(
                    self.current_name,
                    source.text,
                    exc,
                    line=mark.line + 1 if mark is not None else None,
                    column=mark.column + 1 if mark is not None else None,
                )
                return
            yield normalize_yaml(document)


class RawLineIterator(InputIterator):
    """Yield each line of a stream as a string, without its line terminator.

    Never produces a decode error; a failing read is yielded once as an
    [`InputReadError`][jqline.core.errors.InputReadError].
    """

    def __init__(self, stream: TextIO, name: str) -> None:
        super().__init__()
        self.stream: TextIO = stream
        self.current_name = name

    def records(self) -> Iterator[InputRecord]:
        try:
            for line in self.stream:
                if line.endswith("\n"):
                    line = line[:-1]
                    if line.endswith("\r"):
                        line = line[:-1]
                yield line
        except (OSError, UnicodeError) as exc:
            yield InputReadError(self.current_name, exc)


class NullIterator(InputIterator):
    """Yield ``null`` once."""

    current_name = NULL_INPUT_NAME

    def records(self) -> Iterator[InputRecord]:
        yield None


class StreamIterator(InputIterator):
    """Replace every value of ``inner`` by its stream events; errors pass through."""

    def __init__(self, inner: InputIterator) -> None:
        super().__init__()
        self.inner: InputIterator = inner

    @property  # type: ignore[override]
    def current_name(self) -> str:
        return self.inner.current_name

    def records(self) -> Iterator[InputRecord]:
        for item in self.inner:
            if isinstance(item, Exception):
                yield item
            else:
                yield from stream_events(item)

    def close(self) -> None:
        super().close()
        self.inner.close()
