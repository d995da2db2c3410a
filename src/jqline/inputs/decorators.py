# jqline:header:start
#
#   project      : jqline
#   file         : decorators.py
#   file_relpath : src/jqline/inputs/decorators.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Iterators that combine or reshape other input sources.

- [`MultiFileIterator`][jqline.inputs.decorators.MultiFileIterator] concatenates the
  records of several files (or standard input).
- [`SlurpIterator`][jqline.inputs.decorators.SlurpIterator] collects all values into
  one array.
- [`SlurpRawIterator`][jqline.inputs.decorators.SlurpRawIterator] concatenates the raw
  text of all sources into one string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from jqline.config.logging import get_logger
from jqline.constants import STDIN_NAME
from jqline.core.errors import InputError, InputOpenError, InputReadError
from jqline.inputs.base import InputIterator

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from typing import TextIO

    from jqline.config.logging import JqlineLogger
    from jqline.core.values import Value
    from jqline.inputs.base import InputRecord

logger: JqlineLogger = get_logger(__name__)

DecoderFactory = Callable[["TextIO", str], InputIterator]
"""Builds the decoder for one opened source: ``factory(stream, name)``."""


def open_source(path: str) -> TextIO:
    """Open an input file as UTF-8 text; undecodable bytes survive as surrogates."""
    return open(path, encoding="utf-8", errors="surrogateescape")


class MultiFileIterator(InputIterator):
    """Run a decoder over each source in turn and concatenate the records.

    Each file is opened right before it is decoded and closed as soon as its
    decoder is exhausted (or when this iterator is closed). A file that cannot
    be opened yields an [`InputOpenError`][jqline.core.errors.InputOpenError] and
    the next file is tried. An empty source list reads ``stdin``.

    Args:
        sources (Sequence[str]): File paths.
        factory (DecoderFactory): Decoder constructor.
        stdin (TextIO): Standard input, used when ``sources`` is empty.
    """

    def __init__(self, sources: Sequence[str], factory: DecoderFactory, stdin: TextIO) -> None:
        super().__init__()
        self.sources: tuple[str, ...] = tuple(sources)
        self.factory: DecoderFactory = factory
        self.stdin: TextIO = stdin
        self.current_name = self.sources[0] if self.sources else STDIN_NAME

    def records(self) -> Iterator[InputRecord]:
        if not self.sources:
            self.current_name = STDIN_NAME
            with self.factory(self.stdin, STDIN_NAME) as decoder:
                yield from decoder
            return
        for path in self.sources:
            self.current_name = path
            try:
                handle = open_source(path)
            except OSError as exc:
                logger.debug("Cannot open %s: %s", path, exc)
                yield InputOpenError(path, exc)
                continue
            logger.trace("Opened %s", path)
            with handle, self.factory(handle, path) as decoder:
                yield from decoder
            logger.trace("Closed %s", path)


class SlurpIterator(InputIterator):
    """Yield one array holding every value of ``inner``.

    If ``inner`` yields an error, that error is yielded instead of the array
    and nothing else is read.
    """

    def __init__(self, inner: InputIterator) -> None:
        super().__init__()
        self.inner: InputIterator = inner

    @property  # type: ignore[override]
    def current_name(self) -> str:
        return self.inner.current_name

    def records(self) -> Iterator[InputRecord]:
        values: list[Value] = []
        for item in self.inner:
            if isinstance(item, InputError):
                yield item
                return
            values.append(item)
        logger.debug("Slurped %d values", len(values))
        yield values

    def close(self) -> None:
        super().close()
        self.inner.close()


class SlurpRawIterator(InputIterator):
    """Yield the concatenated text of all sources as one string (``-R -s``).

    Args:
        sources (Sequence[str]): File paths; empty means ``stdin``.
        stdin (TextIO): Standard input.
    """

    def __init__(self, sources: Sequence[str], stdin: TextIO) -> None:
        super().__init__()
        self.sources: tuple[str, ...] = tuple(sources)
        self.stdin: TextIO = stdin
        self.current_name = self.sources[0] if self.sources else STDIN_NAME

    def records(self) -> Iterator[InputRecord]:
        if not self.sources:
            try:
                yield self.stdin.read()
            except (OSError, UnicodeError) as exc:
                yield InputReadError(STDIN_NAME, exc)
            return
        parts: list[str] = []
        for path in self.sources:
            self.current_name = path
            try:
                handle = open_source(path)
            except OSError as exc:
                yield InputOpenError(path, exc)
                return
            with handle:
                try:
                    parts.append(handle.read())
                except (OSError, UnicodeError) as exc:
                    yield InputReadError(path, exc)
                    return
        yield "".join(parts)
