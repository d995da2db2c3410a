# jqline:header:start
#
#   project      : jqline
#   file         : base.py
#   file_relpath : src/jqline/inputs/base.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Common base class of the input iterators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

from jqline.core.errors import InputError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from jqline.core.values import Value

InputRecord = Union["Value", InputError]
"""An item of an input stream: a decoded value, or the error that ended a source."""


class InputIterator(ABC):
    """Iterator of [`InputRecord`][jqline.inputs.base.InputRecord] items.

    Subclasses implement [`records`][jqline.inputs.base.InputIterator.records] as a
    generator; it is created lazily, so nothing is read before the first
    ``next()``. Exhaustion is terminal. ``close()`` releases whatever the
    generator holds open.

    Attributes:
        current_name (str): Source name of the most recently yielded record.
    """

    current_name: str = ""

    def __init__(self) -> None:
        self._records: Iterator[InputRecord] | None = None

    @abstractmethod
    def records(self) -> Iterator[InputRecord]:
        """Generate the records of this iterator."""

    def __iter__(self) -> InputIterator:
        return self

    def __next__(self) -> InputRecord:
        if self._records is None:
            self._records = self.records()
        return next(self._records)

    def close(self) -> None:
        """Stop iterating and release open resources."""
        if self._records is None:
            self._records = iter(())
            return
        close = getattr(self._records, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> InputIterator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
