# jqline:header:start
#
#   project      : jqline
#   file         : bindings.py
#   file_relpath : src/jqline/pipeline/bindings.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Named argument bindings (``--arg`` and friends).

[`BindingsBuilder`][jqline.pipeline.bindings.BindingsBuilder] collects the
binding flags before the query is compiled and produces an immutable tuple of
[`ArgBinding`][jqline.pipeline.bindings.ArgBinding]. A later binding with an
already used name replaces the earlier value but keeps the earlier position.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from jqline.config.logging import get_logger
from jqline.core.errors import InputError, InputOpenError, JsonParseError, VariableNameError
from jqline.core.values import JSON_DECODER
from jqline.inputs.decoders import JsonIterator
from jqline.inputs.decorators import open_source

if TYPE_CHECKING:
    from jqline.config.logging import JqlineLogger
    from jqline.core.values import Value

logger: JqlineLogger = get_logger(__name__)

ARGS_VARIABLE: Final[str] = "ARGS"
"""Variable holding ``{"positional": [...], "named": {...}}``."""

_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass(frozen=True, slots=True)
class ArgBinding:
    """One named value made available to the query as ``$name``.

    Attributes:
        name (str): Variable name without the ``$``.
        value (Value): Bound value.
    """

    name: str
    value: Value


class BindingsBuilder:
    """Collect argument bindings in flag order.

    Each ``add_*`` method validates the name first, so an invalid name is
    reported even when the value (or file) is bad too.

    Raises:
        VariableNameError: From every ``add_*`` method, for names that are not identifiers.
        JsonParseError: For malformed JSON text or files.
        InputOpenError: For files that cannot be opened.
    """

    def __init__(self) -> None:
        self._values: dict[str, Value] = {}

    def _bind(self, name: str, value: Value) -> None:
        self._values[name] = value
        logger.trace("Bound $%s", name)

    def add_arg(self, name: str, text: str) -> BindingsBuilder:
        """``--arg name text``: bind a string."""
        _check_name(name)
        self._bind(name, text)
        return self

    def add_argjson(self, name: str, text: str) -> BindingsBuilder:
        """``--argjson name text``: bind a JSON literal."""
        _check_name(name)
        try:
            value = JSON_DECODER.decode(text)
        except (ValueError, RecursionError) as exc:
            raise JsonParseError(
                "$" + name,
                text,
                exc,
                line=getattr(exc, "lineno", None),
                column=getattr(exc, "colno", None),
            ) from exc
        self._bind(name, value)
        return self

    def add_slurpfile(self, name: str, path: str) -> BindingsBuilder:
        """``--slurpfile name path``: bind an array of all JSON values in a file."""
        _check_name(name)
        self._bind(name, _read_json_values(path))
        return self

    def add_argfile(self, name: str, path: str) -> BindingsBuilder:
        """``--argfile name path``: bind the first JSON value of a file (``null`` if none)."""
        _check_name(name)
        values = _read_json_values(path)
        self._bind(name, values[0] if values else None)
        return self

    def add_rawfile(self, name: str, path: str) -> BindingsBuilder:
        """``--rawfile name path``: bind the text of a file."""
        _check_name(name)
        try:
            with open_source(path) as handle:
                text = handle.read()
        except OSError as exc:
            raise InputOpenError(path, exc) from exc
        self._bind(name, text)
        return self

    def build(self) -> tuple[ArgBinding, ...]:
        """Return the bindings in first-seen order."""
        return tuple(ArgBinding(name, value) for name, value in self._values.items())

    def args_object(self, positional: tuple[Value, ...] = ()) -> dict[str, Value]:
        """Return the value of ``$ARGS``."""
        return {"positional": list(positional), "named": dict(self._values)}


def _check_name(name: str) -> None:
    if not _NAME_RE.match(name):
        raise VariableNameError(name)


def _read_json_values(path: str) -> list[Value]:
    try:
        handle = open_source(path)
    except OSError as exc:
        raise InputOpenError(path, exc) from exc
    values: list[Value] = []
    with handle, JsonIterator(handle, path) as records:
        for item in records:
            if isinstance(item, InputError):
                raise item
            values.append(item)
    return values
