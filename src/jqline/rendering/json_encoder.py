# jqline:header:start
#
#   project      : jqline
#   file         : json_encoder.py
#   file_relpath : src/jqline/rendering/json_encoder.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""JSON encoder for result values.

The standard library's ``json.dumps`` cannot emit number literals verbatim,
color individual tokens, or indent with tabs, so values are rendered here
directly. Output is UTF-8; only quotes, backslashes and control characters
are escaped.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from jqline.core.errors import MarshalError
from jqline.core.values import format_float
from jqline.rendering.colors import DISABLED, ColorScheme

if TYPE_CHECKING:
    from jqline.core.values import Value

_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r'["\\\x00-\x1f\x7f\ud800-\udfff]')

_ESCAPES: Final[dict[str, str]] = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _escape_char(match: re.Match[str]) -> str:
    ch: str = match.group(0)
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if "\ud800" <= ch <= "\udfff":
        # Lone surrogates come from undecodable input bytes.
        return "\ufffd"
    return f"\\u{ord(ch):04x}"


def quote_string(text: str) -> str:
    """Return ``text`` as a JSON string literal."""
    return '"' + _ESCAPE_RE.sub(_escape_char, text) + '"'


def encode_text(text: str) -> bytes:
    """Encode text for output, restoring undecodable input bytes where possible."""
    try:
        return text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", "replace")


class JsonEncoder:
    """Render values as JSON text.

    Args:
        indent (int): Spaces per level; 0 renders everything on one line.
        tab (bool): Indent with one tab per level (overrides ``indent``).
        colors (ColorScheme): Token colors; the disabled scheme renders plain text.
    """

    def __init__(
        self,
        *,
        indent: int = 2,
        tab: bool = False,
        colors: ColorScheme = DISABLED,
    ) -> None:
        self.indent_unit: str = "\t" if tab else " " * indent
        self.colors: ColorScheme = colors
        self.key_separator: str = ": " if self.indent_unit else ":"

    def encode(self, value: Value) -> str:
        """Return the JSON text of ``value`` (no trailing newline).

        Raises:
            MarshalError: If ``value`` contains something outside the value model.
        """
        parts: list[str] = []
        try:
            self._encode(value, parts, 0)
        except RecursionError as exc:
            raise MarshalError("cannot encode value: nesting too deep") from exc
        return "".join(parts)

    def _newline(self, parts: list[str], level: int) -> None:
        if self.indent_unit:
            parts.append("\n")
            parts.append(self.indent_unit * level)

    def _encode(self, value: Value, parts: list[str], level: int) -> None:
        paint = self.colors.paint
        if value is None:
            parts.append(paint("null", "null"))
        elif value is True:
            parts.append(paint("true", "true"))
        elif value is False:
            parts.append(paint("false", "false"))
        elif isinstance(value, int):
            parts.append(paint("number", str(value)))
        elif isinstance(value, float):
            parts.append(paint("number", format_float(value)))
        elif isinstance(value, str):
            parts.append(paint("string", quote_string(value)))
        elif isinstance(value, list):
            self._encode_array(value, parts, level)
        elif isinstance(value, dict):
            self._encode_object(value, parts, level)
        else:
            raise MarshalError(f"cannot encode value of type {type(value).__name__}")

    def _encode_array(self, value: list[Value], parts: list[str], level: int) -> None:
        paint = self.colors.paint
        if not value:
            parts.append(paint("array", "[]"))
            return
        parts.append(paint("array", "["))
        for i, item in enumerate(value):
            if i:
                parts.append(paint("array", ","))
            self._newline(parts, level + 1)
            self._encode(item, parts, level + 1)
        self._newline(parts, level)
        parts.append(paint("array", "]"))

    def _encode_object(self, value: dict[str, Value], parts: list[str], level: int) -> None:
        paint = self.colors.paint
        if not value:
            parts.append(paint("object", "{}"))
            return
        parts.append(paint("object", "{"))
        for i, (key, item) in enumerate(value.items()):
            if i:
                parts.append(paint("object", ","))
            self._newline(parts, level + 1)
            if not isinstance(key, str):
                raise MarshalError(f"object key must be a string: {key!r}")
            parts.append(paint("object_key", quote_string(key)))
            parts.append(paint("object", self.key_separator))
            self._encode(item, parts, level + 1)
        self._newline(parts, level)
        parts.append(paint("object", "}"))


def to_compact_json(value: Value) -> str:
    """Return the single-line, uncolored JSON text of ``value``."""
    return JsonEncoder(indent=0).encode(value)
