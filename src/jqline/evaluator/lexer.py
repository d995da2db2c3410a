# jqline:header:start
#
#   project      : jqline
#   file         : lexer.py
#   file_relpath : src/jqline/evaluator/lexer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Tokenizer for the query language.

String literals are scanned by hand because they may contain interpolations
(``"\\(.name)"``) that nest arbitrary expressions; everything else is matched
with one regular expression.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from jqline.evaluator.errors import QuerySyntaxError


class TokenKind(str, Enum):
    """Token categories."""

    NUMBER = "number"
    STRING = "string"
    FIELD = "field"
    VARIABLE = "variable"
    IDENT = "ident"
    OP = "op"
    EOF = "eof"


@dataclass(frozen=True)
class Interpolation:
    """An interpolated expression inside a string literal.

    Attributes:
        source (str): The expression text between ``\\(`` and ``)``.
        offset (int): Offset of ``source`` within the whole query.
    """

    source: str
    offset: int


@dataclass(frozen=True)
class Token:
    """A lexical token.

    Attributes:
        kind (TokenKind): Token category.
        text (str): Source text (field and variable tokens without their sigil).
        offset (int): Character offset within the query.
        parts (tuple[str | Interpolation, ...]): Decoded pieces of a string literal.
    """

    kind: TokenKind
    text: str
    offset: int
    parts: tuple[str | Interpolation, ...] = ()

    def is_op(self, *ops: str) -> bool:
        """Return True if this is one of the given operator tokens."""
        return self.kind == TokenKind.OP and self.text in ops

    def is_keyword(self, *words: str) -> bool:
        """Return True if this is one of the given identifiers."""
        return self.kind == TokenKind.IDENT and self.text in words


_TOKEN_RE: Final[re.Pattern[str]] = re.compile(
    r"""
    (?P<skip>\s+|\#[^\n]*)
    |(?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<field>\.[A-Za-z_][A-Za-z0-9_]*)
    |(?P<variable>\$[A-Za-z_][A-Za-z0-9_]*)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<op>\.\.|//|==|!=|<=|>=|[.\[\]{}()|,:;<>+\-*/%?])
    """,
    re.VERBOSE,
)

_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def tokenize(source: str, base: int = 0) -> list[Token]:
    """Split ``source`` into tokens, ending with an EOF token.

    Args:
        source (str): Query text.
        base (int): Offset of ``source`` within the enclosing query (for interpolations).

    Raises:
        QuerySyntaxError: On characters that start no token or unterminated strings.
    """
    tokens: list[Token] = []
    pos: int = 0
    while pos < len(source):
        if source[pos] == '"':
            parts, end = _scan_string(source, pos, base)
            tokens.append(Token(TokenKind.STRING, source[pos:end], base + pos, tuple(parts)))
            pos = end
            continue
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise QuerySyntaxError(f"unexpected character {source[pos]!r}", base + pos)
        kind = match.lastgroup
        text = match.group()
        if kind == "field":
            tokens.append(Token(TokenKind.FIELD, text[1:], base + pos))
        elif kind == "variable":
            tokens.append(Token(TokenKind.VARIABLE, text[1:], base + pos))
        elif kind == "number":
            tokens.append(Token(TokenKind.NUMBER, text, base + pos))
        elif kind == "ident":
            tokens.append(Token(TokenKind.IDENT, text, base + pos))
        elif kind == "op":
            tokens.append(Token(TokenKind.OP, text, base + pos))
        pos = match.end()
    tokens.append(Token(TokenKind.EOF, "", base + pos))
    return tokens


def _scan_string(source: str, start: int, base: int) -> tuple[list[str | Interpolation], int]:
    """Scan the string literal starting at ``source[start] == '"'``.

    Returns:
        tuple[list[str | Interpolation], int]: Decoded parts and the offset after the
            closing quote.
    """
    parts: list[str | Interpolation] = []
    chunk: list[str] = []
    pos: int = start + 1
    while pos < len(source):
        ch = source[pos]
        if ch == '"':
            if chunk or not parts:
                parts.append("".join(chunk))
            return parts, pos + 1
        if ch != "\\":
            chunk.append(ch)
            pos += 1
            continue
        if pos + 1 >= len(source):
            break
        esc = source[pos + 1]
        if esc in _SIMPLE_ESCAPES:
            chunk.append(_SIMPLE_ESCAPES[esc])
            pos += 2
        elif esc == "u":
            code, pos = _scan_unicode_escape(source, pos, base)
            chunk.append(code)
        elif esc == "(":
            end = _find_interpolation_end(source, pos + 2, base)
            if chunk:
                parts.append("".join(chunk))
                chunk = []
            parts.append(Interpolation(source[pos + 2 : end], base + pos + 2))
            pos = end + 1
        else:
            raise QuerySyntaxError(f"invalid escape \\{esc}", base + pos)
    raise QuerySyntaxError("unterminated string literal", base + start)


def _scan_unicode_escape(source: str, pos: int, base: int) -> tuple[str, int]:
    digits = source[pos + 2 : pos + 6]
    if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
        raise QuerySyntaxError("invalid \\u escape", base + pos)
    code = int(digits, 16)
    pos += 6
    if 0xD800 <= code < 0xDC00 and source[pos : pos + 2] == "\\u":
        low_digits = source[pos + 2 : pos + 6]
        if len(low_digits) == 4 and all(c in "0123456789abcdefABCDEF" for c in low_digits):
            low = int(low_digits, 16)
            if 0xDC00 <= low < 0xE000:
                return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)), pos + 6
    return chr(code), pos


def _find_interpolation_end(source: str, pos: int, base: int) -> int:
    """Return the offset of the ``)`` closing an interpolation that starts at ``pos``."""
    depth: int = 1
    while pos < len(source):
        ch = source[pos]
        if ch == '"':
            _, pos = _scan_string(source, pos, base)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    raise QuerySyntaxError("unterminated string interpolation", base + pos)
