# jqline:header:start
#
#   project      : jqline
#   file         : parser.py
#   file_relpath : src/jqline/evaluator/parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Recursive-descent parser producing the query syntax tree.

Operator precedence, loosest first:

    def ... ;  /  term as $x | body
    |
    ,
    //                 (right associative)
    or
    and
    == != < <= > >=    (non associative)
    + -
    * / %
    unary -
    postfix: .foo  ."foo"  [e]  [a:b]  []  ?

Nodes are frozen dataclasses; the compiler walks them once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from jqline.evaluator.errors import QuerySyntaxError
from jqline.evaluator.lexer import Interpolation, Token, TokenKind, tokenize

if TYPE_CHECKING:
    from jqline.core.values import Value

# Words that may not be used as function names.
_KEYWORDS: frozenset[str] = frozenset(
    {
        "as",
        "and",
        "or",
        "if",
        "then",
        "elif",
        "else",
        "end",
        "try",
        "catch",
        "reduce",
        "foreach",
        "def",
        "include",
        "import",
        "label",
        "__loc__",
    }
)

_COMPARISON_OPS: tuple[str, ...] = ("==", "!=", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class Identity:
    """``.``"""


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class StringInterp:
    """A string literal with ``\\(...)`` parts."""

    parts: tuple[Union[str, Node], ...]


@dataclass(frozen=True)
class Index:
    """``target[key]``, ``target.key``."""

    target: Node
    key: Node


@dataclass(frozen=True)
class Slice:
    target: Node
    start: Node | None
    end: Node | None


@dataclass(frozen=True)
class Iterate:
    """``target[]``"""

    target: Node


@dataclass(frozen=True)
class ArrayCons:
    body: Node | None


@dataclass(frozen=True)
class ObjectCons:
    entries: tuple[tuple[Node, Node], ...]


@dataclass(frozen=True)
class Var:
    name: str
    offset: int = 0


@dataclass(frozen=True)
class Pipe:
    left: Node
    right: Node


@dataclass(frozen=True)
class Comma:
    left: Node
    right: Node


@dataclass(frozen=True)
class Alt:
    """``left // right``"""

    left: Node
    right: Node


@dataclass(frozen=True)
class BinOp:
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class And:
    left: Node
    right: Node


@dataclass(frozen=True)
class Or:
    left: Node
    right: Node


@dataclass(frozen=True)
class Neg:
    operand: Node


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple[Node, ...] = ()
    offset: int = 0


@dataclass(frozen=True)
class If:
    cond: Node
    then: Node
    otherwise: Node | None


@dataclass(frozen=True)
class Try:
    """``try body catch handler``; ``body?`` has no handler."""

    body: Node
    handler: Node | None


@dataclass(frozen=True)
class Reduce:
    source: Node
    name: str
    init: Node
    update: Node


@dataclass(frozen=True)
class Foreach:
    source: Node
    name: str
    init: Node
    update: Node
    extract: Node | None


@dataclass(frozen=True)
class Bind:
    """``source as $name | body``"""

    source: Node
    name: str
    body: Node


@dataclass(frozen=True)
class FuncDef:
    """``def name(params): body; rest``

    Attributes:
        params (tuple[str, ...]): Parameter names; ``$x`` parameters keep their ``$``.
    """

    name: str
    params: tuple[str, ...]
    body: Node
    rest: Node


Node = Union[
    Identity,
    Literal,
    StringInterp,
    Index,
    Slice,
    Iterate,
    ArrayCons,
    ObjectCons,
    Var,
    Pipe,
    Comma,
    Alt,
    BinOp,
    And,
    Or,
    Neg,
    Call,
    If,
    Try,
    Reduce,
    Foreach,
    Bind,
    FuncDef,
]


@dataclass(frozen=True)
class Include:
    path: str
    offset: int


@dataclass(frozen=True)
class Query:
    """A parsed query or module.

    Attributes:
        includes (tuple[Include, ...]): ``include "path";`` directives, in order.
        body (Node): The query body (``Identity`` for a module of definitions only).
    """

    includes: tuple[Include, ...]
    body: Node

    def definitions(self) -> list[FuncDef]:
        """Return the leading function definitions of the body."""
        defs: list[FuncDef] = []
        node: Node = self.body
        while isinstance(node, FuncDef):
            defs.append(node)
            node = node.rest
        return defs


def parse_query(text: str) -> Query:
    """Parse query (or module) text.

    Raises:
        QuerySyntaxError: With the offset of the offending token.
    """
    return _Parser(tokenize(text)).parse_program()


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # Token helpers

    @property
    def tok(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, ahead: int = 1) -> Token:
        return self.tokens[min(self.pos + ahead, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def unexpected(self, token: Token | None = None) -> QuerySyntaxError:
        token = token or self.tok
        if token.kind == TokenKind.EOF:
            return QuerySyntaxError("unexpected EOF", token.offset)
        return QuerySyntaxError(f'unexpected token "{token.text}"', token.offset)

    def expect_op(self, op: str) -> Token:
        if not self.tok.is_op(op):
            raise self.unexpected()
        return self.advance()

    def expect_keyword(self, word: str) -> Token:
        if not self.tok.is_keyword(word):
            raise self.unexpected()
        return self.advance()

    def expect_variable(self) -> str:
        if self.tok.kind != TokenKind.VARIABLE:
            raise self.unexpected()
        return self.advance().text

    # Grammar

    def parse_program(self) -> Query:
        includes: list[Include] = []
        while self.tok.is_keyword("include"):
            start = self.advance()
            if self.tok.kind != TokenKind.STRING or any(
                isinstance(p, Interpolation) for p in self.tok.parts
            ):
                raise self.unexpected()
            path = "".join(p for p in self.advance().parts if isinstance(p, str))
            self.expect_op(";")
            includes.append(Include(path, start.offset))
        body: Node = Identity() if self.tok.kind == TokenKind.EOF else self.parse_pipe()
        if self.tok.kind != TokenKind.EOF:
            raise self.unexpected()
        return Query(tuple(includes), body)

    def parse_pipe(self) -> Node:
        if self.tok.is_keyword("def"):
            name, params, body = self.parse_def()
            rest: Node = Identity() if self.tok.kind == TokenKind.EOF else self.parse_pipe()
            return FuncDef(name, params, body, rest)
        left = self.parse_comma()
        if self.tok.is_op("|"):
            self.advance()
            return Pipe(left, self.parse_pipe())
        return left

    def parse_def(self) -> tuple[str, tuple[str, ...], Node]:
        self.expect_keyword("def")
        token = self.tok
        if token.kind != TokenKind.IDENT or token.text in _KEYWORDS:
            raise self.unexpected()
        self.advance()
        params: list[str] = []
        if self.tok.is_op("("):
            self.advance()
            while True:
                if self.tok.kind == TokenKind.VARIABLE:
                    params.append("$" + self.advance().text)
                elif self.tok.kind == TokenKind.IDENT and self.tok.text not in _KEYWORDS:
                    params.append(self.advance().text)
                else:
                    raise self.unexpected()
                if self.tok.is_op(")"):
                    self.advance()
                    break
                self.expect_op(";")
        self.expect_op(":")
        body = self.parse_pipe()
        self.expect_op(";")
        return token.text, tuple(params), body

    def parse_comma(self) -> Node:
        left = self.parse_alt()
        while self.tok.is_op(","):
            self.advance()
            left = Comma(left, self.parse_alt())
        return left

    def parse_alt(self) -> Node:
        left = self.parse_or()
        if self.tok.is_op("//"):
            self.advance()
            return Alt(left, self.parse_alt())
        return left

    def parse_or(self) -> Node:
        left = self.parse_and()
        while self.tok.is_keyword("or"):
            self.advance()
            left = Or(left, self.parse_and())
        return left

    def parse_and(self) -> Node:
        left = self.parse_comparison()
        while self.tok.is_keyword("and"):
            self.advance()
            left = And(left, self.parse_comparison())
        return left

    def parse_comparison(self) -> Node:
        left = self.parse_additive()
        if self.tok.is_op(*_COMPARISON_OPS):
            op = self.advance().text
            left = BinOp(op, left, self.parse_additive())
            if self.tok.is_op(*_COMPARISON_OPS):
                raise self.unexpected()
        return left

    def parse_additive(self) -> Node:
        left = self.parse_multiplicative()
        while self.tok.is_op("+", "-"):
            op = self.advance().text
            left = BinOp(op, left, self.parse_multiplicative())
        return left

    def parse_multiplicative(self) -> Node:
        left = self.parse_unary()
        while self.tok.is_op("*", "/", "%"):
            op = self.advance().text
            left = BinOp(op, left, self.parse_unary())
        return left

    def parse_unary(self) -> Node:
        if self.tok.is_op("-"):
            self.advance()
            return Neg(self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self, allow_bind: bool = True) -> Node:
        term = self.parse_primary()
        while True:
            token = self.tok
            if token.kind == TokenKind.FIELD:
                self.advance()
                term = Index(term, Literal(token.text))
            elif token.is_op(".") and self.peek().kind == TokenKind.STRING:
                self.advance()
                term = Index(term, self.parse_string(self.advance()))
            elif token.is_op(".") and self.peek().is_op("["):
                self.advance()
                term = self.parse_bracket_suffix(term)
            elif token.is_op("["):
                term = self.parse_bracket_suffix(term)
            elif token.is_op("?"):
                self.advance()
                term = Try(term, None)
            elif token.is_keyword("as") and allow_bind:
                self.advance()
                name = self.expect_variable()
                self.expect_op("|")
                return Bind(term, name, self.parse_pipe())
            else:
                return term

    def parse_bracket_suffix(self, target: Node) -> Node:
        self.expect_op("[")
        if self.tok.is_op("]"):
            self.advance()
            return Iterate(target)
        if self.tok.is_op(":"):
            self.advance()
            end = self.parse_pipe()
            self.expect_op("]")
            return Slice(target, None, end)
        key = self.parse_pipe()
        if self.tok.is_op(":"):
            self.advance()
            end_node: Node | None = None if self.tok.is_op("]") else self.parse_pipe()
            self.expect_op("]")
            return Slice(target, key, end_node)
        self.expect_op("]")
        return Index(target, key)

    def parse_primary(self) -> Node:
        token = self.tok
        if token.kind == TokenKind.NUMBER:
            self.advance()
            return Literal(_number(token.text))
        if token.kind == TokenKind.STRING:
            self.advance()
            return self.parse_string(token)
        if token.kind == TokenKind.FIELD:
            self.advance()
            return Index(Identity(), Literal(token.text))
        if token.kind == TokenKind.VARIABLE:
            self.advance()
            return Var(token.text, token.offset)
        if token.kind == TokenKind.IDENT:
            return self.parse_word()
        if token.is_op("."):
            self.advance()
            if self.tok.kind == TokenKind.STRING:
                return Index(Identity(), self.parse_string(self.advance()))
            return Identity()
        if token.is_op(".."):
            self.advance()
            return Call("recurse", (), token.offset)
        if token.is_op("("):
            self.advance()
            inner = self.parse_pipe()
            self.expect_op(")")
            return inner
        if token.is_op("["):
            self.advance()
            if self.tok.is_op("]"):
                self.advance()
                return ArrayCons(None)
            body = self.parse_pipe()
            self.expect_op("]")
            return ArrayCons(body)
        if token.is_op("{"):
            return self.parse_object()
        raise self.unexpected()

    def parse_word(self) -> Node:
        token = self.tok
        word = token.text
        if word == "null":
            self.advance()
            return Literal(None)
        if word in ("true", "false"):
            self.advance()
            return Literal(word == "true")
        if word == "if":
            return self.parse_if()
        if word == "try":
            self.advance()
            body = self.parse_postfix(allow_bind=False)
            handler: Node | None = None
            if self.tok.is_keyword("catch"):
                self.advance()
                handler = self.parse_postfix(allow_bind=False)
            return Try(body, handler)
        if word in ("reduce", "foreach"):
            return self.parse_fold(word)
        if word in _KEYWORDS:
            raise self.unexpected()
        self.advance()
        args: list[Node] = []
        if self.tok.is_op("("):
            self.advance()
            args.append(self.parse_pipe())
            while self.tok.is_op(";"):
                self.advance()
                args.append(self.parse_pipe())
            self.expect_op(")")
        return Call(word, tuple(args), token.offset)

    def parse_if(self) -> Node:
        self.advance()
        cond = self.parse_pipe()
        self.expect_keyword("then")
        then = self.parse_pipe()
        if self.tok.is_keyword("elif"):
            return If(cond, then, self.parse_if())
        otherwise: Node | None = None
        if self.tok.is_keyword("else"):
            self.advance()
            otherwise = self.parse_pipe()
        self.expect_keyword("end")
        return If(cond, then, otherwise)

    def parse_fold(self, word: str) -> Node:
        self.advance()
        source = self.parse_postfix(allow_bind=False)
        self.expect_keyword("as")
        name = self.expect_variable()
        self.expect_op("(")
        init = self.parse_pipe()
        self.expect_op(";")
        update = self.parse_pipe()
        if word == "reduce":
            self.expect_op(")")
            return Reduce(source, name, init, update)
        extract: Node | None = None
        if self.tok.is_op(";"):
            self.advance()
            extract = self.parse_pipe()
        self.expect_op(")")
        return Foreach(source, name, init, update, extract)

    def parse_object(self) -> Node:
        self.expect_op("{")
        entries: list[tuple[Node, Node]] = []
        while not self.tok.is_op("}"):
            token = self.tok
            key: Node
            value: Node | None = None
            if token.kind == TokenKind.VARIABLE:
                self.advance()
                key, value = Literal(token.text), Var(token.text, token.offset)
            elif token.kind == TokenKind.IDENT:
                self.advance()
                key = Literal(token.text)
            elif token.kind == TokenKind.STRING:
                self.advance()
                key = self.parse_string(token)
            elif token.kind == TokenKind.NUMBER:
                self.advance()
                key = Literal(token.text)
            elif token.is_op("("):
                self.advance()
                key = self.parse_pipe()
                self.expect_op(")")
                if not self.tok.is_op(":"):
                    raise self.unexpected()
            else:
                raise self.unexpected()
            if value is None:
                if self.tok.is_op(":"):
                    self.advance()
                    value = self.parse_object_value()
                else:
                    value = Index(Identity(), key)
            entries.append((key, value))
            if self.tok.is_op(","):
                self.advance()
            elif not self.tok.is_op("}"):
                raise self.unexpected()
        self.advance()
        return ObjectCons(tuple(entries))

    def parse_object_value(self) -> Node:
        value = self.parse_alt()
        while self.tok.is_op("|"):
            self.advance()
            value = Pipe(value, self.parse_alt())
        return value

    def parse_string(self, token: Token) -> Node:
        if all(isinstance(p, str) for p in token.parts):
            return Literal("".join(p for p in token.parts if isinstance(p, str)))
        parts: list[Union[str, Node]] = []
        for part in token.parts:
            if isinstance(part, Interpolation):
                sub = _Parser(tokenize(part.source, part.offset))
                node = sub.parse_pipe()
                if sub.tok.kind != TokenKind.EOF:
                    raise sub.unexpected()
                parts.append(node)
            else:
                parts.append(part)
        return StringInterp(tuple(parts))


def _number(text: str) -> int | float:
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)
