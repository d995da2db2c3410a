# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/evaluator/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Query evaluator: a compact implementation of the jq filter language.

The pipeline only relies on this contract:

- [`parse_query`][jqline.evaluator.parser.parse_query] turns query text into a
  [`Query`][jqline.evaluator.parser.Query] (raises
  [`QuerySyntaxError`][jqline.evaluator.errors.QuerySyntaxError]).
- [`compile_query`][jqline.evaluator.compiler.compile_query] resolves names and
  returns a [`Program`][jqline.evaluator.compiler.Program] (raises
  [`QueryResolveError`][jqline.evaluator.errors.QueryResolveError]).
- [`Program.run`][jqline.evaluator.compiler.Program.run] evaluates the program for
  one input and yields values and runtime errors.
"""

from __future__ import annotations

from jqline.evaluator.compiler import (
    CompileOptions,
    NativeFunction,
    Program,
    compile_query,
    native_table,
)
from jqline.evaluator.errors import (
    HaltRequest,
    QueryResolveError,
    QueryRuntimeError,
    QuerySyntaxError,
)
from jqline.evaluator.parser import Query, parse_query
from jqline.evaluator.stream import stream_events

__all__ = [
    "CompileOptions",
    "HaltRequest",
    "NativeFunction",
    "Program",
    "Query",
    "QueryResolveError",
    "QueryRuntimeError",
    "QuerySyntaxError",
    "compile_query",
    "native_table",
    "parse_query",
    "stream_events",
]
