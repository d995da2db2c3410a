# jqline:header:start
#
#   project      : jqline
#   file         : conftest.py
#   file_relpath : tests/evaluator/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Helpers for the query language tests.

The helpers compile a query with [`compile_query`][jqline.evaluator.compile_query]
and run it against one value, without involving the CLI or the input chain.
"""

from __future__ import annotations

from typing import Any

from jqline.evaluator import CompileOptions, QueryRuntimeError, compile_query, parse_query


def evaluate(query: str, value: Any = None, **options: Any) -> list[Any]:
    """Return every result of ``query`` on ``value``, errors included.

    Args:
        query (str): Query text.
        value (Any): Input value.
        **options (Any): Fields of `CompileOptions`; ``variables`` may be a mapping
            of names to values.

    Returns:
        list[Any]: Values and `QueryRuntimeError` items in output order.
    """
    bound: dict[str, Any] = dict(options.pop("variables", {}))
    compile_options = CompileOptions(variables=tuple(bound), **options)
    program = compile_query(parse_query(query), compile_options)
    return list(program.run(value, *bound.values()))


def values(query: str, value: Any = None, **options: Any) -> list[Any]:
    """Return the results of ``query``, failing the test on any runtime error."""
    results = evaluate(query, value, **options)
    errors = [r for r in results if isinstance(r, QueryRuntimeError)]
    assert not errors, f"unexpected runtime errors: {[e.message for e in errors]}"
    return results


def messages(results: list[Any]) -> list[Any]:
    """Replace runtime errors by ``("error", message)`` for compact assertions."""
    return [("error", r.message) if isinstance(r, QueryRuntimeError) else r for r in results]
