# jqline:header:start
#
#   project      : jqline
#   file         : compiler.py
#   file_relpath : src/jqline/evaluator/compiler.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Compile a parsed query into a runnable [`Program`][jqline.evaluator.compiler.Program].

Every syntax node becomes a *filter*: a function ``(value, env)`` returning an
iterator of results, where a result is a value or a
[`QueryRuntimeError`][jqline.evaluator.errors.QueryRuntimeError]. Errors are
yielded rather than raised so that the enclosing comma, pipe or iteration
keeps producing results after a failing branch.

Names are resolved at compile time. A call resolves, in order, to a function
defined by the query (or a parameter), a native function supplied by the
host, or a builtin; anything else is a
[`QueryResolveError`][jqline.evaluator.errors.QueryResolveError]. Variables
must be bound by the query or listed in
[`CompileOptions.variables`][jqline.evaluator.compiler.CompileOptions].
"""

from __future__ import annotations

import functools
import itertools
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from jqline.config.logging import get_logger
from jqline.constants import MODULE_SUFFIX, NULL_INPUT_NAME, STDIN_NAME
from jqline.core.values import is_truthy
from jqline.evaluator.builtins import (
    BUILTINS,
    NO_MORE_INPUTS,
    PRELUDE,
    binary_op,
    describe,
    index_value,
    input_failure,
    iter_values,
    iterate_value,
    slice_value,
)
from jqline.evaluator.errors import QueryResolveError, QueryRuntimeError, QuerySyntaxError
from jqline.evaluator.parser import (
    Alt,
    And,
    ArrayCons,
    Bind,
    BinOp,
    Call,
    Comma,
    Foreach,
    FuncDef,
    Identity,
    If,
    Index,
    Iterate,
    Literal,
    Neg,
    ObjectCons,
    Or,
    Pipe,
    Query,
    Reduce,
    Slice,
    StringInterp,
    Try,
    Var,
    parse_query,
)
from jqline.rendering.json_encoder import to_compact_json

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from jqline.config.logging import JqlineLogger
    from jqline.core.values import Value
    from jqline.evaluator.builtins import Result
    from jqline.evaluator.parser import Include, Node

logger: JqlineLogger = get_logger(__name__)

Filter = Callable[["Value", "Env"], "Iterator[Result]"]


@dataclass(frozen=True)
class NativeFunction:
    """A function supplied by the host program.

    The function is called once per combination of argument values and
    returns one value; it signals failure by raising ``QueryRuntimeError``.

    Attributes:
        name (str): Function name.
        arities (tuple[int, ...]): Supported argument counts.
        fn (Callable[[Value, list[Value]], Value]): Implementation.
    """

    name: str
    arities: tuple[int, ...]
    fn: Callable[[Value, list[Value]], Value]


@dataclass(frozen=True)
class CompileOptions:
    """Host-provided compile settings.

    Attributes:
        module_paths (tuple[str, ...]): Directories searched by ``include``.
        environ_loader (Callable[[], Mapping[str, str]]): Source of ``$ENV`` / ``env``.
        variables (tuple[str, ...]): Names (without ``$``) of the values passed to
            [`Program.run`][jqline.evaluator.compiler.Program.run], in order.
        functions (Mapping[tuple[str, int], NativeFunction]): Native functions.
        inputs (Iterator[Any] | None): Source for ``input`` / ``inputs``; may expose
            ``current_name`` for ``input_filename``.
    """

    module_paths: tuple[str, ...] = ()
    environ_loader: Callable[[], Mapping[str, str]] = lambda: os.environ
    variables: tuple[str, ...] = ()
    functions: Mapping[tuple[str, int], NativeFunction] = field(default_factory=dict)
    inputs: Iterator[Any] | None = None


def native_table(*natives: NativeFunction) -> dict[tuple[str, int], NativeFunction]:
    """Index native functions by ``(name, arity)``."""
    return {(n.name, arity): n for n in natives for arity in n.arities}


class Env:
    """Runtime bindings: a persistent linked list of variables and functions.

    Variables are keyed ``"$name"``, functions ``(name, arity)``.
    """

    __slots__ = ("parent", "key", "binding")

    def __init__(self, parent: Env | None, key: object, binding: Any) -> None:
        self.parent: Env | None = parent
        self.key: object = key
        self.binding: Any = binding

    def bind(self, key: object, binding: Any) -> Env:
        return Env(self, key, binding)

    def lookup(self, key: object) -> Any:
        env: Env | None = self
        while env is not None:
            if env.key == key:
                return env.binding
            env = env.parent
        raise KeyError(key)


_ROOT_ENV: Env = Env(None, None, None)


@dataclass(frozen=True)
class _Scope:
    """Compile-time mirror of ``Env``: which names exist, not their values."""

    parent: _Scope | None
    key: object

    def has(self, key: object) -> bool:
        scope: _Scope | None = self
        while scope is not None:
            if scope.key == key:
                return True
            scope = scope.parent
        return False

    def bind(self, key: object) -> _Scope:
        return _Scope(self, key)


class _UserFunction:
    __slots__ = ("params", "body", "env")

    def __init__(self, params: tuple[str, ...], body: Filter) -> None:
        self.params: tuple[str, ...] = params
        self.body: Filter = body
        self.env: Env = _ROOT_ENV


class _Closure:
    """A filter argument bound to the environment of its call site."""

    __slots__ = ("body", "env")

    def __init__(self, body: Filter, env: Env) -> None:
        self.body: Filter = body
        self.env: Env = env


class _Runtime:
    """Host services for builtins (see [`Runtime`][jqline.evaluator.builtins.Runtime])."""

    def __init__(self, options: CompileOptions) -> None:
        self.options: CompileOptions = options
        self._environ: dict[str, Value] | None = None

    def next_input(self) -> Value:
        inputs = self.options.inputs
        if inputs is None:
            raise QueryRuntimeError(NO_MORE_INPUTS)
        try:
            item = next(inputs)
        except StopIteration:
            raise QueryRuntimeError(NO_MORE_INPUTS) from None
        if isinstance(item, Exception):
            raise input_failure(item)
        return item

    def input_name(self) -> str | None:
        name: str | None = getattr(self.options.inputs, "current_name", None)
        if name in (None, STDIN_NAME, NULL_INPUT_NAME):
            return None
        return name

    def environ(self) -> dict[str, Value]:
        if self._environ is None:
            self._environ = dict(self.options.environ_loader())
        return self._environ


class Program:
    """A compiled query.

    Attributes:
        variables (tuple[str, ...]): Names of the values expected by ``run``.
    """

    def __init__(self, body: Filter, variables: tuple[str, ...]) -> None:
        self._body: Filter = body
        self.variables: tuple[str, ...] = variables

    def run(self, value: Value, *args: Value) -> Iterator[Value | QueryRuntimeError]:
        """Evaluate the query against one input value.

        Args:
            value (Value): The input (``.``).
            *args (Value): Values of the declared variables, in order.

        Returns:
            Iterator[Value | QueryRuntimeError]: Results; errors are items, not raised.

        Raises:
            ValueError: If the number of ``args`` does not match the declared variables.
            HaltRequest: While iterating, when the query calls ``halt`` or ``halt_error``.
        """
        if len(args) != len(self.variables):
            raise ValueError(f"expected {len(self.variables)} variable values, got {len(args)}")
        env: Env = _ROOT_ENV
        for name, arg in zip(self.variables, args):
            env = env.bind("$" + name, arg)
        return self._evaluate(value, env)

    def _evaluate(self, value: Value, env: Env) -> Iterator[Value | QueryRuntimeError]:
        try:
            yield from self._body(value, env)
        except RecursionError:
            # Unbounded filter recursion ends this input only.
            logger.debug("Evaluation exceeded the recursion limit")
            yield QueryRuntimeError("stack overflow")


def compile_query(query: Query, options: CompileOptions | None = None) -> Program:
    """Compile a parsed query.

    Args:
        query (Query): Result of [`parse_query`][jqline.evaluator.parser.parse_query].
        options (CompileOptions | None): Host settings; defaults to no variables,
            no natives and no inputs.

    Returns:
        Program: The runnable program.

    Raises:
        QueryResolveError: For undefined functions, variables or modules.
    """
    options = options or CompileOptions()
    compiler = _Compiler(options)
    body: Node = query.body
    for definition in reversed(compiler.load_includes(query.includes, ())):
        body = replace(definition, rest=body)
    for definition in reversed(_prelude().definitions()):
        body = replace(definition, rest=body)
    scope = _Scope(None, None)
    for name in options.variables:
        scope = scope.bind("$" + name)
    program = Program(compiler.compile(body, scope), options.variables)
    logger.debug(
        "Compiled query (%d variables, %d natives)", len(options.variables), len(options.functions)
    )
    return program


@functools.lru_cache(maxsize=1)
def _prelude() -> Query:
    return parse_query(PRELUDE)


def _guard(fn: Filter) -> Filter:
    """Turn a ``QueryRuntimeError`` raised inside ``fn`` into its final result."""

    def guarded(value: Value, env: Env) -> Iterator[Result]:
        try:
            yield from fn(value, env)
        except QueryRuntimeError as err:
            yield err

    return guarded


class _Compiler:
    def __init__(self, options: CompileOptions) -> None:
        self.options: CompileOptions = options
        self.runtime: _Runtime = _Runtime(options)

    # Modules

    def load_includes(
        self, includes: Sequence[Include], loading: tuple[str, ...]
    ) -> list[FuncDef]:
        """Return the definitions of the included modules, transitively, in order."""
        definitions: list[FuncDef] = []
        for include in includes:
            path = self.find_module(include.path)
            if str(path) in loading:
                raise QueryResolveError(f"module cycle: {include.path}")
            logger.debug("Loading module %s from %s", include.path, path)
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
            try:
                module = parse_query(text)
            except QuerySyntaxError as exc:
                raise QueryResolveError(f"invalid module {include.path}: {exc}") from exc
            definitions.extend(self.load_includes(module.includes, (*loading, str(path))))
            definitions.extend(module.definitions())
        return definitions

    def find_module(self, name: str) -> Path:
        filename = name if name.endswith(MODULE_SUFFIX) else name + MODULE_SUFFIX
        for directory in self.options.module_paths:
            candidate = Path(directory).expanduser() / filename
            if candidate.is_file():
                return candidate
        raise QueryResolveError(f'module not found: "{name}"')

    # Nodes

    def compile(self, node: Node, scope: _Scope) -> Filter:
        method: Callable[[Any, _Scope], Filter] = getattr(self, "_compile_" + type(node).__name__)
        return _guard(method(node, scope))

    def _compile_Identity(self, node: Identity, scope: _Scope) -> Filter:
        def run(value: Value, env: Env) -> Iterator[Result]:
            yield value

        return run

    def _compile_Literal(self, node: Literal, scope: _Scope) -> Filter:
        constant = node.value

        def run(value: Value, env: Env) -> Iterator[Result]:
            yield constant

        return run

    def _compile_StringInterp(self, node: StringInterp, scope: _Scope) -> Filter:
        parts: list[str | Filter] = [
            p if isinstance(p, str) else self.compile(p, scope) for p in node.parts
        ]

        def render(value: Value, env: Env, index: int, prefix: str) -> Iterator[Result]:
            if index == len(parts):
                yield prefix
                return
            part = parts[index]
            if isinstance(part, str):
                yield from render(value, env, index + 1, prefix + part)
                return
            for item in iter_values(part(value, env)):
                text = item if isinstance(item, str) else to_compact_json(item)
                yield from render(value, env, index + 1, prefix + text)

        def run(value: Value, env: Env) -> Iterator[Result]:
            return render(value, env, 0, "")

        return run

    def _compile_Index(self, node: Index, scope: _Scope) -> Filter:
        target = self.compile(node.target, scope)
        key = self.compile(node.key, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for container in target(value, env):
                if isinstance(container, QueryRuntimeError):
                    yield container
                    continue
                for k in iter_values(key(value, env)):
                    yield index_value(container, k)

        return run

    def _compile_Slice(self, node: Slice, scope: _Scope) -> Filter:
        target = self.compile(node.target, scope)
        start = self.compile(node.start, scope) if node.start is not None else None
        end = self.compile(node.end, scope) if node.end is not None else None

        def bounds(value: Value, env: Env, bound: Filter | None) -> list[Value]:
            return [None] if bound is None else list(iter_values(bound(value, env)))

        def run(value: Value, env: Env) -> Iterator[Result]:
            for container in target(value, env):
                if isinstance(container, QueryRuntimeError):
                    yield container
                    continue
                for hi in bounds(value, env, end):
                    for lo in bounds(value, env, start):
                        yield slice_value(container, lo, hi)

        return run

    def _compile_Iterate(self, node: Iterate, scope: _Scope) -> Filter:
        target = self.compile(node.target, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for container in target(value, env):
                if isinstance(container, QueryRuntimeError):
                    yield container
                    continue
                yield from iterate_value(container)

        return run

    def _compile_ArrayCons(self, node: ArrayCons, scope: _Scope) -> Filter:
        if node.body is None:

            def empty(value: Value, env: Env) -> Iterator[Result]:
                yield []

            return empty
        body = self.compile(node.body, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            yield list(iter_values(body(value, env)))

        return run

    def _compile_ObjectCons(self, node: ObjectCons, scope: _Scope) -> Filter:
        entries: list[tuple[Filter, Filter]] = [
            (self.compile(k, scope), self.compile(v, scope)) for k, v in node.entries
        ]

        def build(value: Value, env: Env, index: int, acc: dict[str, Value]) -> Iterator[Result]:
            if index == len(entries):
                yield dict(acc)
                return
            key_fn, value_fn = entries[index]
            for key in iter_values(key_fn(value, env)):
                if not isinstance(key, str):
                    raise QueryRuntimeError(
                        f"Object keys must be strings, not {to_compact_json(key)}"
                    )
                for item in iter_values(value_fn(value, env)):
                    yield from build(value, env, index + 1, {**acc, key: item})

        def run(value: Value, env: Env) -> Iterator[Result]:
            return build(value, env, 0, {})

        return run

    def _compile_Var(self, node: Var, scope: _Scope) -> Filter:
        key = "$" + node.name
        if not scope.has(key):
            if node.name == "ENV":
                runtime = self.runtime

                def environ(value: Value, env: Env) -> Iterator[Result]:
                    yield runtime.environ()

                return environ
            raise QueryResolveError(f"variable not defined: ${node.name}")

        def run(value: Value, env: Env) -> Iterator[Result]:
            yield env.lookup(key)

        return run

    def _compile_Pipe(self, node: Pipe, scope: _Scope) -> Filter:
        left = self.compile(node.left, scope)
        right = self.compile(node.right, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for item in left(value, env):
                if isinstance(item, QueryRuntimeError):
                    yield item
                else:
                    yield from right(item, env)

        return run

    def _compile_Comma(self, node: Comma, scope: _Scope) -> Filter:
        left = self.compile(node.left, scope)
        right = self.compile(node.right, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            yield from left(value, env)
            yield from right(value, env)

        return run

    def _compile_Alt(self, node: Alt, scope: _Scope) -> Filter:
        left = self.compile(node.left, scope)
        right = self.compile(node.right, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            found = False
            for item in left(value, env):
                if not isinstance(item, QueryRuntimeError) and is_truthy(item):
                    found = True
                    yield item
            if not found:
                yield from right(value, env)

        return run

    def _compile_BinOp(self, node: BinOp, scope: _Scope) -> Filter:
        op = node.op
        left = self.compile(node.left, scope)
        right = self.compile(node.right, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for r in right(value, env):
                if isinstance(r, QueryRuntimeError):
                    yield r
                    continue
                for lv in left(value, env):
                    if isinstance(lv, QueryRuntimeError):
                        yield lv
                        continue
                    try:
                        yield binary_op(op, lv, r)
                    except QueryRuntimeError as err:
                        yield err

        return run

    def _compile_And(self, node: And, scope: _Scope) -> Filter:
        return self._logical(node.left, node.right, scope, short_circuit=False)

    def _compile_Or(self, node: Or, scope: _Scope) -> Filter:
        return self._logical(node.left, node.right, scope, short_circuit=True)

    def _logical(
        self, left_node: Node, right_node: Node, scope: _Scope, short_circuit: bool
    ) -> Filter:
        left = self.compile(left_node, scope)
        right = self.compile(right_node, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for lv in left(value, env):
                if isinstance(lv, QueryRuntimeError):
                    yield lv
                elif is_truthy(lv) == short_circuit:
                    yield short_circuit
                else:
                    for rv in right(value, env):
                        yield rv if isinstance(rv, QueryRuntimeError) else is_truthy(rv)

        return run

    def _compile_Neg(self, node: Neg, scope: _Scope) -> Filter:
        operand = self.compile(node.operand, scope)

        def run(value: Value, env: Env) -> Iterator[Result]:
            for item in operand(value, env):
                if isinstance(item, QueryRuntimeError):
                    yield item
                    continue
                try:
                    yield binary_op("-", 0, item)
                except QueryRuntimeError:
                    yield QueryRuntimeError(f"{describe(item)} cannot be negated")

        return run

    def _compile_If(self, node: If, scope: _Scope) -> Filter:
        cond = self.compile(node.cond, scope)
        then = self.compile(node.then, scope)
        otherwise = self.compile(node.otherwise, scope) if node.otherwise is not None else None

        def run(value: Value, env: Env) -> Iterator[Result]:
            for c in cond(value, env):
                if isinstance(c, QueryRuntimeError):
                    yield c
                elif is_truthy(c):
                    yield from then(value, env)
                elif otherwise is not None:
                    yield from otherwise(value, env)
                else:
                    yield value

        return run

    def _compile_Try(self, node: Try, scope: _Scope) -> Filter:
        body = self.compile(node.body, scope)
        handler = self.compile(node.handler, scope) if node.handler is not None else None

        def run(value: Value, env: Env) -> Iterator[Result]:
            for item in body(value, env):
                if isinstance(item, QueryRuntimeError):
                    if handler is not None:
                        yield from handler(item.value, env)
                    return
                yield item

        return run

    def _compile_Reduce(self, node: Reduce, scope: _Scope) -> Filter:
        source = self.compile(node.source, scope)
        init = self.compile(node.init, scope)
        key = "$" + node.name
        update = self.compile(node.update, scope.bind(key))

        def run(value: Value, env: Env) -> Iterator[Result]:
            for acc in iter_values(init(value, env)):
                for item in iter_values(source(value, env)):
                    outputs = list(iter_values(update(acc, env.bind(key, item))))
                    acc = outputs[-1] if outputs else None
                yield acc

        return run

    def _compile_Foreach(self, node: Foreach, scope: _Scope) -> Filter:
        source = self.compile(node.source, scope)
        init = self.compile(node.init, scope)
        key = "$" + node.name
        inner = scope.bind(key)
        update = self.compile(node.update, inner)
        extract = self.compile(node.extract, inner) if node.extract is not None else None

        def run(value: Value, env: Env) -> Iterator[Result]:
            for acc in iter_values(init(value, env)):
                for item in iter_values(source(value, env)):
                    bound = env.bind(key, item)
                    for acc in iter_values(update(acc, bound)):
                        if extract is None:
                            yield acc
                        else:
                            yield from extract(acc, bound)

        return run

    def _compile_Bind(self, node: Bind, scope: _Scope) -> Filter:
        source = self.compile(node.source, scope)
        key = "$" + node.name
        body = self.compile(node.body, scope.bind(key))

        def run(value: Value, env: Env) -> Iterator[Result]:
            for item in source(value, env):
                if isinstance(item, QueryRuntimeError):
                    yield item
                else:
                    yield from body(value, env.bind(key, item))

        return run

    def _compile_FuncDef(self, node: FuncDef, scope: _Scope) -> Filter:
        fkey = (node.name, len(node.params))
        inner = scope.bind(fkey)
        body_scope = inner
        for param in node.params:
            if param.startswith("$"):
                body_scope = body_scope.bind(param).bind((param[1:], 0))
            else:
                body_scope = body_scope.bind((param, 0))
        body = self.compile(node.body, body_scope)
        rest = self.compile(node.rest, inner)
        params = node.params

        def run(value: Value, env: Env) -> Iterator[Result]:
            function = _UserFunction(params, body)
            defined = env.bind(fkey, function)
            function.env = defined
            return rest(value, defined)

        return run

    def _compile_Call(self, node: Call, scope: _Scope) -> Filter:
        fkey = (node.name, len(node.args))
        args: tuple[Filter, ...] = tuple(self.compile(a, scope) for a in node.args)
        if scope.has(fkey):
            return self._call_defined(fkey, args)
        native = self.options.functions.get(fkey)
        if native is not None:
            return self._call_native(native, args)
        impl = BUILTINS.get(fkey)
        if impl is not None:
            runtime = self.runtime

            def call_builtin(value: Value, env: Env) -> Iterator[Result]:
                thunks = tuple(functools.partial(_apply, arg, env) for arg in args)
                return impl(value, thunks, runtime)

            return call_builtin
        raise QueryResolveError(f"function not defined: {node.name}/{len(node.args)}")

    def _call_defined(self, fkey: tuple[str, int], args: tuple[Filter, ...]) -> Filter:
        def run(value: Value, env: Env) -> Iterator[Result]:
            target = env.lookup(fkey)
            if isinstance(target, _Closure):
                return target.body(value, target.env)
            return _invoke(target, args, value, env)

        return run

    def _call_native(self, native: NativeFunction, args: tuple[Filter, ...]) -> Filter:
        def run(value: Value, env: Env) -> Iterator[Result]:
            columns = [list(iter_values(arg(value, env))) for arg in args]
            for combo in itertools.product(*columns):
                try:
                    yield native.fn(value, list(combo))
                except QueryRuntimeError as err:
                    yield err

        return run


def _apply(fn: Filter, env: Env, value: Value) -> Iterator[Result]:
    return fn(value, env)


def _invoke(
    function: _UserFunction, args: tuple[Filter, ...], value: Value, env: Env
) -> Iterator[Result]:
    """Call a query-defined function from the environment ``env``."""
    callee: Env = function.env
    value_params: list[tuple[str, Filter]] = []
    for param, arg in zip(function.params, args):
        if param.startswith("$"):
            value_params.append((param, arg))
        else:
            callee = callee.bind((param, 0), _Closure(arg, env))
    if not value_params:
        yield from function.body(value, callee)
        return
    columns = [list(iter_values(arg(value, env))) for _, arg in value_params]
    for combo in itertools.product(*columns):
        bound = callee
        for (param, _), item in zip(value_params, combo):
            bound = bound.bind(param, item).bind((param[1:], 0), _Closure(_constant(item), bound))
        yield from function.body(value, bound)


def _constant(item: Value) -> Filter:
    def run(value: Value, env: Env) -> Iterator[Result]:
        yield item

    return run
