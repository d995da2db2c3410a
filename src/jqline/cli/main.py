# jqline:header:start
#
#   project      : jqline
#   file         : main.py
#   file_relpath : src/jqline/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""The ``jqline`` command.

Key ideas:
- Flags are resolved once into frozen [`RunOptions`][jqline.config.model.RunOptions];
  every startup check (indentation, colors, bindings, query) happens before
  any input is read.
- The query is parsed and compiled with the argument bindings, the native
  filters and a handle on the input chain (for ``input`` / ``inputs``).
- [`Runner`][jqline.pipeline.runner.Runner] does the work; this module only
  maps its outcome (or a startup error) to an exit code.
"""

from __future__ import annotations

from contextlib import closing
from pathlib import Path
from typing import TYPE_CHECKING

import click

from jqline.cli.console import ClickConsole
from jqline.cli.errors import JqlineCliError
from jqline.config.logging import get_logger, resolve_env_log_level, setup_logging
from jqline.config.model import InputFormat, MutableRunOptions, OutputFormat, Terminator
from jqline.constants import ARG_QUERY_NAME, DEFAULT_MODULE_DIR, JQLINE_VERSION, PROG_NAME
from jqline.core.errors import (
    InputOpenError,
    JqlineError,
    QueryCompileError,
    QueryParseError,
)
from jqline.evaluator import (
    CompileOptions,
    QueryResolveError,
    QuerySyntaxError,
    compile_query,
    parse_query,
)
from jqline.inputs import NullIterator, build_input_iterator
from jqline.pipeline.bindings import ARGS_VARIABLE, BindingsBuilder
from jqline.pipeline.natives import build_natives
from jqline.pipeline.runner import Runner
from jqline.rendering.colors import ColorMode, resolve_color_enabled, resolve_color_scheme
from jqline.rendering.marshalers import build_marshaler

if TYPE_CHECKING:
    from jqline.config.logging import JqlineLogger
    from jqline.config.model import RunOptions
    from jqline.core.values import Value
    from jqline.evaluator import Program
    from jqline.pipeline.runner import RunOutcome

logger: JqlineLogger = get_logger(__name__)

Pair = tuple[str, str]


def init_common_state(ctx: click.Context, *, color_mode: ColorMode) -> ClickConsole:
    """Initialize logging and the console, and store them on the Click context.

    Args:
        ctx (click.Context): Current Click context; ``obj`` is set.
        color_mode (ColorMode): Mode from ``-C`` / ``-M``, also applied to diagnostics.

    Returns:
        ClickConsole: The program-output console.
    """
    ctx.obj = ctx.obj or {}

    # Configure internal logging via env:
    level_env = resolve_env_log_level()
    ctx.obj["log_level"] = level_env
    setup_logging(level=level_env)

    console = ClickConsole()
    console.enable_color = resolve_color_enabled(color_mode=color_mode, stream=console.err)
    ctx.obj["console"] = console
    return console


def resolve_run_options(
    *,
    compact: bool,
    raw_output: bool,
    raw_output0: bool,
    join_output: bool,
    tab: bool,
    indent: int,
    yaml_output: bool,
    color_mode: ColorMode,
    null_input: bool,
    raw_input: bool,
    slurp: bool,
    stream: bool,
    yaml_input: bool,
    exit_status: bool,
    module_paths: tuple[str, ...],
    disable_unsafe_filters: bool,
) -> RunOptions:
    """Translate command-line flags into validated run options.

    Raises:
        ConfigError: For out-of-range indentation or tab indentation with YAML output.
    """
    draft = MutableRunOptions(
        null_input=null_input,
        slurp=slurp,
        stream=stream,
        tab=tab,
        indent=indent,
        compact=compact,
        color_mode=color_mode,
        exit_status=exit_status,
        unsafe_filters=not disable_unsafe_filters,
        module_paths=list(module_paths),
    )
    if raw_input:
        draft.input_format = InputFormat.RAW
    elif yaml_input:
        draft.input_format = InputFormat.YAML
    if yaml_output:
        draft.output_format = OutputFormat.YAML
    if raw_output or raw_output0 or join_output:
        draft.raw_output = True
    if raw_output0:
        draft.terminator = Terminator.NUL
    elif join_output:
        draft.terminator = Terminator.NONE
    if not draft.module_paths:
        default_dir = Path.home() / DEFAULT_MODULE_DIR
        if default_dir.is_dir():
            draft.module_paths = [str(default_dir)]
    return draft.freeze()


def read_query(from_file: str | None, args: tuple[str, ...]) -> tuple[str, str, tuple[str, ...]]:
    """Split positional arguments into the query and the input files.

    Returns:
        tuple[str, str, tuple[str, ...]]: Query text, its source name and the files.

    Raises:
        InputOpenError: If the query file cannot be read.
    """
    if from_file is not None:
        try:
            with open(from_file, encoding="utf-8") as handle:
                return handle.read(), from_file, args
        except OSError as exc:
            raise InputOpenError(from_file, exc) from exc
    if not args:
        return ".", ARG_QUERY_NAME, ()
    return args[0].strip(), ARG_QUERY_NAME, args[1:]


def collect_bindings(
    *,
    arg: tuple[Pair, ...],
    argjson: tuple[Pair, ...],
    slurpfile: tuple[Pair, ...],
    argfile: tuple[Pair, ...],
    rawfile: tuple[Pair, ...],
) -> tuple[tuple[str, ...], tuple[Value, ...]]:
    """Build the variable names and values passed to the program (``$ARGS`` last)."""
    builder = BindingsBuilder()
    for name, text in arg:
        builder.add_arg(name, text)
    for name, text in argjson:
        builder.add_argjson(name, text)
    for name, path in slurpfile:
        builder.add_slurpfile(name, path)
    for name, path in argfile:
        builder.add_argfile(name, path)
    for name, path in rawfile:
        builder.add_rawfile(name, path)
    bindings = builder.build()
    names = tuple(b.name for b in bindings if b.name != ARGS_VARIABLE) + (ARGS_VARIABLE,)
    values = tuple(b.value for b in bindings if b.name != ARGS_VARIABLE) + (builder.args_object(),)
    return names, values


def compile_program(
    text: str,
    fname: str,
    *,
    options: CompileOptions,
) -> Program:
    """Parse and compile the query.

    Raises:
        QueryParseError: If the query text is malformed.
        QueryCompileError: If a function, variable or module cannot be resolved.
    """
    try:
        query = parse_query(text)
    except QuerySyntaxError as exc:
        raise QueryParseError(fname, text, exc, exc.offset) from exc
    try:
        return compile_query(query, options)
    except (QueryResolveError, OSError) as exc:
        raise QueryCompileError(exc) from exc


def execute(
    console: ClickConsole,
    options: RunOptions,
    *,
    query_text: str,
    query_name: str,
    files: tuple[str, ...],
    names: tuple[str, ...],
    values: tuple[Value, ...],
) -> RunOutcome:
    """Compile the query, build the input chain and run it."""
    stdin = click.open_file("-", encoding="utf-8", errors="surrogateescape")
    inputs = build_input_iterator(options, files, stdin)
    natives = build_natives(console.write_err, unsafe_filters=options.unsafe_filters)
    program = compile_program(
        query_text,
        query_name,
        options=CompileOptions(
            module_paths=options.module_paths,
            variables=names,
            functions=natives,
            inputs=inputs,
        ),
    )
    colors = resolve_color_scheme(color_mode=options.color_mode, stream=console.out)
    runner = Runner(
        program,
        build_marshaler(options, colors),
        options,
        console,
        variables=values,
    )
    with closing(inputs):
        return runner.run(NullIterator() if options.null_input else inputs)


@click.command(
    name=PROG_NAME,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Run a jq QUERY over JSON (or YAML, or raw text) read from FILES or standard input.",
)
@click.option("-c", "--compact-output", "compact", is_flag=True, help="Compact output.")
@click.option("-r", "--raw-output", is_flag=True, help="Write strings without quotes.")
@click.option("--raw-output0", is_flag=True, help="Like -r, with a NUL after each result.")
@click.option("-j", "--join-output", is_flag=True, help="Like -r, with no newline after results.")
@click.option("--tab", is_flag=True, help="Indent with tabs.")
@click.option("--indent", type=int, default=2, show_default=True, help="Indentation width (0..9).")
@click.option("--yaml-output", is_flag=True, help="Write results as YAML documents.")
@click.option("-C", "--color-output", is_flag=True, help="Force colored output.")
@click.option("-M", "--monochrome-output", is_flag=True, help="Disable colored output.")
@click.option("-n", "--null-input", is_flag=True, help="Use null as the single input value.")
@click.option("-R", "--raw-input", is_flag=True, help="Read each line as a string.")
@click.option("-s", "--slurp", is_flag=True, help="Read all inputs into one array.")
@click.option("--stream", is_flag=True, help="Parse inputs into stream events.")
@click.option("--yaml-input", is_flag=True, help="Read YAML documents.")
@click.option("-e", "--exit-status", is_flag=True, help="Set the exit code from the last output.")
@click.option("-f", "--from-file", metavar="FILE", help="Read the query from FILE.")
@click.option(
    "-L",
    "module_paths",
    metavar="DIR",
    multiple=True,
    help="Directory to search for modules (repeatable).",
)
@click.option("--arg", nargs=2, multiple=True, metavar="NAME VALUE", help="Bind $NAME to a string.")
@click.option(
    "--argjson", nargs=2, multiple=True, metavar="NAME TEXT", help="Bind $NAME to a JSON value."
)
@click.option(
    "--slurpfile",
    nargs=2,
    multiple=True,
    metavar="NAME FILE",
    help="Bind $NAME to an array of the JSON values in FILE.",
)
@click.option(
    "--argfile",
    nargs=2,
    multiple=True,
    metavar="NAME FILE",
    help="Bind $NAME to the first JSON value in FILE.",
)
@click.option(
    "--rawfile", nargs=2, multiple=True, metavar="NAME FILE", help="Bind $NAME to the text of FILE."
)
@click.option("--disable-unsafe-filters", is_flag=True, help="Disable exec and execpipe.")
@click.option("-v", "--version", is_flag=True, help="Show the version and exit.")
@click.argument("args", nargs=-1)
@click.pass_context
def cli(
    ctx: click.Context,
    *,
    compact: bool,
    raw_output: bool,
    raw_output0: bool,
    join_output: bool,
    tab: bool,
    indent: int,
    yaml_output: bool,
    color_output: bool,
    monochrome_output: bool,
    null_input: bool,
    raw_input: bool,
    slurp: bool,
    stream: bool,
    yaml_input: bool,
    exit_status: bool,
    from_file: str | None,
    module_paths: tuple[str, ...],
    arg: tuple[Pair, ...],
    argjson: tuple[Pair, ...],
    slurpfile: tuple[Pair, ...],
    argfile: tuple[Pair, ...],
    rawfile: tuple[Pair, ...],
    disable_unsafe_filters: bool,
    version: bool,
    args: tuple[str, ...],
) -> None:
    """Entry point for the jqline CLI."""
    color_mode = ColorMode.AUTO
    if monochrome_output:
        color_mode = ColorMode.NEVER
    elif color_output:
        color_mode = ColorMode.ALWAYS
    console = init_common_state(ctx, color_mode=color_mode)

    if version:
        click.echo(f"{PROG_NAME} {JQLINE_VERSION}")
        return

    try:
        options = resolve_run_options(
            compact=compact,
            raw_output=raw_output,
            raw_output0=raw_output0,
            join_output=join_output,
            tab=tab,
            indent=indent,
            yaml_output=yaml_output,
            color_mode=color_mode,
            null_input=null_input,
            raw_input=raw_input,
            slurp=slurp,
            stream=stream,
            yaml_input=yaml_input,
            exit_status=exit_status,
            module_paths=module_paths,
            disable_unsafe_filters=disable_unsafe_filters,
        )
        names, values = collect_bindings(
            arg=arg, argjson=argjson, slurpfile=slurpfile, argfile=argfile, rawfile=rawfile
        )
        query_text, query_name, files = read_query(from_file, args)
        outcome = execute(
            console,
            options,
            query_text=query_text,
            query_name=query_name,
            files=files,
            names=names,
            values=values,
        )
    except JqlineError as exc:
        logger.debug("Startup failed: %s", exc)
        raise JqlineCliError(exc) from exc

    error = outcome.error
    if error is not None:
        raise JqlineCliError(error)


def main() -> None:
    """Console-script entry point."""
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
