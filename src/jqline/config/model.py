# jqline:header:start
#
#   project      : jqline
#   file         : model.py
#   file_relpath : src/jqline/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Run configuration for jqline.

[`MutableRunOptions`][jqline.config.model.MutableRunOptions] is filled in by
the CLI flag by flag; [`freeze`][jqline.config.model.MutableRunOptions.freeze]
validates the combination and returns the immutable
[`RunOptions`][jqline.config.model.RunOptions] snapshot every other component
reads. The input and output axes stay independent toggles: the input chain
and the marshaler are composed from them once per run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from jqline.config.logging import JqlineLogger, get_logger
from jqline.constants import DEFAULT_INDENT, MAX_INDENT
from jqline.core.errors import ConfigError
from jqline.rendering.colors import ColorMode

logger: JqlineLogger = get_logger(__name__)


class InputFormat(str, Enum):
    """How input bytes are decoded into values."""

    JSON = "json"
    YAML = "yaml"
    RAW = "raw"


class OutputFormat(str, Enum):
    """How result values are encoded."""

    JSON = "json"
    YAML = "yaml"


class Terminator(str, Enum):
    """What is written after each result value."""

    NEWLINE = "\n"
    NUL = "\0"
    NONE = ""

    @property
    def data(self) -> bytes:
        """Return the terminator as bytes."""
        return self.value.encode("ascii")


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Immutable configuration for one run.

    Attributes:
        input_format (InputFormat): Decoder for files and standard input.
        null_input (bool): Evaluate once with ``null`` instead of reading input.
        slurp (bool): Collect all inputs into one value before evaluating.
        stream (bool): Feed stream events (``[path, leaf]``) instead of whole documents.
        output_format (OutputFormat): Encoder for results.
        raw_output (bool): Write string results without JSON quoting.
        terminator (Terminator): Written after each JSON/raw result.
        indent (int): Indentation width for pretty output (0..9).
        tab (bool): Indent with one tab per level.
        compact (bool): Single-line JSON output.
        color_mode (ColorMode): Whether to colorize JSON output.
        exit_status (bool): Derive the exit code from the last printed value.
        unsafe_filters (bool): Register ``exec`` / ``execpipe`` with the evaluator.
        module_paths (tuple[str, ...]): Directories searched by ``include``.
    """

    input_format: InputFormat = InputFormat.JSON
    null_input: bool = False
    slurp: bool = False
    stream: bool = False
    output_format: OutputFormat = OutputFormat.JSON
    raw_output: bool = False
    terminator: Terminator = Terminator.NEWLINE
    indent: int = DEFAULT_INDENT
    tab: bool = False
    compact: bool = False
    color_mode: ColorMode = ColorMode.AUTO
    exit_status: bool = False
    unsafe_filters: bool = True
    module_paths: tuple[str, ...] = ()

    @property
    def effective_indent(self) -> int:
        """Return the JSON indentation width after ``--compact-output`` is applied."""
        return 0 if self.compact else self.indent

    def thaw(self) -> MutableRunOptions:
        """Return a mutable copy of these options."""
        return MutableRunOptions(
            input_format=self.input_format,
            null_input=self.null_input,
            slurp=self.slurp,
            stream=self.stream,
            output_format=self.output_format,
            raw_output=self.raw_output,
            terminator=self.terminator,
            indent=self.indent,
            tab=self.tab,
            compact=self.compact,
            color_mode=self.color_mode,
            exit_status=self.exit_status,
            unsafe_filters=self.unsafe_filters,
            module_paths=list(self.module_paths),
        )


@dataclass
class MutableRunOptions:
    """Mutable builder for [`RunOptions`][jqline.config.model.RunOptions].

    Attributes mirror ``RunOptions``; see there.
    """

    input_format: InputFormat = InputFormat.JSON
    null_input: bool = False
    slurp: bool = False
    stream: bool = False
    output_format: OutputFormat = OutputFormat.JSON
    raw_output: bool = False
    terminator: Terminator = Terminator.NEWLINE
    indent: int = DEFAULT_INDENT
    tab: bool = False
    compact: bool = False
    color_mode: ColorMode = ColorMode.AUTO
    exit_status: bool = False
    unsafe_filters: bool = True
    module_paths: list[str] = field(default_factory=lambda: [])

    def freeze(self) -> RunOptions:
        """Validate the combination of settings and return the immutable snapshot.

        Returns:
            RunOptions: The validated options.

        Raises:
            ConfigError: If the indentation is out of range or tab indentation is
                combined with YAML output.
        """
        validate_indent(self.indent)
        if self.tab and self.output_format == OutputFormat.YAML:
            raise ConfigError("cannot use tab indentation with YAML output")
        options = RunOptions(
            input_format=self.input_format,
            null_input=self.null_input,
            slurp=self.slurp,
            stream=self.stream,
            output_format=self.output_format,
            raw_output=self.raw_output,
            terminator=self.terminator,
            indent=self.indent,
            tab=self.tab,
            compact=self.compact,
            color_mode=self.color_mode,
            exit_status=self.exit_status,
            unsafe_filters=self.unsafe_filters,
            module_paths=tuple(self.module_paths),
        )
        logger.debug("Resolved run options: %s", options)
        return options


def validate_indent(indent: int) -> int:
    """Check that ``indent`` is within ``0..9``.

    Raises:
        ConfigError: ``negative indentation count`` or ``too many indentation count``.
    """
    if indent < 0:
        raise ConfigError("negative indentation count")
    if indent > MAX_INDENT:
        raise ConfigError("too many indentation count")
    return indent
