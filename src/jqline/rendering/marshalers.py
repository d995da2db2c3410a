# jqline:header:start
#
#   project      : jqline
#   file         : marshalers.py
#   file_relpath : src/jqline/rendering/marshalers.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Output marshalers: turn one result value into bytes.

Marshalers are the output half of the pipeline. The encoders
([`JsonMarshaler`][jqline.rendering.marshalers.JsonMarshaler],
[`YamlMarshaler`][jqline.rendering.marshalers.YamlMarshaler]) render any
value; [`RawMarshaler`][jqline.rendering.marshalers.RawMarshaler] decorates
another marshaler and writes strings unquoted. Terminators and YAML document
separators are the run loop's business, not the marshaler's.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from jqline.config.logging import get_logger
from jqline.config.model import OutputFormat
from jqline.rendering.colors import DISABLED, ColorScheme
from jqline.rendering.json_encoder import JsonEncoder, encode_text
from jqline.rendering.yaml_encoder import YamlEncoder

if TYPE_CHECKING:
    from jqline.config.logging import JqlineLogger
    from jqline.config.model import RunOptions
    from jqline.core.values import Value

logger: JqlineLogger = get_logger(__name__)


class Marshaler(Protocol):
    """Renders one value."""

    def marshal(self, value: Value) -> bytes:
        """Return the encoded value (without terminator).

        Raises:
            MarshalError: If the value cannot be encoded.
        """
        ...


class JsonMarshaler:
    """JSON output with configurable indentation and colors."""

    def __init__(
        self,
        *,
        indent: int = 2,
        tab: bool = False,
        colors: ColorScheme = DISABLED,
    ) -> None:
        self.encoder = JsonEncoder(indent=indent, tab=tab, colors=colors)

    def marshal(self, value: Value) -> bytes:
        return encode_text(self.encoder.encode(value))


class YamlMarshaler:
    """YAML output; every call yields one complete document."""

    def __init__(self, *, indent: int = 2) -> None:
        self.encoder = YamlEncoder(indent=indent)

    def marshal(self, value: Value) -> bytes:
        return encode_text(self.encoder.encode(value))


class RawMarshaler:
    """Write strings as their raw text and delegate everything else.

    Args:
        inner (Marshaler): Marshaler used for non-string values.
    """

    def __init__(self, inner: Marshaler) -> None:
        self.inner: Marshaler = inner

    def marshal(self, value: Value) -> bytes:
        if isinstance(value, str):
            return encode_text(value)
        return self.inner.marshal(value)


def build_marshaler(options: RunOptions, colors: ColorScheme = DISABLED) -> Marshaler:
    """Compose the marshaler for a run.

    Args:
        options (RunOptions): Frozen run options (format, indentation, raw mode).
        colors (ColorScheme): Color scheme for JSON output.

    Returns:
        Marshaler: The encoder, wrapped in a ``RawMarshaler`` for raw JSON output.
            YAML output ignores the raw flag.
    """
    marshaler: Marshaler
    if options.output_format == OutputFormat.YAML:
        marshaler = YamlMarshaler(indent=options.indent)
    else:
        marshaler = JsonMarshaler(
            indent=options.effective_indent,
            tab=options.tab and not options.compact,
            colors=colors,
        )
    if options.raw_output and options.output_format == OutputFormat.JSON:
        marshaler = RawMarshaler(marshaler)
    logger.debug("Output marshaler: %s (raw=%s)", type(marshaler).__name__, options.raw_output)
    return marshaler
