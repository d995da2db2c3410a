# jqline:header:start
#
#   project      : jqline
#   file         : factory.py
#   file_relpath : src/jqline/inputs/factory.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Compose the input iterator chain for a run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jqline.config.logging import get_logger
from jqline.config.model import InputFormat
from jqline.inputs.decoders import JsonIterator, RawLineIterator, StreamIterator, YamlIterator
from jqline.inputs.decorators import MultiFileIterator, SlurpIterator, SlurpRawIterator

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from jqline.config.logging import JqlineLogger
    from jqline.config.model import RunOptions
    from jqline.inputs.base import InputIterator
    from jqline.inputs.decorators import DecoderFactory

logger: JqlineLogger = get_logger(__name__)

DECODERS: dict[InputFormat, DecoderFactory] = {
    InputFormat.JSON: JsonIterator,
    InputFormat.YAML: YamlIterator,
    InputFormat.RAW: RawLineIterator,
}


def build_input_iterator(
    options: RunOptions,
    sources: Sequence[str],
    stdin: TextIO,
) -> InputIterator:
    """Build the input chain once from the run options.

    The chain is ``decoder -> MultiFileIterator -> [StreamIterator] ->
    [SlurpIterator]``; raw input with slurp reads whole sources with
    ``SlurpRawIterator`` instead.

    Args:
        options (RunOptions): Frozen run options.
        sources (Sequence[str]): Input files; empty means standard input.
        stdin (TextIO): Standard input stream.

    Returns:
        InputIterator: The composed iterator.
    """
    iterator: InputIterator
    if options.input_format == InputFormat.RAW and options.slurp:
        iterator = SlurpRawIterator(sources, stdin)
    else:
        iterator = MultiFileIterator(sources, DECODERS[options.input_format], stdin)
        if options.stream:
            iterator = StreamIterator(iterator)
        if options.slurp:
            iterator = SlurpIterator(iterator)
    logger.debug(
        "Input chain: %s over %d source(s) (format=%s)",
        type(iterator).__name__,
        len(sources),
        options.input_format.value,
    )
    return iterator
