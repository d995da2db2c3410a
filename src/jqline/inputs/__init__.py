# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/inputs/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Input iterators: decoders, decorators and the chain factory."""

from __future__ import annotations

from jqline.inputs.base import InputIterator, InputRecord
from jqline.inputs.decoders import (
    JsonIterator,
    NullIterator,
    RawLineIterator,
    StreamIterator,
    YamlIterator,
)
from jqline.inputs.decorators import MultiFileIterator, SlurpIterator, SlurpRawIterator
from jqline.inputs.factory import build_input_iterator

__all__ = [
    "InputIterator",
    "InputRecord",
    "JsonIterator",
    "MultiFileIterator",
    "NullIterator",
    "RawLineIterator",
    "SlurpIterator",
    "SlurpRawIterator",
    "StreamIterator",
    "YamlIterator",
    "build_input_iterator",
]
