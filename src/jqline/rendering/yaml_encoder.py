# jqline:header:start
#
#   project      : jqline
#   file         : yaml_encoder.py
#   file_relpath : src/jqline/rendering/yaml_encoder.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""YAML encoder for result values, built on ``ruamel.yaml``.

The round-trip dumper is used because it keeps mapping keys in insertion
order; the representer is adjusted so ``null`` is spelled out and numbers
decoded from JSON are emitted as floats. Document separators are not written
here: the run loop emits ``---`` between documents.
"""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RepresenterError, RoundTripRepresenter

from jqline.core.errors import MarshalError
from jqline.core.values import JsonNumber

if TYPE_CHECKING:
    from ruamel.yaml.nodes import ScalarNode

    from jqline.core.values import Value

_DOCUMENT_END: str = "...\n"


class ValueRepresenter(RoundTripRepresenter):
    """Round-trip representer tuned for the jqline value model."""

    def ignore_aliases(self, data: Any) -> bool:
        """Never emit anchors: results often share subtrees with their input."""
        return True

    def represent_none(self, data: Any) -> ScalarNode:
        """Represent ``None`` as ``null`` everywhere, not only at the document root."""
        return self.represent_scalar("tag:yaml.org,2002:null", "null")

    def represent_json_number(self, data: JsonNumber) -> ScalarNode:
        """Represent a number decoded from JSON as a plain float."""
        return self.represent_float(float(data))


ValueRepresenter.add_representer(type(None), ValueRepresenter.represent_none)
ValueRepresenter.add_representer(JsonNumber, ValueRepresenter.represent_json_number)


class YamlEncoder:
    """Render values as YAML documents.

    Args:
        indent (int): Mapping indentation; values below 2 fall back to 2.
    """

    def __init__(self, *, indent: int = 2) -> None:
        width: int = max(indent, 2)
        self.yaml: YAML = YAML(typ="rt")
        self.yaml.Representer = ValueRepresenter
        self.yaml.default_flow_style = False
        self.yaml.allow_unicode = True
        self.yaml.width = 4096
        self.yaml.indent(mapping=width, sequence=width + 2, offset=width)

    def encode(self, value: Value) -> str:
        """Return ``value`` as one YAML document ending in a newline.

        Raises:
            MarshalError: If the dumper rejects the value.
        """
        buffer = StringIO()
        try:
            self.yaml.dump(value, buffer)
        except (RepresenterError, YAMLError, RecursionError) as exc:
            raise MarshalError(f"cannot encode value as YAML: {exc}") from exc
        text: str = buffer.getvalue()
        if text.endswith("\n" + _DOCUMENT_END):
            text = text[: -len(_DOCUMENT_END)]
        return text
