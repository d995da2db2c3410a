# jqline:header:start
#
#   project      : jqline
#   file         : colors.py
#   file_relpath : src/jqline/rendering/colors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Color mode resolution and the color scheme for JSON output.

The decision whether to colorize is made once at startup
([`resolve_color_enabled`][jqline.rendering.colors.resolve_color_enabled]) and
captured, together with the per-token colors, in an immutable
[`ColorScheme`][jqline.rendering.colors.ColorScheme] that is handed to the
marshaler. Nothing here mutates process-wide state.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Final

from jqline.config.logging import get_logger
from jqline.constants import ENV_COLORS, ENV_NO_COLOR, ENV_TERM
from jqline.core.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import IO, Any

    from jqline.config.logging import JqlineLogger

logger: JqlineLogger = get_logger(__name__)

_COLOR_RE: Final[re.Pattern[str]] = re.compile(r"[0-9;]*")


class ColorMode(str, Enum):
    """User intent for colorized output.

    Attributes:
        AUTO: Color only when stdout is a terminal and the environment allows it.
        ALWAYS: Force color (``-C``).
        NEVER: Disable color (``-M``).
    """

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def resolve_color_enabled(
    *,
    color_mode: ColorMode,
    stream: IO[Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Determine whether color output should be enabled.

    Decision precedence:
        1. **CLI override**: ``ALWAYS`` → True, ``NEVER`` → False.
        2. **NO_COLOR**: set to a non-empty value → False (empty counts as unset).
        3. **TERM=dumb** → False.
        4. **Auto**: whether ``stream`` (default ``sys.stdout``) is a TTY.

    Args:
        color_mode (ColorMode): Mode resolved from ``-C`` / ``-M``.
        stream (IO[Any] | None): Output stream to check for a terminal.
        environ (Mapping[str, str] | None): Environment (defaults to ``os.environ``).

    Returns:
        bool: True if ANSI color should be emitted.
    """
    if color_mode == ColorMode.ALWAYS:
        return True
    if color_mode == ColorMode.NEVER:
        return False

    env: Mapping[str, str] = os.environ if environ is None else environ
    if env.get(ENV_NO_COLOR):
        return False
    if env.get(ENV_TERM) == "dumb":
        return False

    target = stream if stream is not None else sys.stdout
    try:
        return bool(target.isatty())
    except (AttributeError, ValueError, OSError):
        return False


def sgr(code: str) -> str:
    """Return the ANSI escape sequence for an SGR parameter string like ``"34;1"``."""
    return f"\x1b[{code}m" if code else ""


RESET: Final[str] = sgr("0")


@dataclass(frozen=True, slots=True)
class ColorScheme:
    """Per-token colors for JSON output.

    The field order is the order of entries in ``JQLINE_COLORS``
    (``null:false:true:numbers:strings:object keys:arrays:objects``). Each
    field is an SGR parameter string; an empty string leaves the token plain.

    Attributes:
        enabled (bool): Whether colors are emitted at all.
    """

    null: str = "90"
    false: str = "33"
    true: str = "33"
    number: str = "36"
    string: str = "32"
    object_key: str = "34;1"
    array: str = ""
    object: str = ""
    enabled: bool = False

    def paint(self, token_kind: str, text: str) -> str:
        """Wrap ``text`` in the color of ``token_kind`` (a field name).

        Returns ``text`` unchanged when colors are disabled or the kind has no color.
        """
        if not self.enabled:
            return text
        code: str = getattr(self, token_kind)
        if not code:
            return text
        return f"{sgr(code)}{text}{RESET}"


DISABLED: Final[ColorScheme] = ColorScheme()

_TOKEN_FIELDS: Final[tuple[str, ...]] = tuple(
    f.name for f in fields(ColorScheme) if f.name != "enabled"
)


def parse_color_scheme(spec: str | None, *, enabled: bool) -> ColorScheme:
    """Build a [`ColorScheme`][jqline.rendering.colors.ColorScheme] from a ``JQLINE_COLORS`` value.

    Missing trailing entries keep their defaults.

    Args:
        spec (str | None): Colon-separated SGR codes, or None for the defaults.
        enabled (bool): Whether the resulting scheme emits colors.

    Returns:
        ColorScheme: The scheme.

    Raises:
        ConfigError: If an entry is not made of digits and ``;`` or there are too many entries.
    """
    scheme = ColorScheme(enabled=enabled)
    if not spec:
        return scheme
    parts: list[str] = spec.split(":")
    if len(parts) > len(_TOKEN_FIELDS):
        raise ConfigError(f"invalid color: {spec!r}: too many entries")
    overrides: dict[str, str] = {}
    for name, code in zip(_TOKEN_FIELDS, parts):
        if not _COLOR_RE.fullmatch(code):
            raise ConfigError(f"invalid color: {code!r}")
        overrides[name] = code
    logger.debug("Color overrides from %s: %s", ENV_COLORS, overrides)
    return replace(scheme, **overrides)


def resolve_color_scheme(
    *,
    color_mode: ColorMode,
    stream: IO[Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ColorScheme:
    """Resolve the color scheme for a run from flags, TTY state and environment."""
    env: Mapping[str, str] = os.environ if environ is None else environ
    enabled: bool = resolve_color_enabled(color_mode=color_mode, stream=stream, environ=env)
    return parse_color_scheme(env.get(ENV_COLORS), enabled=enabled)
