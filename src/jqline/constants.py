# jqline:header:start
#
#   project      : jqline
#   file         : constants.py
#   file_relpath : src/jqline/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""jqline constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

PROG_NAME: str = "jqline"

try:
    JQLINE_VERSION: str = get_version("jqline")
except PackageNotFoundError:  # running from a source checkout
    JQLINE_VERSION = "0.0.0"

STDIN_NAME: str = "<stdin>"
NULL_INPUT_NAME: str = "<null>"
ARG_QUERY_NAME: str = "<arg>"

DEFAULT_INDENT: int = 2
MAX_INDENT: int = 9

# Environment variables consulted at startup.
ENV_NO_COLOR: str = "NO_COLOR"
ENV_TERM: str = "TERM"
ENV_COLORS: str = "JQLINE_COLORS"
ENV_LOG_LEVEL: str = "JQLINE_LOG_LEVEL"

DEFAULT_MODULE_DIR: str = ".jq"
MODULE_SUFFIX: str = ".jq"

VALUE_NOT_SET: str = "<not set>"
