# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Command-line interface for jqline."""

from __future__ import annotations

__all__: list[str] = []
