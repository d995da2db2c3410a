# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""jqline package.

jqline is a command-line JSON/YAML processor. It decodes values from files or
standard input, runs a jq-style query over every value, and renders the results
as JSON, YAML or raw text.
"""

from __future__ import annotations
