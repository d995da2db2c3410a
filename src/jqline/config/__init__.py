# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Configuration handling for jqline.

- [`jqline.config.model`][jqline.config.model]: run options, built with
  `MutableRunOptions` and frozen into `RunOptions` before any input is read.
- [`jqline.config.logging`][jqline.config.logging]: internal logging setup.

This package module stays import-free so that `jqline.config.logging` can be
imported from any layer without pulling in the option model.
"""

from __future__ import annotations
