# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Core building blocks shared by every jqline layer.

- [`jqline.core.values`][jqline.core.values]: the value model (kinds, ordering, truthiness).
- [`jqline.core.errors`][jqline.core.errors]: the error taxonomy.
- [`jqline.core.exit_codes`][jqline.core.exit_codes]: process exit codes.
"""

from __future__ import annotations
