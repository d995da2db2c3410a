# jqline:header:start
#
#   project      : jqline
#   file         : __main__.py
#   file_relpath : src/jqline/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Allow ``python -m jqline`` invocation."""

from __future__ import annotations

from jqline.cli.main import main

if __name__ == "__main__":
    main()
