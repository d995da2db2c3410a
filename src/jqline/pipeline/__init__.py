# jqline:header:start
#
#   project      : jqline
#   file         : __init__.py
#   file_relpath : src/jqline/pipeline/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""jqline processing pipeline.

This package connects the input iterators, the compiled program and the
output marshaler:

- Argument bindings collected before compilation
  ([`jqline.pipeline.bindings`][jqline.pipeline.bindings])
- Native filters supplied to the evaluator
  ([`jqline.pipeline.natives`][jqline.pipeline.natives])
- The run loop and exit-status model
  ([`jqline.pipeline.runner`][jqline.pipeline.runner])
"""
