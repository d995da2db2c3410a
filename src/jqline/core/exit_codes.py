# jqline:header:start
#
#   project      : jqline
#   file         : exit_codes.py
#   file_relpath : src/jqline/core/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""Exit codes for the jqline CLI.

jqline follows the numbering established by jq-compatible tools so that shell
scripts written against them keep working: ``1`` is reserved for the
exit-status mode (``-e``) verdict "last value was false or null", and every
other failure class has its own distinct code.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the jqline CLI.

    Attributes:
        SUCCESS: Successful execution with no errors.
        FALSY: Exit-status mode only: the last printed value was ``false`` or ``null``.
        FLAG_ERROR: Command-line flags could not be parsed or validated
            (including invalid indentation and color settings).
        COMPILE_ERROR: The query could not be parsed or compiled.
        NO_VALUE: Exit-status mode only: no value was printed during the whole run.
        DEFAULT_ERROR: Any other failure (unreadable files, malformed input,
            runtime errors raised by the query).
    """

    SUCCESS = 0
    FALSY = 1
    FLAG_ERROR = 2
    COMPILE_ERROR = 3
    NO_VALUE = 4
    DEFAULT_ERROR = 5
