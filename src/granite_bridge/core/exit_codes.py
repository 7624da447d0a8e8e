"""Standard exit codes for granite-bridge.

Exit codes follow Unix conventions; 8 and 9 cover failures reported by
granitectl itself and output that could not be understood.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for granite-bridge commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    EXECUTION_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    TOOL_ERROR = 8
    PARSE_ERROR = 9
