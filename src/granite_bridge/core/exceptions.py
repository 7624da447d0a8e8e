"""Exception hierarchy for granite-bridge.

All exceptions carry an exit_code for CLI return value mapping and a
single user-facing ``message``.
"""

from granite_bridge.core.exit_codes import ExitCode


class GraniteError(Exception):
    """Base exception for all granite-bridge errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(GraniteError):
    """Empty SQL, unsupported format token, unusable path."""

    exit_code: int = ExitCode.USAGE_ERROR


class NotFoundError(GraniteError):
    """Database file or executable does not exist."""

    exit_code: int = ExitCode.INPUT_ERROR


class OutputError(GraniteError):
    """Export destination could not be written."""

    exit_code: int = ExitCode.OUTPUT_ERROR


class ExecutionError(GraniteError):
    """granitectl could not be spawned, awaited, or read."""

    exit_code: int = ExitCode.EXECUTION_ERROR


class ExecutableNotFoundError(NotFoundError, ExecutionError):
    """granitectl is absent at the resolved location."""

    exit_code: int = ExitCode.INPUT_ERROR


class TimeoutError(ExecutionError):
    """granitectl did not exit within the invocation budget."""

    exit_code: int = ExitCode.TIMEOUT


class NonZeroExitError(GraniteError):
    """granitectl ran and reported failure; message is its stderr."""

    exit_code: int = ExitCode.TOOL_ERROR


class ParseError(GraniteError):
    """Output matched neither the structured nor the legacy shape."""

    exit_code: int = ExitCode.PARSE_ERROR


class ConfigError(GraniteError):
    """Malformed config file or invalid setting."""

    exit_code: int = ExitCode.CONFIG_ERROR
