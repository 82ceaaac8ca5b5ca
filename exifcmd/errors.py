"""Exception types raised by exifcmd."""

import errno


class ExiftoolError(Exception):
    """Base class for every error raised by exifcmd.

    Carries the exiftool command that was attempted (when there was one) and
    the underlying OS error code (when there was one), so a failure can be
    diagnosed without re-running it.
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.command = command
        self.error_code = error_code


class ExiftoolNotFoundError(ExiftoolError):
    """Raised when exiftool is not installed."""


class InvalidInputError(ExiftoolError, ValueError):
    """Raised for missing or malformed parameters, before any process is spawned."""


class ProcessSpawnError(ExiftoolError):
    """Raised when the OS could not start the exiftool process at all."""


class ProcessExecutionError(ExiftoolError):
    """Raised when exiftool ran but reported failure."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
        diagnostics: object = None,
    ) -> None:
        super().__init__(message, command=command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.diagnostics = diagnostics


class OutputParseError(ExiftoolError):
    """Raised when exiftool output does not have the expected shape."""


def errno_name(error: OSError) -> str | None:
    """Symbolic name of an OS error, such as ENOENT."""
    return errno.errorcode.get(error.errno) if error.errno else None

