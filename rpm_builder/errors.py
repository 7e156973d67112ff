"""Error types raised by the RPM build pipeline."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "ExternalToolError",
    "InvalidDirectiveError",
    "RpmBuilderError",
]


class RpmBuilderError(RuntimeError):
    """Base class for failures reported by :mod:`rpm_builder`."""


class ConfigurationError(RpmBuilderError):
    """Raised when build options or file selections are invalid."""


class InvalidDirectiveError(ConfigurationError):
    """Raised when a file selection carries an unknown ``%files`` directive."""

    def __init__(self, directive: str) -> None:
        self.directive = directive
        super().__init__(f"Invalid file directive informed: {directive}")


class ExternalToolError(RpmBuilderError):
    """Raised when ``rpmbuild`` fails or produces no package.

    Attributes
    ----------
    returncode : int | None
        Exit status of the process, when it ran to completion.
    stdout : str
        Captured standard output.
    stderr : str
        Captured standard error.
    """

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)
