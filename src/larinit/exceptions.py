"""Custom exceptions for larinit.

This module defines the exception types raised by the installer:
- InvalidInputError: Bad project name, database flag or target directory
- MissingToolError: A required executable is not installed
- EnvFileError: The .env file could not be read, copied or written
- ConfigurationError: The user defaults file is invalid
- InstallationError: Creating the project itself failed
- InstallationCancelled: The user interrupted a running step
"""

from typing import Optional


class LarinitError(Exception):
    """Base class for all larinit errors."""


class InvalidInputError(LarinitError):
    """Raised when user-supplied input is rejected before any side effects.

    Used for invalid project names, unknown ``--database`` values and an
    existing target directory without ``--force``.
    """


class MissingToolError(LarinitError):
    """Raised when a required external tool is not found in PATH.

    Args:
        tool: Executable name that was looked up
        hint: Optional installation hint shown to the user
    """

    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        self.hint = hint
        message = f"{tool.capitalize()} is required but not found in PATH"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class EnvFileError(LarinitError):
    """Raised when an env file cannot be read, copied or written.

    Preserves the underlying OSError for debugging.

    Args:
        message: Error description
        path: File the operation targeted
        original_error: Original OSError (optional)
    """

    def __init__(self, message: str, path: Optional[str] = None, original_error: Optional[Exception] = None):
        self.message = message
        self.path = path
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with path and original error if available."""
        parts = [self.message]
        if self.path:
            parts.append(f"({self.path})")
        if self.original_error:
            parts.append(f"[original: {self.original_error}]")
        return " ".join(parts)


class EnvFileNotFoundError(EnvFileError):
    """Raised when an env file (or its template) does not exist."""


class ConfigurationError(LarinitError):
    """Raised when the user defaults file is invalid.

    Used for:
    - Invalid YAML syntax
    - Unknown keys or wrongly typed values
    - Unreadable files

    Includes file path and line number context when available.

    Args:
        message: Error description
        file_path: Path to problematic config file (optional)
        line_number: Line number where error occurred (optional)

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid database driver",
        ...     file_path="config.yaml",
        ...     line_number=3
        ... )
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with file/line context if available."""
        parts = [self.message]
        if self.file_path:
            parts.append(f"in file: {self.file_path}")
        if self.line_number:
            parts.append(f"at line: {self.line_number}")
        return " ".join(parts)

    def __str__(self) -> str:
        """Return formatted error message."""
        return self._format_message()


class InstallationError(LarinitError):
    """Raised when a step the rest of the installation depends on fails.

    Only project creation (and clearing the directory for --force) is fatal;
    later external commands are reported as warnings instead.
    """


class InstallationCancelled(LarinitError):
    """Raised when an interrupt signal stops a running external command."""
