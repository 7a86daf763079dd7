"""Validation of command-line input before any side effects happen."""

import re
from pathlib import Path

from larinit.exceptions import InvalidInputError

# Accepted values for --database, in the order shown by the CLI help
DATABASE_DRIVERS = ("mysql", "mariadb", "pgsql", "sqlite", "sqlsrv")

# Anything that is not a (Unicode) letter, digit, underscore, dash or period
_INVALID_NAME_CHARS = re.compile(r"[^\w.\-]")

_RESERVED_NAMES = frozenset({".", ".."})


def validate_project_name(name: str) -> None:
    """Validate a new project name.

    Args:
        name: Directory name requested by the user

    Raises:
        InvalidInputError: If the name is empty or contains other characters
            than letters, numbers, dashes, underscores and periods

    Examples:
        >>> validate_project_name("my-app_v1.2")
        >>> validate_project_name("my app")
        Traceback (most recent call last):
            ...
        larinit.exceptions.InvalidInputError: The name may only contain letters, numbers, dashes, underscores, and periods.
    """
    if not name:
        raise InvalidInputError("The project name cannot be empty.")
    # "." and ".." resolve to the working directory or its parent
    if _INVALID_NAME_CHARS.search(name) or name in _RESERVED_NAMES:
        raise InvalidInputError("The name may only contain letters, numbers, dashes, underscores, and periods.")


def validate_database_driver(driver: str) -> str:
    """Check a --database value against DATABASE_DRIVERS (case-sensitive)."""
    if driver not in DATABASE_DRIVERS:
        raise InvalidInputError(
            f"Invalid database driver [{driver}]. Possible values are: {', '.join(DATABASE_DRIVERS)}"
        )
    return driver


def ensure_target_available(directory: Path, force: bool) -> None:
    """Refuse to install into an existing directory unless forced.

    Raises:
        InvalidInputError: If the directory exists and force is False
    """
    if not force and directory.exists():
        raise InvalidInputError(f"Directory '{directory}' already exists. Use --force to override.")
