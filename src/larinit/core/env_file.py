"""Line-oriented KEY=VALUE env file store.

Reads, mutates and rewrites ``.env`` style files while keeping every line that
is not targeted byte-identical. Each mutation is a full-file rewrite done
atomically (temp file + rename), so a call either completes or leaves the
previous content in place.

Mutation primitives:
- set_key: touches only the first ``KEY=`` line, appending when absent
- replace_literal: blunt substring replacement of every occurrence
- comment/uncomment_database_defaults: toggle the comment marker on lines
  that exactly equal one of the fixed database defaults
"""

import logging
import shutil
import stat
import sys
from contextlib import suppress
from pathlib import Path
from typing import Optional, Union

from larinit.exceptions import EnvFileError, EnvFileNotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# File permissions (Unix only - ignored on Windows)
ENV_FILE_PERMS = 0o644  # rw-r--r--

COMMENT_PREFIX = "# "

# Template lines commented out for SQLite and restored for server databases.
# Matched literally: a line edited away from these values is left alone.
DATABASE_DEFAULT_LINES = (
    "DB_HOST=127.0.0.1",
    "DB_PORT=3306",
    "DB_DATABASE=laravel",
    "DB_USERNAME=root",
    "DB_PASSWORD=",
)


def safe_chmod(path: Path, mode: int) -> None:
    """Set file permissions (Unix only).

    Args:
        path: File path to set permissions on
        mode: Unix permission bits (ignored on Windows)
    """
    if sys.platform != "win32":
        with suppress(OSError, NotImplementedError):
            path.chmod(mode)


def _read_text(path: Path) -> str:
    # newline="" keeps CRLF files intact
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise EnvFileNotFoundError("Env file does not exist", path=str(path), original_error=e) from e
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError("Failed to read env file", path=str(path), original_error=e) from e


def write_text_atomic(path: Path, content: str) -> None:
    """Write a file atomically using temp file + rename.

    An existing file keeps its permission bits; a new one gets ENV_FILE_PERMS.

    Args:
        path: Destination path
        content: Full file content

    Raises:
        EnvFileError: If write or rename fails
    """
    temp_path = path.with_name(path.name + ".tmp")
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except OSError:
        mode = ENV_FILE_PERMS

    try:
        with temp_path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)

        safe_chmod(temp_path, mode)
        temp_path.replace(path)
    except OSError as e:
        if temp_path.exists():
            with suppress(OSError):
                temp_path.unlink()
        raise EnvFileError("Failed to write env file", path=str(path), original_error=e) from e


def load_lines(path: PathLike) -> list[str]:
    """Load an env file as an ordered list of raw lines.

    Blank lines and comments are returned verbatim. A trailing newline does
    not produce an extra empty line.

    Args:
        path: Env file to read

    Returns:
        Lines without their line terminators

    Raises:
        EnvFileNotFoundError: If the file does not exist
        EnvFileError: For any other read failure
    """
    return _read_text(Path(path)).splitlines()


def _validate_key(key: str) -> None:
    if not key or "=" in key or "\n" in key:
        raise ValueError(f"Invalid env key: {key!r}")


def set_key(path: PathLike, key: str, value: str) -> None:
    """Set ``key=value`` in an env file.

    Scans top to bottom for the first line starting with ``key=`` and
    replaces that whole line. Later duplicates are not touched. If no line
    matches, ``key=value`` is appended after the last existing line, keeping
    a trailing newline if the file had one. The appended line ends in CRLF
    when the file already uses CRLF. The value is written verbatim: callers
    that need quotes must add them.

    Args:
        path: Env file to update
        key: Variable name (non-empty, no ``=``)
        value: Raw value

    Raises:
        ValueError: If the key is malformed
        EnvFileNotFoundError: If the file does not exist
        EnvFileError: If the file cannot be read or written

    Example:
        >>> set_key(".env", "APP_URL", "http://localhost:8000")
    """
    _validate_key(key)
    path = Path(path)
    content = _read_text(path)

    new_line = f"{key}={value}"
    prefix = f"{key}="
    lines = content.split("\n")
    eol = "\r" if "\r\n" in content else ""

    for i, line in enumerate(lines):
        if line.startswith(prefix):
            lines[i] = new_line + "\r" if line.endswith("\r") else new_line
            break
    else:
        if content == "":
            lines = [new_line]
        elif lines[-1] == "":
            lines.insert(len(lines) - 1, new_line + eol)
        else:
            lines[-1] += eol
            lines.append(new_line)

    write_text_atomic(path, "\n".join(lines))
    logger.debug(f"Set {key} in {path}")


def read_value(path: PathLike, key: str) -> Optional[str]:
    """Return the value of the first ``key=`` line, or None if absent."""
    prefix = f"{key}="
    for line in load_lines(path):
        if line.startswith(prefix):
            return line[len(prefix) :]
    return None


def replace_literal(path: PathLike, search: str, replace: str) -> int:
    """Replace every occurrence of ``search`` in the file with ``replace``.

    Args:
        path: File to rewrite
        search: Literal text to find (not a pattern)
        replace: Replacement text

    Returns:
        Number of occurrences replaced

    Raises:
        EnvFileNotFoundError: If the file does not exist
        EnvFileError: If the file cannot be read or written
    """
    if not search:
        raise ValueError("search text must not be empty")

    path = Path(path)
    content = _read_text(path)
    count = content.count(search)
    write_text_atomic(path, content.replace(search, replace))
    return count


def copy_file(src: PathLike, dst: PathLike) -> None:
    """Copy ``src`` to ``dst`` byte for byte, overwriting ``dst``.

    Raises:
        EnvFileNotFoundError: If ``src`` does not exist
        EnvFileError: If the copy fails
    """
    src, dst = Path(src), Path(dst)
    try:
        shutil.copyfile(src, dst)
    except FileNotFoundError as e:
        if not src.exists():
            raise EnvFileNotFoundError("Template file does not exist", path=str(src), original_error=e) from e
        raise EnvFileError("Failed to copy env file", path=str(dst), original_error=e) from e
    except OSError as e:
        raise EnvFileError("Failed to copy env file", path=str(dst), original_error=e) from e

    safe_chmod(dst, ENV_FILE_PERMS)
    logger.debug(f"Copied {src} to {dst}")


def _toggle_lines(path: PathLike, mapping: dict[str, str]) -> int:
    path = Path(path)
    content = _read_text(path)
    lines = content.split("\n")
    count = 0
    for i, line in enumerate(lines):
        stripped = line.rstrip("\r")
        if stripped in mapping:
            lines[i] = mapping[stripped] + line[len(stripped) :]
            count += 1
    if count:
        write_text_atomic(path, "\n".join(lines))
    return count


def comment_database_defaults(path: PathLike) -> int:
    """Comment out the default database lines (SQLite needs none of them).

    Only lines exactly equal to an entry of DATABASE_DEFAULT_LINES are
    touched; every such line is commented, not just the first. Lines that are
    already commented stay as they are.

    Returns:
        Number of lines commented
    """
    return _toggle_lines(path, {line: COMMENT_PREFIX + line for line in DATABASE_DEFAULT_LINES})


def uncomment_database_defaults(path: PathLike) -> int:
    """Restore the default database lines commented by comment_database_defaults.

    Returns:
        Number of lines uncommented
    """
    return _toggle_lines(path, {COMMENT_PREFIX + line: line for line in DATABASE_DEFAULT_LINES})
