"""Detection of the external tools the installer drives.

Composer and PHP are required before anything is created. git, gh and npm
are looked up only when a requested step needs them, so a missing optional
tool turns into a warning and a skipped step instead of a failed command.
"""

import logging
import re
import shutil
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Optional

from larinit.exceptions import MissingToolError

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("composer", "php")

INSTALL_HINTS = {
    "composer": "Please install Composer: https://getcomposer.org/",
    "php": "Please install PHP: https://www.php.net/downloads",
    "git": "Please install Git: https://git-scm.com/downloads",
    "gh": "Please install the GitHub CLI: https://cli.github.com/",
    "npm": "Please install Node.js and npm: https://nodejs.org/",
}

VERSION_CHECK_TIMEOUT = 2.0

_VERSION_PATTERN = re.compile(r"(\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?)")


@dataclass(frozen=True)
class ToolInfo:
    """An executable looked up in PATH.

    Attributes:
        name: Executable name
        path: Absolute path, or None when not found
        version: Parsed version, or None when unknown
    """

    name: str
    path: Optional[str]
    version: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class DetectionResult:
    tools: dict[str, ToolInfo]

    @property
    def missing(self) -> list[str]:
        return [name for name, tool in self.tools.items() if not tool.found]


ToolDetector = Callable[[Iterable[str]], DetectionResult]


def detect_tools(tool_names: Iterable[str]) -> DetectionResult:
    """Look up each tool in PATH, in the given order."""
    return DetectionResult(tools={name: locate_tool(name) for name in tool_names})


def ensure_required_tools(detector: ToolDetector = detect_tools) -> DetectionResult:
    """Fail fast when Composer or PHP is missing.

    Raises:
        MissingToolError: For the first required tool not found in PATH
    """
    result = detector(REQUIRED_TOOLS)
    for name in result.missing:
        raise MissingToolError(name, INSTALL_HINTS.get(name))

    for tool in result.tools.values():
        logger.debug(f"Using {tool.name} {tool.version or '(version unknown)'} at {tool.path}")
    return result


def locate_tool(name: str) -> ToolInfo:
    path = shutil.which(name)
    if path is None:
        logger.debug(f"{name} not found in PATH")
        return ToolInfo(name=name, path=None)
    return ToolInfo(name=name, path=path, version=get_tool_version(path))


def get_tool_version(tool_path: str) -> Optional[str]:
    """Run ``<tool> --version`` and parse the first x.y.z it prints.

    Returns None on timeout, non-zero exit, start failure or unparseable output.
    """
    try:
        result = subprocess.run(
            [tool_path, "--version"],
            capture_output=True,
            text=True,
            timeout=VERSION_CHECK_TIMEOUT,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"{tool_path} --version timed out after {VERSION_CHECK_TIMEOUT}s")
        return None
    except OSError as e:
        logger.debug(f"Could not run {tool_path} --version: {e}")
        return None

    if result.returncode != 0:
        return None
    return parse_version(result.stdout)


def parse_version(output: str) -> Optional[str]:
    """Extract a semantic version from ``--version`` output.

    Examples:
        >>> parse_version("PHP 8.3.4 (cli) (built: Mar 12 2024)")
        '8.3.4'
        >>> parse_version("Composer version 2.7.2 2024-03-11 17:12:18")
        '2.7.2'
    """
    match = _VERSION_PATTERN.search(output or "")
    return match.group(1) if match else None
