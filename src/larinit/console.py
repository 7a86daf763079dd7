"""Console output for the installer.

Progress messages go through Console so that --quiet can drop them. Prompts,
errors and warnings are never suppressed.
"""

import sys
from typing import Optional, TextIO

RED = "\033[31m"
BOLD = "\033[1m"
GRAY = "\033[90m"
INFO_BADGE = "\033[44;37m"
RESET = "\033[0m"

LOGO = r"""
 _                               _
| |                             | |
| |     __ _ _ __ __ ___   _____| |
| |    / _` |  __/ _` \ \ / / _ \ |
| |___| (_| | | | (_| |\ V /  __/ |
|______\__,_|_|  \__,_| \_/ \___|_|
"""


class Console:
    """Quiet-aware printer.

    Args:
        quiet: Drop info() messages
        stream: Output stream (default: sys.stdout)
        color: Emit ANSI colors (default: only when stream is a TTY)
    """

    def __init__(self, quiet: bool = False, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self.quiet = quiet
        self.stream = stream or sys.stdout
        if color is None:
            color = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.color = color

    def style(self, text: str, code: str) -> str:
        return f"{code}{text}{RESET}" if self.color else text

    def echo(self, message: str = "") -> None:
        """Print unconditionally."""
        print(message, file=self.stream)

    def info(self, message: str = "") -> None:
        """Print unless quiet."""
        if not self.quiet:
            self.echo(message)

    def logo(self) -> None:
        self.info(self.style(LOGO, RED))
