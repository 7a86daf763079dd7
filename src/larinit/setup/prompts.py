"""Interactive prompts used by the setup wizard.

Three input policies:
- choose / ask_port: numeric, re-prompt without limit until the answer is valid
- confirm: only "y"/"yes" (any case) means yes; everything else is a
  definitive no, never re-prompted
- ask_string: never rejects; trimmed, blank keeps the default

Input and output are injectable so tests can script a session:

    >>> answers = iter(["abc", "4"])
    >>> prompter = Prompter(input_func=lambda _: next(answers), output_func=lambda _: None)
    >>> prompter.choose("Which database?", ["SQLite", "MySQL", "MariaDB", "PostgreSQL", "SQL Server"])
    3
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Callable, Optional

from larinit.exceptions import InvalidInputError

InputFunc = Callable[[str], str]
OutputFunc = Callable[[str], None]
PortCheck = Callable[[int], bool]

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})

MIN_PORT = 1
MAX_PORT = 65535


class Prompter:
    """Reads answers from the user.

    Args:
        input_func: Called with the prompt text, returns the raw answer
            (default: builtin input)
        output_func: Prints informational lines (default: builtin print)
    """

    def __init__(self, input_func: Optional[InputFunc] = None, output_func: Optional[OutputFunc] = None):
        self._input = input_func or input
        self._output = output_func or print

    def _read(self, prompt: str) -> Optional[str]:
        """Read one trimmed answer, or None once input is exhausted."""
        try:
            return self._input(prompt).strip()
        except EOFError:
            return None

    def choose(self, question: str, options: Sequence[str], default_index: int = 0) -> int:
        """Numbered menu selection.

        Args:
            question: Heading printed above the menu
            options: Labels shown as ``1) label``
            default_index: Index chosen on blank input

        Returns:
            Zero-based index of the selected option
        """
        count = len(options)
        self._output(f"\n{question}")
        for i, option in enumerate(options, 1):
            self._output(f"{i}) {option}")

        while True:
            answer = self._read(f"Please select (1-{count}) [{default_index + 1}]: ")
            if not answer:
                return default_index
            try:
                choice = int(answer)
            except ValueError:
                choice = 0
            if 1 <= choice <= count:
                return choice - 1
            self._output(f"Please enter a number between 1 and {count}.")

    def confirm(self, question: str) -> bool:
        """Yes/no question defaulting to no."""
        answer = self._read(f"{question} (y/N): ")
        return (answer or "").lower() in AFFIRMATIVE_ANSWERS

    def ask_string(self, name: str, default: str) -> str:
        """Free-text question. Any non-blank answer is returned verbatim."""
        answer = self._read(f"{name} (default: {default}): ")
        return answer or default

    def ask_port(self, name: str, default: int, check: PortCheck) -> int:
        """Ask for a TCP port that ``check`` reports as free.

        Blank input selects ``default`` if it is free. Non-numeric, out of
        range and busy ports are rejected and the question is repeated.

        Raises:
            InvalidInputError: If input ends before a usable port was given
        """
        while True:
            answer = self._read(f"{name} (default: {default}): ")
            if not answer:
                if check(default):
                    return default
                if answer is None:
                    raise InvalidInputError(f"No input left to choose {name} and port {default} is in use.")
                self._output(f"Default port {default} is not available. Please choose another port.")
                continue

            try:
                port = int(answer)
            except ValueError:
                self._output("Please enter a valid number.")
                continue

            if not MIN_PORT <= port <= MAX_PORT:
                self._output(f"Port must be between {MIN_PORT} and {MAX_PORT}.")
                continue

            if not check(port):
                self._output(f"Port {port} is not available. Please choose another port.")
                continue

            return port
