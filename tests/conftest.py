"""Pytest configuration and shared fixtures."""

from typing import Optional

import pytest

from larinit.config import InstallOptions
from larinit.console import Console
from larinit.integrations.runner import CommandRecord
from larinit.setup.env_detector import DetectionResult, ToolInfo
from larinit.setup.prompts import Prompter

# Trimmed copy of the stock Laravel .env.example
ENV_EXAMPLE = """\
APP_NAME=Laravel
APP_ENV=local
APP_KEY=
APP_DEBUG=true
APP_URL=http://localhost

LOG_CHANNEL=stack

DB_CONNECTION=sqlite
# DB_HOST=127.0.0.1
# DB_PORT=3306
# DB_DATABASE=laravel
# DB_USERNAME=root
# DB_PASSWORD=

SESSION_DRIVER=database
"""


@pytest.fixture
def env_example_content():
    """Content of a freshly created Laravel .env.example."""
    return ENV_EXAMPLE


@pytest.fixture
def project_dir(tmp_path):
    """Project directory as left behind by composer create-project."""
    directory = tmp_path / "my-blog"
    directory.mkdir()
    (directory / ".env.example").write_text(ENV_EXAMPLE, encoding="utf-8")
    return directory


@pytest.fixture
def make_options(project_dir):
    """Factory fixture for InstallOptions pointing at project_dir."""

    def _create(**overrides):
        values = {"name": project_dir.name, "directory": project_dir, "quiet": True}
        values.update(overrides)
        return InstallOptions(**values)

    return _create


class ScriptedPrompter(Prompter):
    """Prompter answering from a list; raises EOFError once exhausted."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts: list[str] = []
        self.output: list[str] = []
        super().__init__(input_func=self._next_answer, output_func=self.output.append)

    def _next_answer(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture
def scripted_prompter():
    """Factory fixture for ScriptedPrompter instances."""

    def _create(*answers):
        return ScriptedPrompter(answers)

    return _create


class FakeRunner:
    """Stands in for ProcessRunner; records commands instead of running them.

    Args:
        failing: Commands (as tuples, or their leading words) that report failure
        captured: Output returned by capture(), keyed by command tuple
    """

    def __init__(self, failing=(), captured: Optional[dict] = None):
        self.failing = [tuple(command) for command in failing]
        self.captured = captured or {}
        self.history: list[CommandRecord] = []
        self.calls: list[dict] = []

    def _fails(self, command) -> bool:
        return any(tuple(command[: len(prefix)]) == prefix for prefix in self.failing)

    def run(self, command, cwd=None, env=None, quiet=None) -> bool:
        ok = not self._fails(command)
        self.calls.append({"command": tuple(command), "cwd": cwd, "env": env, "quiet": quiet})
        self.history.append(
            CommandRecord(command=tuple(command), cwd=str(cwd) if cwd is not None else None, returncode=0 if ok else 1)
        )
        return ok

    def capture(self, command, cwd=None):
        output = self.captured.get(tuple(command))
        self.history.append(CommandRecord(command=tuple(command), cwd=None, returncode=0 if output else 1))
        return output

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [call["command"] for call in self.calls]


@pytest.fixture
def fake_runner():
    """Factory fixture for FakeRunner instances."""

    def _create(**kwargs):
        return FakeRunner(**kwargs)

    return _create


@pytest.fixture
def quiet_console():
    """Console with progress output suppressed."""
    return Console(quiet=True, color=False)


@pytest.fixture
def tool_detector():
    """Factory fixture for detectors that find every tool except ``missing``."""

    def _create(*missing):
        def _detect(names):
            return DetectionResult(
                tools={name: ToolInfo(name, None if name in missing else f"/usr/bin/{name}") for name in names}
            )

        return _detect

    return _create
