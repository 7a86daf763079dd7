"""Installation pipeline for ``larinit new``.

Order of operations:
1. Remove the target directory (--force only)
2. composer create-project (fatal on failure)
3. Post-install scripts and APP_KEY generation
4. Setup wizard (.env configuration, migrations)
5. git init + first commit (--git / --github)
6. Pest (--pest)
7. GitHub repository (--github)
8. npm install && npm run build (--npm or wizard answer)

Every external command after project creation is best effort: a failure is
logged as a warning and the next step runs. git, gh and npm are looked up in
PATH before the project is created when the command line asks for them; a
missing one is reported once and its step is skipped.
"""

import logging
import os
import shutil
import stat
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from larinit.config import InstallOptions
from larinit.console import BOLD, GRAY, INFO_BADGE, Console
from larinit.exceptions import InstallationError
from larinit.integrations.runner import CommandRecord, ProcessRunner
from larinit.setup.env_detector import INSTALL_HINTS, ToolDetector, ToolInfo, detect_tools
from larinit.setup.prompts import Prompter
from larinit.setup.wizard import SetupWizard, WizardResult

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
INITIAL_COMMIT_MESSAGE = "Set up a fresh Laravel app"
DOCS_URL = "https://laravel.com/docs/installation#next-steps"

# Optional tools and the step skipped when they are missing
OPTIONAL_TOOL_STEPS = {
    "git": "Git repository initialization",
    "gh": "GitHub repository creation",
    "npm": "the NPM build",
}


@dataclass
class InstallResult:
    """What the installation did.

    Attributes:
        options: Options the installation ran with
        wizard: Wizard outcome
        commands: Every external command executed, in order
        warnings: Failed best-effort steps
    """

    options: InstallOptions
    wizard: Optional[WizardResult] = None
    commands: list[CommandRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def runs_npm(self) -> bool:
        return self.wizard is not None and self.wizard.config.run_npm


def build_create_project_command(options: InstallOptions) -> list[str]:
    """Build the composer create-project argument vector.

    Examples:
        >>> build_create_project_command(InstallOptions(name="blog", directory=Path("/tmp/blog")))
        ['composer', 'create-project', 'laravel/laravel', 'blog', '--remove-vcs', '--prefer-dist', '--no-scripts']
    """
    starter_kit = options.starter_kit
    if starter_kit:
        if starter_kit.startswith("laravel/"):
            if options.livewire_class_components:
                starter_kit += ":dev-components"
            if options.workos:
                starter_kit += ":dev-workos"
        return ["composer", "create-project", starter_kit, options.directory.name, "--stability=dev"]

    command = ["composer", "create-project", "laravel/laravel", options.directory.name]
    if options.version:
        command.append(options.version)
    command.extend(["--remove-vcs", "--prefer-dist", "--no-scripts"])
    return command


class Installer:
    """Runs the installation pipeline for one project.

    Args:
        options: Parsed command-line options
        runner: Executes external commands
        prompter: Answers for the setup wizard
        console: Progress output
        detector: Looks up optional tools (git, gh, npm) in PATH
    """

    def __init__(
        self,
        options: InstallOptions,
        runner: ProcessRunner,
        prompter: Optional[Prompter] = None,
        console: Optional[Console] = None,
        detector: ToolDetector = detect_tools,
    ):
        self.options = options
        self.project_dir = options.directory
        self.runner = runner
        self.console = console or Console(quiet=options.quiet)
        self.prompter = prompter or Prompter(output_func=self.console.echo)
        self.result = InstallResult(options=options)
        self.detector = detector
        self._tools: dict[str, ToolInfo] = {}

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.result.warnings.append(message)

    def _run_all(self, commands: Sequence[Sequence[str]], failure: str, env: Optional[dict[str, str]] = None) -> None:
        for command in commands:
            if not self.runner.run(command, cwd=self.project_dir, env=env):
                self._warn(f"{failure}: {' '.join(command)}")

    def install(self) -> InstallResult:
        """Run every step.

        Raises:
            InstallationError: If the directory cannot be cleared or the project cannot be created
            EnvFileError: If .env cannot be created from .env.example
            InstallationCancelled: If the user interrupts a running command
        """
        self.console.info(f"Creating new Laravel project: {self.options.name}")

        if self.options.force:
            self.remove_existing_directory()

        self.check_optional_tools()
        self.create_project()
        self.run_post_installation()

        wizard = SetupWizard(self.options, runner=self.runner, prompter=self.prompter, console=self.console)
        self.result.wizard = wizard.run()
        self.result.warnings.extend(self.result.wizard.warnings)

        if self.options.wants_git:
            self.initialize_git_repository()
        if self.options.pest:
            self.install_pest()
        if self.options.github is not None:
            self.create_github_repository()
        if self.result.runs_npm:
            self.run_npm_commands()

        self.result.commands = list(self.runner.history)
        return self.result

    def required_optional_tools(self) -> list[str]:
        """Optional tools needed by steps the command line already asked for."""
        tools = []
        if self.options.wants_git:
            tools.append("git")
        if self.options.github is not None:
            tools.append("gh")
        if self.options.npm:
            tools.append("npm")
        return tools

    def check_optional_tools(self) -> None:
        """Warn about missing optional tools before the project is created."""
        for name in self.required_optional_tools():
            self.tool_available(name)

    def tool_available(self, name: str) -> bool:
        """Whether ``name`` is in PATH; warns once when it is not."""
        if name not in self._tools:
            self._tools.update(self.detector((name,)).tools)
            if not self._tools[name].found:
                self._warn(f"{name} not found in PATH, skipping {OPTIONAL_TOOL_STEPS[name]}. {INSTALL_HINTS[name]}")
        return self._tools[name].found

    def remove_existing_directory(self) -> None:
        """Delete the project directory for --force.

        Raises:
            InstallationError: If the target is the working directory or one of
                its parents, or if removal fails
        """
        if not self.project_dir.exists():
            return
        target = self.project_dir.resolve()
        cwd = Path.cwd().resolve()
        if target == cwd or target in cwd.parents:
            raise InstallationError(f"Refusing to remove {target}: it contains the current working directory")
        try:
            shutil.rmtree(self.project_dir)
        except OSError as e:
            raise InstallationError(f"Error removing existing directory: {e}") from e
        logger.debug(f"Removed {self.project_dir}")

    def create_project(self) -> None:
        self.console.info("Installing Laravel...")
        command = build_create_project_command(self.options)
        self.project_dir.parent.mkdir(parents=True, exist_ok=True)
        if not self.runner.run(command, cwd=self.project_dir.parent):
            raise InstallationError(f"Error creating Laravel project: {' '.join(command)} failed")

    def run_post_installation(self) -> None:
        artisan = self.project_dir / "artisan"
        if os.name == "posix" and artisan.exists():
            try:
                artisan.chmod(artisan.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            except OSError as e:
                self._warn(f"Could not make artisan executable: {e}")

        self._run_all(
            [
                ["composer", "run", "post-root-package-install"],
                ["php", "artisan", "key:generate", "--ansi"],
            ],
            failure="Post-installation step failed",
        )

    def default_git_branch(self) -> str:
        """Branch from --branch, else git's init.defaultBranch, else main."""
        if self.options.branch:
            return self.options.branch
        configured = self.runner.capture(["git", "config", "--global", "init.defaultBranch"])
        return configured or DEFAULT_BRANCH

    def initialize_git_repository(self) -> None:
        if not self.tool_available("git"):
            return
        self.console.info("Initializing Git repository...")
        branch = self.default_git_branch()
        self._run_all(
            [
                ["git", "init", "-q"],
                ["git", "add", "."],
                ["git", "commit", "-q", "-m", INITIAL_COMMIT_MESSAGE],
                ["git", "branch", "-M", branch],
            ],
            failure="Git command failed",
        )

    def install_pest(self) -> None:
        self.console.info("Installing Pest testing framework...")
        self._run_all(
            [
                ["composer", "remove", "phpunit/phpunit", "--dev", "--no-update"],
                ["composer", "require", "pestphp/pest", "pestphp/pest-plugin-laravel", "--no-update", "--dev"],
                ["composer", "update"],
                ["php", "./vendor/bin/pest", "--init"],
            ],
            failure="Pest installation step failed",
            env={"PEST_NO_SUPPORT": "true"},
        )

    def create_github_repository(self) -> None:
        if not self.tool_available("gh"):
            return
        if not self.runner.run(["gh", "auth", "status"], cwd=self.project_dir, quiet=True):
            self._warn("GitHub CLI not available or not authenticated. Skipping GitHub repository creation.")
            return

        self.console.info("Creating GitHub repository...")
        repo_name = self.options.name
        if self.options.organization:
            repo_name = f"{self.options.organization}/{repo_name}"

        flags = (self.options.github or "--private").split()
        self._run_all(
            [["gh", "repo", "create", repo_name, "--source=.", "--push", *flags]],
            failure="GitHub repository creation failed",
            env={"GIT_TERMINAL_PROMPT": "0"},
        )

    def run_npm_commands(self) -> None:
        if not self.tool_available("npm"):
            return
        self.console.info("Installing and building NPM dependencies...")
        self._run_all([["npm", "install"], ["npm", "run", "build"]], failure="NPM command failed")


def format_completion_message(result: InstallResult, console: Console) -> str:
    """Next-steps message printed after a successful installation."""
    name = result.options.name
    arrow = console.style("➜", GRAY)
    lines = [
        "",
        f"{console.style(' INFO ', INFO_BADGE)} Application ready in {console.style(f'[{name}]', BOLD)}. "
        "You can start your local development using:",
        "",
        f"{arrow} {console.style(f'cd {name}', BOLD)}",
    ]
    if not result.runs_npm:
        lines.append(f"{arrow} {console.style('npm install && npm run build', BOLD)}")
    lines.append(f"{arrow} {console.style('composer run dev', BOLD)}")
    lines.append("")
    lines.append(f"  New to Laravel? Check out our documentation: {DOCS_URL}. Build something amazing!")
    lines.append("")
    return "\n".join(lines)
