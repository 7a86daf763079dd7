"""Interactive setup wizard run after the project has been created.

Single pass over a fixed sequence of steps; a step is skipped when the
command line already decided it or when an earlier answer makes it moot:

    ENSURE_ENV_FILE        copy .env.example to .env if .env is missing
    SELECT_DATABASE        skipped when --database was given
    CONFIGURE_DATABASE     DB_* keys in .env and .env.example
    COLLECT_APP_URL        APP_URL
    COLLECT_PORTS          APP_PORT / VITE_PORT, only with --ports
    OFFER_MIGRATIONS       skipped without a database; creates the SQLite file first
    OFFER_DEPENDENCY_BUILD skipped when --npm/--no-npm was given

Only the initial .env copy is fatal. Every later failure becomes a warning
and the wizard moves on.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from larinit.config import InstallOptions
from larinit.console import Console
from larinit.core import env_file
from larinit.core.database import DATABASE_OPTIONS, ZERO_CONFIG_DRIVER, get_option, write_database_settings
from larinit.exceptions import EnvFileError
from larinit.integrations.network import is_port_available
from larinit.integrations.runner import ProcessRunner
from larinit.setup.prompts import PortCheck, Prompter

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"
ENV_TEMPLATE_FILENAME = ".env.example"
SQLITE_DATABASE_PATH = Path("database") / "database.sqlite"

DEFAULT_APP_URL = "http://localhost:8000"
DEFAULT_APP_PORT = 8000
DEFAULT_VITE_PORT = 5173

MIGRATE_COMMAND = ("php", "artisan", "migrate", "--no-interaction")


class WizardStep(Enum):
    ENSURE_ENV_FILE = "ensure_env_file"
    SELECT_DATABASE = "select_database"
    CONFIGURE_DATABASE = "configure_database"
    COLLECT_APP_URL = "collect_app_url"
    COLLECT_PORTS = "collect_ports"
    OFFER_MIGRATIONS = "offer_migrations"
    OFFER_DEPENDENCY_BUILD = "offer_dependency_build"


@dataclass(frozen=True)
class ProjectConfig:
    """Decisions collected by the wizard.

    Attributes:
        name: Project name
        database: Driver identifier, or None when no database is configured
        app_url: Value written to APP_URL
        app_port: Value written to APP_PORT (None unless ports were asked)
        vite_port: Value written to VITE_PORT (None unless ports were asked)
        run_migrations: Whether migrations were requested
        migrations_failed: Whether the requested migrations failed
        run_npm: Whether npm install/build should run
    """

    name: str
    database: Optional[str]
    app_url: str
    app_port: Optional[int] = None
    vite_port: Optional[int] = None
    run_migrations: bool = False
    migrations_failed: bool = False
    run_npm: bool = False


@dataclass(frozen=True)
class WizardResult:
    """Outcome of a wizard run.

    Attributes:
        config: Collected decisions
        env_path: The .env file that was configured
        completed: Steps that ran, in order
        skipped: Steps that were skipped, in order
        warnings: Non-fatal problems reported along the way
    """

    config: ProjectConfig
    env_path: Path
    completed: list[WizardStep] = field(default_factory=list)
    skipped: list[WizardStep] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class SetupWizard:
    """Walks the user through the initial .env configuration.

    Example:
        >>> wizard = SetupWizard(options, runner=ProcessRunner(), prompter=Prompter())
        >>> result = wizard.run()
        >>> result.config.database
        'sqlite'
    """

    def __init__(
        self,
        options: InstallOptions,
        runner: ProcessRunner,
        prompter: Prompter,
        console: Optional[Console] = None,
        port_check: PortCheck = is_port_available,
    ):
        self.options = options
        self.project_dir = options.directory
        self.env_path = self.project_dir / ENV_FILENAME
        self.template_path = self.project_dir / ENV_TEMPLATE_FILENAME
        self.runner = runner
        self.prompter = prompter
        self.console = console or Console(quiet=options.quiet)
        self.port_check = port_check

        self._completed: list[WizardStep] = []
        self._skipped: list[WizardStep] = []
        self._warnings: list[str] = []
        self._migrations_failed = False

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)

    def _set_env(self, key: str, value: str) -> None:
        try:
            env_file.set_key(self.env_path, key, value)
        except EnvFileError as e:
            self._warn(f"Could not write {key}: {e}")

    def _done(self, step: WizardStep) -> None:
        self._completed.append(step)

    def _skip(self, step: WizardStep) -> None:
        logger.debug(f"Skipping {step.value}")
        self._skipped.append(step)

    def run(self) -> WizardResult:
        """Run every step in order.

        Raises:
            EnvFileError: If .env cannot be created from .env.example
        """
        self.console.info("\nRunning Laravel project setup...")

        self.ensure_env_file()
        database = self.select_database()
        self.configure_database(database)
        app_url = self.collect_app_url()
        app_port, vite_port = self.collect_ports()
        run_migrations = self.offer_migrations(database)
        run_npm = self.offer_dependency_build()

        config = ProjectConfig(
            name=self.options.name,
            database=database,
            app_url=app_url,
            app_port=app_port,
            vite_port=vite_port,
            run_migrations=run_migrations,
            migrations_failed=self._migrations_failed,
            run_npm=run_npm,
        )
        return WizardResult(
            config=config,
            env_path=self.env_path,
            completed=list(self._completed),
            skipped=list(self._skipped),
            warnings=list(self._warnings),
        )

    def ensure_env_file(self) -> None:
        if self.env_path.exists():
            self._skip(WizardStep.ENSURE_ENV_FILE)
            return
        env_file.copy_file(self.template_path, self.env_path)
        self.console.info(f"Copied {ENV_TEMPLATE_FILENAME} to {ENV_FILENAME}")
        self._done(WizardStep.ENSURE_ENV_FILE)

    def select_database(self) -> str:
        if self.options.database is not None:
            self._skip(WizardStep.SELECT_DATABASE)
            return self.options.database

        index = self.prompter.choose(
            "Which database will your application use?",
            [option.label for option in DATABASE_OPTIONS],
        )
        self._done(WizardStep.SELECT_DATABASE)
        return DATABASE_OPTIONS[index].driver

    def configure_database(self, database: Optional[str]) -> None:
        if database is None:
            self._skip(WizardStep.CONFIGURE_DATABASE)
            return
        try:
            write_database_settings(self.env_path, self.template_path, database, self.options.name)
        except EnvFileError as e:
            self._warn(f"Could not write database settings: {e}")
            return
        self.console.info(f"Configured {get_option(database).label} database")
        self._done(WizardStep.CONFIGURE_DATABASE)

    def collect_app_url(self) -> str:
        app_url = self.prompter.ask_string("App URL", DEFAULT_APP_URL)
        self._set_env("APP_URL", app_url)
        self._done(WizardStep.COLLECT_APP_URL)
        return app_url

    def collect_ports(self) -> tuple[Optional[int], Optional[int]]:
        if not self.options.ask_ports:
            self._skip(WizardStep.COLLECT_PORTS)
            return None, None

        app_port = self.prompter.ask_port("App port", DEFAULT_APP_PORT, self.port_check)
        self._set_env("APP_PORT", str(app_port))
        vite_port = self.prompter.ask_port("Vite port", DEFAULT_VITE_PORT, self.port_check)
        self._set_env("VITE_PORT", str(vite_port))
        self._done(WizardStep.COLLECT_PORTS)
        return app_port, vite_port

    def create_sqlite_database(self) -> bool:
        """Create the empty SQLite database file. Failure is only a warning."""
        db_path = self.project_dir / SQLITE_DATABASE_PATH
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            db_path.touch()
        except OSError as e:
            self._warn(f"Could not create SQLite database file: {e}")
            return False
        logger.debug(f"Created {db_path}")
        return True

    def offer_migrations(self, database: Optional[str]) -> bool:
        if database is None:
            self._skip(WizardStep.OFFER_MIGRATIONS)
            return False

        if database == ZERO_CONFIG_DRIVER:
            self.create_sqlite_database()

        self._done(WizardStep.OFFER_MIGRATIONS)
        if not self.prompter.confirm("Would you like to run the default database migrations?"):
            return False

        self.console.info("Running database migrations...")
        if not self.runner.run(MIGRATE_COMMAND, cwd=self.project_dir):
            self._migrations_failed = True
            self._warn("Database migration failed")
        return True

    def offer_dependency_build(self) -> bool:
        if self.options.npm is not None:
            self._skip(WizardStep.OFFER_DEPENDENCY_BUILD)
            return self.options.npm

        decision = self.prompter.confirm("Would you like to run npm install and npm run build?")
        self._done(WizardStep.OFFER_DEPENDENCY_BUILD)
        return decision


def format_summary(result: WizardResult) -> str:
    """Format the wizard outcome for the final console output.

    Examples:
        >>> print(format_summary(result))
        Configuration Summary:
        ✓ Database: pgsql (my_blog)
        ✓ App URL: http://localhost:8000
        ✗ Migrations: Skipped
        ✓ NPM build: Enabled
    """
    config = result.config
    lines = ["Configuration Summary:"]

    if config.database:
        database_name = None
        with suppress(EnvFileError):
            database_name = env_file.read_value(result.env_path, "DB_DATABASE")
        suffix = f" ({database_name})" if database_name else ""
        lines.append(f"✓ Database: {config.database}{suffix}")
    else:
        lines.append("✗ Database: Not configured")

    lines.append(f"✓ App URL: {config.app_url}")
    if config.app_port is not None:
        lines.append(f"✓ App port: {config.app_port}")
    if config.vite_port is not None:
        lines.append(f"✓ Vite port: {config.vite_port}")

    if config.migrations_failed:
        lines.append("✗ Migrations: Failed")
    elif config.run_migrations:
        lines.append("✓ Migrations: Run")
    else:
        lines.append("✗ Migrations: Skipped")

    symbol = "✓" if config.run_npm else "✗"
    lines.append(f"{symbol} NPM build: {'Enabled' if config.run_npm else 'Disabled'}")

    for warning in result.warnings:
        lines.append(f"! {warning}")

    return "\n".join(lines)
