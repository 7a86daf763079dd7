"""Tests for the setup wizard."""

from unittest.mock import patch

import pytest

from larinit.core.env_file import load_lines, read_value
from larinit.exceptions import EnvFileError, EnvFileNotFoundError
from larinit.setup.wizard import (
    DEFAULT_APP_URL,
    MIGRATE_COMMAND,
    SQLITE_DATABASE_PATH,
    ProjectConfig,
    SetupWizard,
    WizardResult,
    WizardStep,
    format_summary,
)


def always_free(port):
    return True


@pytest.fixture
def make_wizard(make_options, fake_runner, scripted_prompter):
    """Factory fixture returning (wizard, runner, prompter)."""

    def _create(*answers, runner=None, check=always_free, **option_overrides):
        runner = runner or fake_runner()
        prompter = scripted_prompter(*answers)
        wizard = SetupWizard(make_options(**option_overrides), runner=runner, prompter=prompter, port_check=check)
        return wizard, runner, prompter

    return _create


class TestWizardRun:
    """Test complete wizard sessions."""

    def test_postgres_session(self, make_wizard, project_dir):
        """Choosing PostgreSQL configures pgsql with port 5432 in both files."""
        wizard, runner, _ = make_wizard("4", "", "n", "n")

        result = wizard.run()

        env_path = project_dir / ".env"
        assert result.config.database == "pgsql"
        assert read_value(env_path, "DB_CONNECTION") == "pgsql"
        assert read_value(env_path, "DB_PORT") == "5432"
        assert read_value(env_path, "DB_DATABASE") == "my_blog"
        assert read_value(project_dir / ".env.example", "DB_PORT") == "5432"
        assert read_value(env_path, "APP_URL") == DEFAULT_APP_URL
        assert result.config.run_migrations is False
        assert result.config.run_npm is False
        assert runner.commands == []

    def test_default_answers(self, make_wizard, project_dir):
        """Blank answers pick SQLite and the default URL."""
        wizard, _, _ = make_wizard("", "", "", "")

        result = wizard.run()

        assert result.config == ProjectConfig(name="my-blog", database="sqlite", app_url=DEFAULT_APP_URL)
        assert read_value(project_dir / ".env", "DB_CONNECTION") == "sqlite"
        assert result.warnings == []

    def test_step_order(self, make_wizard):
        """Steps run in a fixed order; ports are skipped without --ports."""
        wizard, _, _ = make_wizard("2", "", "n", "n")

        result = wizard.run()

        assert result.completed == [
            WizardStep.ENSURE_ENV_FILE,
            WizardStep.SELECT_DATABASE,
            WizardStep.CONFIGURE_DATABASE,
            WizardStep.COLLECT_APP_URL,
            WizardStep.OFFER_MIGRATIONS,
            WizardStep.OFFER_DEPENDENCY_BUILD,
        ]
        assert result.skipped == [WizardStep.COLLECT_PORTS]

    def test_custom_app_url(self, make_wizard, project_dir):
        wizard, _, _ = make_wizard("1", "https://blog.test", "n", "n")

        result = wizard.run()

        assert result.config.app_url == "https://blog.test"
        assert read_value(project_dir / ".env", "APP_URL") == "https://blog.test"
        # The template keeps its placeholder
        assert read_value(project_dir / ".env.example", "APP_URL") == "http://localhost"


class TestEnsureEnvFile:
    """Test creation of .env from .env.example."""

    def test_copies_template(self, make_wizard, project_dir, env_example_content):
        wizard, _, _ = make_wizard()

        wizard.ensure_env_file()

        assert (project_dir / ".env").read_text(encoding="utf-8") == env_example_content

    def test_existing_env_kept(self, make_wizard, project_dir):
        """An existing .env is not overwritten."""
        (project_dir / ".env").write_text("APP_KEY=base64:abc\n", encoding="utf-8")
        wizard, _, _ = make_wizard()

        wizard.ensure_env_file()

        assert load_lines(project_dir / ".env") == ["APP_KEY=base64:abc"]

    def test_missing_template_is_fatal(self, make_wizard, project_dir):
        """Without .env.example the wizard cannot continue."""
        (project_dir / ".env.example").unlink()
        wizard, _, _ = make_wizard("", "", "", "")

        with pytest.raises(EnvFileNotFoundError):
            wizard.run()


class TestSelectDatabase:
    """Test database selection."""

    def test_preset_driver_skips_prompt(self, make_wizard):
        """--database bypasses the menu."""
        wizard, _, prompter = make_wizard(database="mariadb")

        assert wizard.select_database() == "mariadb"
        assert prompter.prompts == []

    def test_invalid_choice_reprompts(self, make_wizard):
        wizard, _, prompter = make_wizard("9", "5")

        assert wizard.select_database() == "sqlsrv"
        assert len(prompter.prompts) == 2


class TestConfigureDatabase:
    """Test DB_* writing from the wizard."""

    def test_write_failure_is_warning(self, make_wizard):
        """A failed write is reported and the wizard goes on."""
        wizard, _, _ = make_wizard("", "", "n", "n", database="mysql")

        with patch(
            "larinit.setup.wizard.write_database_settings",
            side_effect=EnvFileError("Failed to write env file", path=".env"),
        ):
            result = wizard.run()

        assert WizardStep.CONFIGURE_DATABASE not in result.completed
        assert any("database settings" in warning for warning in result.warnings)
        assert WizardStep.COLLECT_APP_URL in result.completed


class TestCollectPorts:
    """Test the optional port questions."""

    def test_ports_written(self, make_wizard, project_dir):
        """With --ports, APP_PORT and VITE_PORT are appended to .env."""
        wizard, _, _ = make_wizard("", "", "8080", "", "n", "n", ask_ports=True)

        result = wizard.run()

        assert result.config.app_port == 8080
        assert result.config.vite_port == 5173
        lines = load_lines(project_dir / ".env")
        assert lines[-2:] == ["APP_PORT=8080", "VITE_PORT=5173"]
        assert WizardStep.COLLECT_PORTS in result.completed

    def test_busy_port_refused(self, make_wizard):
        """A busy default port is refused and the next answer is used."""
        wizard, _, prompter = make_wizard("", "8001", "", check=lambda port: port != 8000, ask_ports=True)
        wizard.ensure_env_file()

        assert wizard.collect_ports() == (8001, 5173)
        assert "Default port 8000 is not available. Please choose another port." in prompter.output

    def test_skipped_without_flag(self, make_wizard, project_dir):
        wizard, _, prompter = make_wizard()

        assert wizard.collect_ports() == (None, None)
        assert prompter.prompts == []


class TestOfferMigrations:
    """Test the migration question."""

    def test_runs_migrate_on_yes(self, make_wizard, project_dir):
        wizard, runner, _ = make_wizard("y", database="mysql")

        assert wizard.offer_migrations("mysql") is True
        assert runner.calls == [{"command": MIGRATE_COMMAND, "cwd": project_dir, "env": None, "quiet": None}]

    def test_no_runs_nothing(self, make_wizard):
        wizard, runner, _ = make_wizard("n")

        assert wizard.offer_migrations("mysql") is False
        assert runner.commands == []

    def test_sqlite_file_created_before_question(self, make_wizard, project_dir):
        """The SQLite database file exists even when migrations are declined."""
        wizard, _, _ = make_wizard("n")

        wizard.offer_migrations("sqlite")

        assert (project_dir / SQLITE_DATABASE_PATH).is_file()

    def test_no_database_skips(self, make_wizard):
        wizard, _, prompter = make_wizard()

        assert wizard.offer_migrations(None) is False
        assert prompter.prompts == []

    def test_migration_failure_is_warning(self, make_wizard, fake_runner):
        runner = fake_runner(failing=[MIGRATE_COMMAND])
        wizard, _, _ = make_wizard("y", runner=runner)

        assert wizard.offer_migrations("pgsql") is True
        assert wizard._warnings == ["Database migration failed"]
        assert wizard._migrations_failed is True

    def test_sqlite_file_failure_is_warning(self, make_wizard):
        wizard, _, _ = make_wizard("n")

        with patch("pathlib.Path.touch", side_effect=PermissionError("read-only")):
            wizard.offer_migrations("sqlite")

        assert any("SQLite database file" in warning for warning in wizard._warnings)


class TestOfferDependencyBuild:
    """Test the npm question."""

    @pytest.mark.parametrize("npm", [True, False])
    def test_flag_skips_question(self, make_wizard, npm):
        wizard, _, prompter = make_wizard(npm=npm)

        assert wizard.offer_dependency_build() is npm
        assert prompter.prompts == []

    def test_asks_without_flag(self, make_wizard):
        wizard, _, prompter = make_wizard("yes")

        assert wizard.offer_dependency_build() is True
        assert prompter.prompts == ["Would you like to run npm install and npm run build? (y/N): "]


class TestFormatSummary:
    """Test the configuration summary."""

    def test_full_summary(self, tmp_path):
        config = ProjectConfig(
            name="blog",
            database="pgsql",
            app_url="http://localhost:8000",
            app_port=8080,
            vite_port=5173,
            run_migrations=True,
            migrations_failed=True,
            run_npm=False,
        )
        result = WizardResult(config=config, env_path=tmp_path / ".env", warnings=["Database migration failed"])

        assert format_summary(result).split("\n") == [
            "Configuration Summary:",
            "✓ Database: pgsql",
            "✓ App URL: http://localhost:8000",
            "✓ App port: 8080",
            "✓ Vite port: 5173",
            "✗ Migrations: Failed",
            "✗ NPM build: Disabled",
            "! Database migration failed",
        ]

    def test_minimal_summary(self, tmp_path):
        config = ProjectConfig(name="blog", database=None, app_url="http://localhost:8000", run_npm=True)
        output = format_summary(WizardResult(config=config, env_path=tmp_path / ".env"))

        assert "✗ Database: Not configured" in output
        assert "✗ Migrations: Skipped" in output
        assert "✓ NPM build: Enabled" in output
        assert "port" not in output

    def test_database_name_from_env_file(self, tmp_path):
        """The configured DB_DATABASE is shown next to the driver."""
        env_path = tmp_path / ".env"
        env_path.write_text("DB_CONNECTION=mysql\nDB_DATABASE=my_blog\n", encoding="utf-8")
        config = ProjectConfig(name="my-blog", database="mysql", app_url="http://localhost", run_migrations=True)

        output = format_summary(WizardResult(config=config, env_path=env_path))

        assert "✓ Database: mysql (my_blog)" in output
        assert "✓ Migrations: Run" in output

    def test_failed_migration_run(self, make_wizard, fake_runner, project_dir):
        runner = fake_runner(failing=[MIGRATE_COMMAND])
        wizard, _, _ = make_wizard("4", "", "y", "n", runner=runner)

        result = wizard.run()

        assert result.config.migrations_failed is True
        output = format_summary(result)
        assert "✓ Database: pgsql (my_blog)" in output
        assert "✗ Migrations: Failed" in output
        assert "Migrations: Run" not in output
