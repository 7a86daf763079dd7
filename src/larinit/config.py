"""Install options and user defaults.

InstallOptions is built once from the parsed command line (merged over the
optional user defaults file) and passed explicitly to the installer and the
setup wizard.

User defaults (YAML):
    Default location: ``platformdirs.user_config_dir("larinit")/config.yaml``
        Linux: ~/.config/larinit/config.yaml
        macOS: ~/Library/Application Support/larinit/config.yaml
        Windows: %LOCALAPPDATA%/larinit/config.yaml
    Overridden by the LARINIT_CONFIG environment variable or --config.

    Example:
        database: pgsql
        npm: true
        pest: false
        quiet: false
        git:
          enabled: true
          branch: main
        github:
          organization: acme
          visibility: --private
"""

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from platformdirs import user_config_dir

from larinit.core.validation import DATABASE_DRIVERS, validate_database_driver, validate_project_name
from larinit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "larinit"
CONFIG_ENV_VAR = "LARINIT_CONFIG"

DEFAULT_GITHUB_FLAGS = "--private"

# Top-level keys and their expected types
_SCALAR_KEYS: dict[str, type] = {
    "database": str,
    "npm": bool,
    "pest": bool,
    "quiet": bool,
}
_SECTION_KEYS: dict[str, dict[str, type]] = {
    "git": {"enabled": bool, "branch": str},
    "github": {"organization": str, "visibility": str},
}


@dataclass(frozen=True)
class InstallOptions:
    """Everything the user decided on the command line.

    Attributes:
        name: Project name (also the directory name)
        directory: Absolute path of the project directory
        database: Pre-selected driver, or None to ask
        npm: True/False when decided by flag, None to ask
        force: Remove an existing directory first
        quiet: Suppress non-essential output
        git: Initialize a git repository
        branch: Branch name for the first commit (None: git default)
        github: ``gh repo create`` visibility flags, None to skip GitHub
        organization: GitHub organization owning the repository
        react / vue / livewire: Laravel starter kit selection
        livewire_class_components: Livewire kit with class components
        workos: Starter kit variant using WorkOS authentication
        using: Custom community starter kit package
        dev: Install the development release
        pest: Replace PHPUnit with Pest
        phpunit: Keep PHPUnit (the default test framework)
        ask_ports: Prompt for APP_PORT / VITE_PORT
    """

    name: str
    directory: Path
    database: Optional[str] = None
    npm: Optional[bool] = None
    force: bool = False
    quiet: bool = False
    git: bool = False
    branch: Optional[str] = None
    github: Optional[str] = None
    organization: Optional[str] = None
    react: bool = False
    vue: bool = False
    livewire: bool = False
    livewire_class_components: bool = False
    workos: bool = False
    using: Optional[str] = None
    dev: bool = False
    pest: bool = False
    phpunit: bool = False
    ask_ports: bool = False

    @property
    def starter_kit(self) -> Optional[str]:
        """Composer package of the selected starter kit, if any."""
        if self.react:
            return "laravel/react-starter-kit"
        if self.vue:
            return "laravel/vue-starter-kit"
        if self.livewire:
            return "laravel/livewire-starter-kit"
        return self.using

    @property
    def version(self) -> Optional[str]:
        return "dev-master" if self.dev else None

    @property
    def wants_git(self) -> bool:
        return self.git or self.github is not None


def get_config_path(override: Optional[str] = None) -> Path:
    """Resolve the user defaults path (--config, then LARINIT_CONFIG, then platform dir)."""
    if override:
        return Path(override).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path(user_config_dir(APP_NAME)) / "config.yaml"


def validate_user_defaults(data: dict[str, Any]) -> list[str]:
    """Validate the user defaults structure.

    Args:
        data: Parsed YAML mapping

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[str] = []

    for key, value in data.items():
        if key in _SCALAR_KEYS:
            if not isinstance(value, _SCALAR_KEYS[key]):
                errors.append(f"{key} must be a {_SCALAR_KEYS[key].__name__}")
        elif key in _SECTION_KEYS:
            if not isinstance(value, dict):
                errors.append(f"{key} must be a mapping")
                continue
            fields = _SECTION_KEYS[key]
            for sub_key, sub_value in value.items():
                if sub_key not in fields:
                    errors.append(f"Unknown key: {key}.{sub_key}")
                elif not isinstance(sub_value, fields[sub_key]):
                    errors.append(f"{key}.{sub_key} must be a {fields[sub_key].__name__}")
        else:
            errors.append(f"Unknown key: {key}")

    database = data.get("database")
    if isinstance(database, str) and database not in DATABASE_DRIVERS:
        errors.append(f"database must be one of: {', '.join(DATABASE_DRIVERS)}")

    return errors


def load_user_defaults(path: Path) -> dict[str, Any]:
    """Load the user defaults file.

    A missing or empty file means no defaults.

    Raises:
        ConfigurationError: If the file is unreadable, not valid YAML or fails validation
    """
    if not path.exists():
        logger.debug(f"No user defaults at {path}")
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        line = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            line = mark.line + 1
        raise ConfigurationError(f"Invalid YAML syntax: {e}", file_path=str(path), line_number=line) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read user defaults: {e}", file_path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("User defaults must be a YAML mapping", file_path=str(path))

    errors = validate_user_defaults(data)
    if errors:
        raise ConfigurationError("; ".join(errors), file_path=str(path))

    logger.debug(f"Loaded user defaults from {path}")
    return data


def build_options(
    args: argparse.Namespace,
    defaults: Optional[dict[str, Any]] = None,
    base_dir: Optional[Path] = None,
) -> InstallOptions:
    """Build InstallOptions from parsed arguments and user defaults.

    Command-line values win over defaults. Validation happens here so that
    invalid input is rejected before anything touches the filesystem.

    Args:
        args: Namespace produced by larinit.cli.build_parser()
        defaults: Result of load_user_defaults()
        base_dir: Directory the project is created in (default: cwd)

    Raises:
        InvalidInputError: For an invalid project name or database driver
    """
    defaults = defaults or {}
    git_defaults = defaults.get("git", {})
    github_defaults = defaults.get("github", {})

    validate_project_name(args.name)

    database = args.database if args.database is not None else defaults.get("database")
    if database is not None:
        validate_database_driver(database)

    npm = args.npm if args.npm is not None else defaults.get("npm")

    github = args.github
    if github is not None and github in ("", "true"):
        github = github_defaults.get("visibility", DEFAULT_GITHUB_FLAGS)

    base_dir = base_dir or Path.cwd()

    return InstallOptions(
        name=args.name,
        directory=(base_dir / args.name).absolute(),
        database=database,
        npm=npm,
        force=args.force,
        quiet=args.quiet or defaults.get("quiet", False),
        git=args.git or git_defaults.get("enabled", False),
        branch=args.branch or git_defaults.get("branch"),
        github=github,
        organization=args.organization or github_defaults.get("organization"),
        react=args.react,
        vue=args.vue,
        livewire=args.livewire,
        livewire_class_components=args.livewire_class_components,
        workos=args.workos,
        using=args.using,
        dev=args.dev,
        pest=args.pest or (defaults.get("pest", False) and not args.phpunit),
        phpunit=args.phpunit,
        ask_ports=args.ports,
    )
