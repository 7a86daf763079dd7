"""Database driver catalogue and .env database configuration."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from larinit.core.env_file import comment_database_defaults, set_key, uncomment_database_defaults

logger = logging.getLogger(__name__)

ZERO_CONFIG_DRIVER = "sqlite"


@dataclass(frozen=True)
class DatabaseOption:
    """A database offered by the interactive menu.

    Attributes:
        label: Name shown to the user
        driver: Value written to DB_CONNECTION
        default_port: Port written to DB_PORT (None keeps the template's 3306)
    """

    label: str
    driver: str
    default_port: Optional[str] = None


# Display order of the interactive menu. The first entry is the default.
DATABASE_OPTIONS = (
    DatabaseOption("SQLite", "sqlite"),
    DatabaseOption("MySQL", "mysql"),
    DatabaseOption("MariaDB", "mariadb"),
    DatabaseOption("PostgreSQL", "pgsql", default_port="5432"),
    DatabaseOption("SQL Server", "sqlsrv", default_port="1433"),
)

# Default port already present in the template, shared by MySQL and MariaDB
TEMPLATE_DB_PORT = "3306"


def get_option(driver: str) -> DatabaseOption:
    """Look up the menu entry for a driver identifier.

    Raises:
        KeyError: If the driver is unknown
    """
    for option in DATABASE_OPTIONS:
        if option.driver == driver:
            return option
    raise KeyError(driver)


def database_name_for(project_name: str) -> str:
    """Derive DB_DATABASE from a project name.

    Examples:
        >>> database_name_for("My-Blog-App")
        'my_blog_app'
    """
    return project_name.lower().replace("-", "_")


def write_database_settings(env_path: Path, template_path: Path, driver: str, project_name: str) -> list[str]:
    """Write the database settings for ``driver`` into .env and its template.

    Both files receive the same changes so they stay in sync:
    - DB_CONNECTION is set to the driver
    - SQLite: the host/port/name/user/password defaults are commented out
    - Others: those defaults are uncommented, DB_PORT gets the driver's
      well-known port (PostgreSQL, SQL Server) and DB_DATABASE is derived
      from the project name

    Args:
        env_path: Active .env file
        template_path: .env.example kept in sync
        driver: Driver identifier (see DATABASE_OPTIONS)
        project_name: Project name used for DB_DATABASE

    Returns:
        Keys written, in order (for the summary)

    Raises:
        EnvFileError: If either file cannot be read or written
    """
    option = get_option(driver)
    files = (env_path, template_path)
    written = ["DB_CONNECTION"]

    for path in files:
        set_key(path, "DB_CONNECTION", option.driver)

    if option.driver == ZERO_CONFIG_DRIVER:
        for path in files:
            comment_database_defaults(path)
        logger.debug("Commented out server database defaults for SQLite")
        return written

    for path in files:
        uncomment_database_defaults(path)

    if option.default_port:
        for path in files:
            set_key(path, "DB_PORT", option.default_port)
        written.append("DB_PORT")

    db_name = database_name_for(project_name)
    for path in files:
        set_key(path, "DB_DATABASE", db_name)
    written.append("DB_DATABASE")

    logger.debug(f"Configured {option.label} database {db_name!r}")
    return written
