"""Core env file handling.

- env_file: KEY=VALUE file store (set_key, replace_literal, copy_file)
- database: Database driver catalogue and .env database configuration
- validation: Project name / database flag / target directory checks
"""

from larinit.core.database import DATABASE_OPTIONS, DatabaseOption, write_database_settings
from larinit.core.env_file import copy_file, load_lines, read_value, replace_literal, set_key
from larinit.core.validation import DATABASE_DRIVERS, validate_database_driver, validate_project_name

__all__ = [
    "DATABASE_DRIVERS",
    "DATABASE_OPTIONS",
    "DatabaseOption",
    "write_database_settings",
    "copy_file",
    "load_lines",
    "read_value",
    "replace_literal",
    "set_key",
    "validate_database_driver",
    "validate_project_name",
]
