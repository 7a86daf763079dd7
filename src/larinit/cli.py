"""Command-line entry point.

Usage:
    larinit new <project-name> [--database DRIVER] [--npm | --no-npm] [--git]
                               [--github [FLAGS]] [--pest] [--force] [--quiet]

Exit status:
    0  Project created, or installation cancelled with Ctrl+C
    1  Fatal error (invalid input, missing tool, project creation failed)
    2  Usage error
"""

import argparse
import logging
import sys
from typing import Optional

from larinit import __version__
from larinit.config import build_options, get_config_path, load_user_defaults
from larinit.console import Console
from larinit.core.validation import DATABASE_DRIVERS, ensure_target_available
from larinit.exceptions import InstallationCancelled, LarinitError
from larinit.installer import Installer, format_completion_message
from larinit.integrations.runner import CancellationToken, ProcessRunner, handle_interrupts
from larinit.setup.env_detector import ensure_required_tools
from larinit.setup.prompts import Prompter
from larinit.setup.wizard import format_summary

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send warnings (or everything with --verbose) to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="larinit",
        description="Create and configure new Laravel applications.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    new = subparsers.add_parser("new", help="Create a new Laravel application")
    new.add_argument("name", help="Project name (directory to create)")
    new.add_argument(
        "--database",
        default=None,
        help=f"The database driver your application will use. Possible values are: {', '.join(DATABASE_DRIVERS)}",
    )
    new.add_argument(
        "--npm",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Install and build NPM dependencies (--no-npm: skip without asking)",
    )
    new.add_argument("--git", action="store_true", help="Initialize a Git repository")
    new.add_argument("--branch", default=None, help="The branch that should be created for a new repository")
    new.add_argument(
        "--github",
        nargs="?",
        const="",
        default=None,
        metavar="FLAGS",
        help='Create a new repository on GitHub (default visibility: "--private")',
    )
    new.add_argument("--organization", default=None, help="The GitHub organization to create the new repository for")

    kits = new.add_mutually_exclusive_group()
    kits.add_argument("--react", action="store_true", help="Install the React Starter Kit")
    kits.add_argument("--vue", action="store_true", help="Install the Vue Starter Kit")
    kits.add_argument("--livewire", action="store_true", help="Install the Livewire Starter Kit")
    kits.add_argument("--using", default=None, help="Install a custom starter kit from a community maintained package")
    new.add_argument(
        "--livewire-class-components",
        action="store_true",
        help="Generate stand-alone Livewire class components",
    )
    new.add_argument("--workos", action="store_true", help="Use WorkOS for authentication")
    new.add_argument("--dev", action="store_true", help='Install the latest "development" release')

    tests = new.add_mutually_exclusive_group()
    tests.add_argument("--pest", action="store_true", help="Install the Pest testing framework")
    tests.add_argument("--phpunit", action="store_true", help="Install the PHPUnit testing framework")

    new.add_argument("--ports", action="store_true", help="Ask for the application and Vite ports")
    new.add_argument("--config", default=None, help="Path to a user defaults YAML file")
    new.add_argument("-f", "--force", action="store_true", help="Forces install even if the directory already exists")
    new.add_argument("-q", "--quiet", action="store_true", help="Suppress output")
    new.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    new.set_defaults(handler=cmd_new)

    return parser


def cmd_new(args: argparse.Namespace) -> int:
    """Create a new project."""
    defaults = load_user_defaults(get_config_path(args.config))
    options = build_options(args, defaults)
    ensure_target_available(options.directory, options.force)

    console = Console(quiet=options.quiet)
    token = CancellationToken()

    with handle_interrupts(token):
        console.logo()
        ensure_required_tools()

        runner = ProcessRunner(quiet=options.quiet, token=token)
        installer = Installer(options, runner=runner, prompter=Prompter(output_func=console.echo), console=console)
        result = installer.install()

    if result.wizard is not None:
        console.info("")
        console.info(format_summary(result.wizard))
    console.echo(format_completion_message(result, console))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``larinit`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(getattr(args, "verbose", False))

    try:
        return args.handler(args)
    except (InstallationCancelled, KeyboardInterrupt):
        print("\nGoodbye!")
        return 0
    except LarinitError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
